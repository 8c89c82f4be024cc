"""Error taxonomy shared by the location and sign layers.

Third-party failures (httpx, skyfield, pytz) are re-raised as one of these
with the original exception chained, so callers never depend on a
particular SDK's exception types.
"""


class MoonManifestError(Exception):
    """Base class for every failure surfaced by the core."""


class InvalidInputError(MoonManifestError):
    """Bad date, out-of-range coordinate, or empty location field."""


class NotFoundError(MoonManifestError):
    """A lookup completed but produced no candidates."""


class LookupFailedError(MoonManifestError):
    """Network or service failure in an external lookup."""


class ComputationError(MoonManifestError):
    """Ephemeris evaluation or sign mapping failed for valid input."""
