"""Debounced suggestion fetching for free-text location inputs.

Each keystroke reports the raw text through ``on_change`` immediately and
restarts a quiet-period timer. When the timer fires a fetch is issued and
tagged with a sequence number; a response is applied only if no newer
fetch has been issued since, so a slow early request can never overwrite
the results of a faster later one.
"""

import asyncio
from collections.abc import Awaitable, Callable
from enum import Enum

import structlog

from moonmanifest.locations import suggest
from moonmanifest.models import LocationData

_log = structlog.get_logger(__name__)

DEBOUNCE_SECONDS = 0.15


class AutocompleteState(Enum):
    IDLE = "idle"
    TYPING = "typing"  # debounce timer pending
    FETCHING = "fetching"
    OPEN = "open"
    CLOSED = "closed"


class Autocomplete:
    """State holder for one autocomplete field. Must be driven from a running event loop."""

    def __init__(
        self,
        on_change: Callable[[str], None],
        on_search: Callable[[str], Awaitable[list[str]]],
        debounce: float = DEBOUNCE_SECONDS,
        value: str = "",
    ):
        self._on_change = on_change
        self._on_search = on_search
        self._debounce = debounce
        self.value = value
        self.suggestions: list[str] = []
        self.state = AutocompleteState.IDLE
        self._seq = 0
        self._timer: asyncio.Task | None = None
        self._inflight: set[asyncio.Task] = set()
        self._closed = False

    @property
    def is_open(self) -> bool:
        return self.state is AutocompleteState.OPEN

    @property
    def loading(self) -> bool:
        return bool(self._inflight)

    def type(self, text: str) -> None:
        """Handle a keystroke: report the raw text, then (re)start the debounce."""
        self.value = text
        self._on_change(text)
        self._cancel_timer()
        if not text:
            self._seq += 1  # invalidate anything in flight
            self.suggestions = []
            self.state = AutocompleteState.CLOSED
            return
        self.state = AutocompleteState.TYPING
        self._timer = asyncio.get_running_loop().create_task(self._debounced(text))

    def select(self, suggestion: str) -> None:
        self._cancel_timer()
        self._seq += 1
        self.value = suggestion
        self._on_change(suggestion)
        self.state = AutocompleteState.CLOSED

    def click_outside(self) -> None:
        """Close the list, keeping the current value."""
        if self.state in (AutocompleteState.OPEN, AutocompleteState.FETCHING):
            self.state = AutocompleteState.CLOSED

    def focus(self) -> None:
        """Reopen the last fetched list when the field is non-empty."""
        if self.value and self.suggestions:
            self.state = AutocompleteState.OPEN

    def close(self) -> None:
        """Detach the field: drop the pending timer and ignore later responses."""
        self._closed = True
        self._cancel_timer()

    async def wait_idle(self) -> None:
        """Wait until no debounce timer or fetch is pending."""
        while True:
            pending = [t for t in (self._timer, *self._inflight) if t is not None and not t.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    async def _debounced(self, text: str) -> None:
        await asyncio.sleep(self._debounce)
        self._seq += 1
        task = asyncio.get_running_loop().create_task(self._fetch(self._seq, text))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        self.state = AutocompleteState.FETCHING

    async def _fetch(self, seq: int, text: str) -> None:
        try:
            results = list(await self._on_search(text))
        except Exception as exc:
            _log.warning("suggestion_fetch_failed", query=text, error=repr(exc))
            if self._is_current(seq):
                self.suggestions = []
                self.state = AutocompleteState.CLOSED
            return
        if not self._is_current(seq):
            _log.debug("suggestion_fetch_stale", query=text, seq=seq, latest=self._seq)
            return
        self.suggestions = results
        self.state = AutocompleteState.OPEN if results else AutocompleteState.CLOSED

    def _is_current(self, seq: int) -> bool:
        return not self._closed and seq == self._seq


def reference_search(
    entries: Callable[[], tuple[LocationData, ...]], limit: int = 10
) -> Callable[[str], Awaitable[list[str]]]:
    """Adapt a reference-data listing into an ``on_search`` callback."""

    async def search(text: str) -> list[str]:
        return suggest(entries(), text, limit)

    return search
