"""CLI entry point for sign computation.

Edit the birth variables at the top, then run:
    uv run python src/moonmanifest/moonsign.py
"""

from dotenv import load_dotenv

load_dotenv()

from moonmanifest.compute import run  # noqa: E402
from moonmanifest.logs import setup_logging  # noqa: E402
from moonmanifest.models import BirthQuery  # noqa: E402

birth_date = "1990-07-04"
birth_time = "06:30"
city, region, country = "New York", "New York", "United States"

setup_logging()
profile = run(
    BirthQuery(
        birth_date=birth_date,
        birth_time=birth_time,
        city=city,
        region=region,
        country=country,
    )
)
print(f"Sun: {profile.sun_sign}  Moon: {profile.moon_sign}")
print(profile.to_record())
