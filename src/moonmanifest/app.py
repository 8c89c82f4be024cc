"""Moon Manifest — Streamlit form that turns a birth date and place into Sun and Moon signs."""

import datetime
import html

import streamlit as st
from dotenv import load_dotenv

load_dotenv()

from moonmanifest.compute import run  # noqa: E402
from moonmanifest.errors import (  # noqa: E402
    ComputationError,
    InvalidInputError,
    LookupFailedError,
    NotFoundError,
)
from moonmanifest.geocoding import resolve_coordinates_cached  # noqa: E402
from moonmanifest.i18n import t  # noqa: E402
from moonmanifest.locations import (  # noqa: E402
    list_cities,
    list_countries,
    list_regions,
    suggest,
)
from moonmanifest.logs import setup_logging  # noqa: E402
from moonmanifest.models import BirthQuery  # noqa: E402

if "logging_ready" not in st.session_state:
    setup_logging()
    st.session_state.logging_ready = True

_lang: str = st.query_params.get("lang", "en")

st.set_page_config(page_title=t("page_title", _lang), page_icon="☾", layout="centered")

# --- Session state initialization ---

if "profile" not in st.session_state:
    st.session_state.profile = None
if "error_msg" not in st.session_state:
    st.session_state.error_msg = None

_ERROR_KEYS: dict[type, str] = {
    InvalidInputError: "error_input",
    NotFoundError: "error_not_found",
    LookupFailedError: "error_lookup",
    ComputationError: "error_compute",
}

st.title(f"☾ {t('page_title', _lang)}")

# --- Birth place ---

countries = list_countries()
country = st.selectbox(
    t("label_country", _lang),
    options=countries,
    format_func=lambda c: c.name,
)
regions = list_regions(country.code)
region = st.selectbox(
    t("label_region", _lang),
    options=regions,
    format_func=lambda r: r.name,
    disabled=not regions,
)

# Free text is allowed; the list only suggests known cities. Each keystroke
# commit reruns the script, so the debounce and stale-fetch handling of
# autocomplete.Autocomplete are not needed here; suggest() is the same matcher.
city = st.text_input(t("label_city", _lang))
city_options = suggest(list_cities(country.code, region.code if region else ""), city)
if city_options and city not in city_options:
    picked = st.selectbox(
        t("label_city_pick", _lang), options=[city, *city_options], index=0
    )
    city = picked

# --- Birth moment ---

birth_date = st.date_input(
    t("label_date", _lang),
    value=datetime.date(1990, 1, 1),
    min_value=datetime.date(1900, 1, 1),
    max_value=datetime.date.today(),
)
know_time = st.checkbox(t("label_know_time", _lang))
birth_time = (
    st.time_input(t("label_time", _lang), value=datetime.time(12, 0), step=300)
    if know_time
    else None
)

# --- Form submission handler ---

if st.button(t("btn_reveal", _lang), type="primary"):
    st.session_state.error_msg = None
    st.session_state.profile = None
    query = BirthQuery(
        birth_date=birth_date.isoformat(),
        birth_time=birth_time.strftime("%H:%M") if birth_time else None,
        city=city,
        region=region.name if region else country.name,
        country=country.name,
    )
    with st.spinner(t("loading_compute", _lang)):
        try:
            st.session_state.profile = run(query, resolver=resolve_coordinates_cached)
        except tuple(_ERROR_KEYS) as e:
            key = next(v for k, v in _ERROR_KEYS.items() if isinstance(e, k))
            st.session_state.error_msg = t(key, _lang).format(error=html.escape(str(e)))

# --- Result ---

if st.session_state.error_msg:
    st.error(st.session_state.error_msg)

profile = st.session_state.profile
if profile is not None:
    col1, col2 = st.columns(2)
    col1.metric(t("result_sun", _lang), profile.sun_sign)
    col2.metric(t("result_moon", _lang), profile.moon_sign)
    loc = profile.moment.location
    st.caption(f"{t('result_place', _lang)}: {loc.latitude:.4f}, {loc.longitude:.4f}")
