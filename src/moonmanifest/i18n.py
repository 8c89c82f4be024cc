"""Simple two-language (ko/en) translation helper."""

_STRINGS: dict[str, dict[str, str]] = {
    "page_title": {
        "ko": "문 매니페스트",
        "en": "Moon Manifest",
    },
    "label_country": {
        "ko": "출생 국가",
        "en": "Birth country",
    },
    "label_region": {
        "ko": "주/도",
        "en": "State / region",
    },
    "label_city": {
        "ko": "출생 도시",
        "en": "Birth city",
    },
    "label_city_pick": {
        "ko": "추천 도시",
        "en": "Suggestions",
    },
    "label_date": {
        "ko": "생년월일",
        "en": "Birth date",
    },
    "label_know_time": {
        "ko": "태어난 시각을 알아요",
        "en": "I know my birth time",
    },
    "label_time": {
        "ko": "태어난 시각",
        "en": "Birth time",
    },
    "btn_reveal": {
        "ko": "☾ 내 별자리 보기",
        "en": "☾ Reveal my signs",
    },
    "loading_compute": {
        "ko": "☾ 달의 위치를 계산하는 중",
        "en": "☾ Finding the Moon",
    },
    "result_sun": {
        "ko": "태양 별자리",
        "en": "Sun sign",
    },
    "result_moon": {
        "ko": "달 별자리",
        "en": "Moon sign",
    },
    "result_place": {
        "ko": "출생지 좌표",
        "en": "Birth place",
    },
    "error_input": {
        "ko": "입력값을 확인해 주세요. ({error})",
        "en": "Please check your input. ({error})",
    },
    "error_not_found": {
        "ko": "장소를 찾을 수 없어요. 도시 이름을 다시 확인해 보세요. ({error})",
        "en": "We couldn't find that place. Check the city name. ({error})",
    },
    "error_lookup": {
        "ko": "위치 서비스에 연결할 수 없어요. 잠시 후 다시 시도해 주세요. ({error})",
        "en": "The location service is unavailable. Try again shortly. ({error})",
    },
    "error_compute": {
        "ko": "달 별자리를 계산하지 못했어요. ({error})",
        "en": "Failed to calculate your moon sign. ({error})",
    },
}


def t(key: str, lang: str) -> str:
    """Return the translated string for key in lang.

    Falls back to 'en', then to the key itself if not found.
    """
    entry = _STRINGS.get(key)
    if entry is None:
        return key
    return entry.get(lang) or entry.get("en") or key
