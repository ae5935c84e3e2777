from __future__ import annotations

from datetime import date

from shared.flight_utils import (
    airline_name,
    append_marker,
    build_booking_url,
    format_iso_duration,
    format_minutes,
    normalise_airport_code,
    split_timestamp,
)


def test_airline_name_resolves_known_codes() -> None:
    assert airline_name("EK") == "Emirates"
    assert airline_name("ba") == "British Airways"


def test_airline_name_passes_unknown_codes_through() -> None:
    assert airline_name("XX") == "XX"


def test_normalise_airport_code_prefers_parenthesised_code() -> None:
    assert normalise_airport_code("Dhaka (DAC)") == "DAC"
    assert normalise_airport_code("lhr") == "LHR"


def test_normalise_airport_code_truncates_city_names() -> None:
    assert normalise_airport_code("London") == "LON"


def test_format_iso_duration_strips_prefix() -> None:
    assert format_iso_duration("PT7H15M") == "7h15m"
    assert format_iso_duration("PT45M") == "45m"


def test_format_minutes() -> None:
    assert format_minutes(435) == "7h15m"
    assert format_minutes(120) == "2h"
    assert format_minutes(None) is None


def test_split_timestamp_returns_time_and_date() -> None:
    assert split_timestamp("2026-03-15T18:30:00") == ("18:30", "2026-03-15")
    assert split_timestamp(None) == (None, None)


def test_build_booking_url_encodes_route_and_marker() -> None:
    url = build_booking_url(
        "https://www.aviasales.com/",
        origin="DAC",
        destination="LHR",
        departure_date=date(2026, 3, 15),
        return_date=date(2026, 3, 29),
        adults=2,
        marker="12345",
    )
    assert url == "https://www.aviasales.com/search/DAC1503LHR29032?marker=12345"


def test_append_marker_respects_existing_query() -> None:
    assert append_marker("https://x.test/search/A?t=1", "m1") == "https://x.test/search/A?t=1&marker=m1"
    assert append_marker("https://x.test/search/A", None) == "https://x.test/search/A"


def test_normalise_airport_code_ignores_short_words_inside_city_names() -> None:
    assert normalise_airport_code("Ho Chi Minh City") == "HOC"
    assert normalise_airport_code("Ho Chi Minh City SGN") == "SGN"


def test_normalise_airport_code_keeps_ascii_letters_only() -> None:
    assert normalise_airport_code("Zürich") == "ZRI"
