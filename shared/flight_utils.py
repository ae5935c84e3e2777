"""Shared helpers for shaping upstream flight data."""

from __future__ import annotations

import re
from datetime import date
from urllib.parse import urlencode

AIRLINE_NAMES: dict[str, str] = {
    "AA": "American Airlines",
    "DL": "Delta Air Lines",
    "UA": "United Airlines",
    "BA": "British Airways",
    "LH": "Lufthansa",
    "AF": "Air France",
    "KL": "KLM",
    "EY": "Etihad Airways",
    "EK": "Emirates",
    "QR": "Qatar Airways",
    "BG": "Biman Bangladesh Airlines",
    "TK": "Turkish Airlines",
    "SQ": "Singapore Airlines",
    "LX": "Swiss",
    "VS": "Virgin Atlantic",
}

_CODE_PATTERN = re.compile(r"\b([A-Z]{3})\b")
_PAREN_CODE_PATTERN = re.compile(r"\(([A-Za-z]{3})\)")
_ISO_DURATION_PREFIX = "PT"


def airline_name(code: str) -> str:
    """Return the display name for a carrier code, or the code itself when unknown."""

    return AIRLINE_NAMES.get(code.upper(), code)


def normalise_airport_code(raw: str) -> str:
    """Extract a 3-letter airport code from free text such as ``"Dhaka (DAC)"``.

    A parenthesised code wins, then a bare 3-letter value, then an all-caps
    3-letter token; otherwise the first three ASCII letters are used.
    """

    value = raw.strip()
    match = (
        _PAREN_CODE_PATTERN.search(value)
        or re.fullmatch(r"([A-Za-z]{3})", value)
        or _CODE_PATTERN.search(value)
    )
    if match:
        return match.group(1).upper()
    letters = "".join(ch for ch in value if ch.isascii() and ch.isalpha())
    return letters[:3].upper()


def format_iso_duration(raw: str) -> str:
    """Turn ``PT7H15M`` into ``7h15m``."""

    value = raw.strip()
    if value.upper().startswith(_ISO_DURATION_PREFIX):
        value = value[len(_ISO_DURATION_PREFIX) :]
    return value.lower()


def format_minutes(minutes: int | None) -> str | None:
    if minutes is None:
        return None
    hours, remainder = divmod(int(minutes), 60)
    if hours and remainder:
        return f"{hours}h{remainder}m"
    if hours:
        return f"{hours}h"
    return f"{remainder}m"


def split_timestamp(raw: str | None) -> tuple[str | None, str | None]:
    """Split an ISO timestamp into ``(HH:MM, YYYY-MM-DD)``."""

    if not raw or "T" not in raw:
        return None, None
    day, _, clock = raw.partition("T")
    return clock[:5], day


def build_booking_url(
    base_url: str,
    *,
    origin: str,
    destination: str,
    departure_date: date,
    return_date: date | None = None,
    adults: int = 1,
    marker: str | None = None,
) -> str:
    """Build an Aviasales search deep link, tagged with the affiliate marker if given.

    The path token follows the ``<ORIGIN><DDMM><DEST>[<DDMM>]<ADULTS>`` layout.
    """

    token = f"{origin}{departure_date:%d%m}{destination}"
    if return_date:
        token += f"{return_date:%d%m}"
    token += str(adults)
    url = f"{base_url.rstrip('/')}/search/{token}"
    if marker:
        url += "?" + urlencode({"marker": marker})
    return url


def append_marker(url: str, marker: str | None) -> str:
    if not marker:
        return url
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{urlencode({'marker': marker})}"


__all__ = [
    "AIRLINE_NAMES",
    "airline_name",
    "append_marker",
    "build_booking_url",
    "format_iso_duration",
    "format_minutes",
    "normalise_airport_code",
    "split_timestamp",
]
