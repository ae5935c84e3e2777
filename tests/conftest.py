from __future__ import annotations

from collections.abc import Iterator

import pytest

from config.settings import get_settings
from flight_search import handler


@pytest.fixture(autouse=True)
def _env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Run every test against the sample provider with no real credentials."""

    for name in (
        "AMADEUS_API_KEY",
        "AMADEUS_API_SECRET",
        "TRAVELPAYOUTS_TOKEN",
        "TRAVELPAYOUTS_MARKER",
        "SEARCH_MAX_RESULTS",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("FLIGHT_PROVIDER", "sample")
    get_settings.cache_clear()
    monkeypatch.setattr(handler, "_service", None)
    yield
    get_settings.cache_clear()
