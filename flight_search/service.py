"""Flight search service: request/offer models and the provider seam."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Literal, Protocol

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeInt,
    PositiveInt,
    field_validator,
    model_validator,
)

from shared.flight_utils import normalise_airport_code

logger = logging.getLogger(__name__)

REQUIRED_PARAMS: tuple[str, ...] = ("from", "to", "date")


class FlightSearchError(RuntimeError):
    """Base error for flight search failures."""


class ConfigurationError(FlightSearchError):
    """Raised when the selected provider is missing credentials or settings."""


class UpstreamError(FlightSearchError):
    """Raised when the upstream flight API answers with an error or cannot be reached."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        detail: str | None = None,
        payload: Any = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail
        self.payload = payload


class FlightSearchRequest(BaseModel):
    """Inbound search criteria, keyed by the public query parameter names."""

    model_config = ConfigDict(populate_by_name=True)

    origin: str = Field(..., alias="from", min_length=3)
    destination: str = Field(..., alias="to", min_length=3)
    departure_date: date = Field(..., alias="date")
    return_date: date | None = Field(None, alias="returnDate")
    travelers: PositiveInt = 1
    children: NonNegativeInt = 0
    trip_type: Literal["oneway", "return"] = Field("oneway", alias="tripType")

    @field_validator("origin", "destination")
    @classmethod
    def normalise_code(cls, value: str) -> str:
        code = normalise_airport_code(value)
        if len(code) != 3:
            raise ValueError(f"cannot derive an airport code from {value!r}")
        return code

    @model_validator(mode="after")
    def validate_return_leg(self) -> FlightSearchRequest:
        if self.return_date and self.return_date < self.departure_date:
            raise ValueError("returnDate cannot be before date")
        if self.trip_type == "return" and not self.return_date:
            raise ValueError("returnDate is required for return trips")
        return self

    @property
    def is_return(self) -> bool:
        return self.trip_type == "return"


class FlightEndpoint(BaseModel):
    """One end of a flight: airport code plus local time and date when known."""

    code: str = Field(..., min_length=1)
    time: str | None = None
    date: str | None = None


class FlightOffer(BaseModel):
    """Simplified offer returned to clients."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1)
    airline: str = Field(..., min_length=1)
    flight_number: str = Field(..., alias="flightNumber")
    departure: FlightEndpoint
    arrival: FlightEndpoint
    duration: str | None = None
    stops: NonNegativeInt = 0
    price: float
    currency: str = "USD"
    booking_url: str | None = Field(None, alias="bookingUrl")


class FlightSearchResponse(BaseModel):
    """Envelope returned by the handler on success."""

    success: bool = True
    flights: list[FlightOffer] = Field(default_factory=list)
    count: int = 0


class FlightProvider(Protocol):
    """Anything able to turn search criteria into offers."""

    name: str

    def search(self, request: FlightSearchRequest) -> list[FlightOffer]:
        ...


class FlightSearchService:
    """Runs one search against the configured provider and caps the results."""

    def __init__(self, provider: FlightProvider, *, max_results: int = 10) -> None:
        self._provider = provider
        self._max_results = max_results

    def search(self, request: FlightSearchRequest) -> FlightSearchResponse:
        offers = self._provider.search(request)[: self._max_results]
        logger.info(
            "%s search %s->%s on %s returned %d offers",
            self._provider.name,
            request.origin,
            request.destination,
            request.departure_date.isoformat(),
            len(offers),
        )
        return FlightSearchResponse(flights=offers, count=len(offers))


__all__ = [
    "REQUIRED_PARAMS",
    "ConfigurationError",
    "FlightEndpoint",
    "FlightOffer",
    "FlightProvider",
    "FlightSearchError",
    "FlightSearchRequest",
    "FlightSearchResponse",
    "FlightSearchService",
    "UpstreamError",
]
