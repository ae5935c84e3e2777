"""Upstream flight providers: Amadeus, Travelpayouts and a canned demo source."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from config.settings import Settings
from flight_search.service import (
    ConfigurationError,
    FlightEndpoint,
    FlightOffer,
    FlightProvider,
    FlightSearchRequest,
    UpstreamError,
)
from shared.flight_utils import (
    airline_name,
    append_marker,
    build_booking_url,
    format_iso_duration,
    format_minutes,
    split_timestamp,
)

logger = logging.getLogger(__name__)


def first_error_detail(payload: Any) -> str | None:
    """Return the first entry of an upstream ``errors`` list as a client-facing message."""

    if not isinstance(payload, dict):
        return None
    errors = payload.get("errors")
    if not isinstance(errors, list):
        return None
    first = errors[0] if errors and isinstance(errors[0], dict) else {}
    return first.get("detail") or first.get("title") or "Search failed"


def _error_from_status(label: str, exc: httpx.HTTPStatusError) -> UpstreamError:
    response = exc.response
    try:
        payload = response.json()
    except ValueError:
        payload = response.text
    return UpstreamError(
        f"{label} failed with status {response.status_code}",
        status_code=response.status_code,
        detail=first_error_detail(payload),
        payload=payload,
    )


class AmadeusClient:
    """Amadeus Self-Service flight-offers search behind an OAuth2 client-credentials token."""

    name = "amadeus"
    token_path = "/v1/security/oauth2/token"
    search_path = "/v2/shopping/flight-offers"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        api_secret: str,
        *,
        currency: str = "USD",
        max_results: int = 10,
        timeout: float = 20.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._api_secret = api_secret
        self._currency = currency
        self._max_results = max_results
        self._timeout = timeout
        self._transport = transport

    def search(self, request: FlightSearchRequest) -> list[FlightOffer]:
        with httpx.Client(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
        ) as client:
            token = self._fetch_token(client)
            payload = self._fetch_offers(client, token, request)

        offers = payload.get("data") or []
        try:
            return [map_amadeus_offer(offer, default_currency=self._currency) for offer in offers]
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise UpstreamError("Amadeus returned an unexpected offer shape", payload=payload) from exc

    def _fetch_token(self, client: httpx.Client) -> str:
        try:
            response = client.post(
                self.token_path,
                data={
                    "grant_type": "client_credentials",
                    "client_id": self._api_key,
                    "client_secret": self._api_secret,
                },
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise _error_from_status("Amadeus token exchange", exc) from exc
        except httpx.HTTPError as exc:
            raise UpstreamError("Amadeus token exchange failed") from exc

        token = response.json().get("access_token")
        if not token:
            raise UpstreamError("Amadeus token response did not include an access_token")
        return token

    def _fetch_offers(
        self,
        client: httpx.Client,
        token: str,
        request: FlightSearchRequest,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {
            "originLocationCode": request.origin,
            "destinationLocationCode": request.destination,
            "departureDate": request.departure_date.isoformat(),
            "adults": request.travelers,
            "currencyCode": self._currency,
            "max": self._max_results,
        }
        if request.is_return and request.return_date:
            params["returnDate"] = request.return_date.isoformat()
        if request.children:
            params["children"] = request.children

        try:
            response = client.get(
                self.search_path,
                params=params,
                headers={"Authorization": f"Bearer {token}"},
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            raise _error_from_status("Amadeus flight-offers search", exc) from exc
        except httpx.HTTPError as exc:
            raise UpstreamError("Amadeus flight-offers search failed") from exc


def map_amadeus_offer(offer: dict[str, Any], *, default_currency: str = "USD") -> FlightOffer:
    """Flatten one Amadeus flight-offer into a FlightOffer.

    The first itinerary drives the result: its first segment gives the carrier,
    flight number and departure, its last segment the final arrival, and the
    segment count the number of stops.
    """

    itinerary = offer["itineraries"][0]
    segments = itinerary["segments"]
    first, last = segments[0], segments[-1]
    carrier = first["carrierCode"]
    departure_time, departure_date = split_timestamp(first["departure"].get("at"))
    arrival_time, arrival_date = split_timestamp(last["arrival"].get("at"))
    price = offer.get("price") or {}
    duration = itinerary.get("duration")

    return FlightOffer(
        id=str(offer["id"]),
        airline=airline_name(carrier),
        flight_number=f"{carrier} {first['number']}",
        departure=FlightEndpoint(
            code=first["departure"]["iataCode"],
            time=departure_time,
            date=departure_date,
        ),
        arrival=FlightEndpoint(
            code=last["arrival"]["iataCode"],
            time=arrival_time,
            date=arrival_date,
        ),
        duration=format_iso_duration(duration) if duration else None,
        stops=max(len(segments) - 1, 0),
        price=float(price["total"]),
        currency=price.get("currency") or default_currency,
    )


class TravelpayoutsClient:
    """Aviasales cached-prices search through the Travelpayouts data API."""

    name = "travelpayouts"

    def __init__(
        self,
        endpoint: str,
        token: str,
        *,
        marker: str | None = None,
        site_url: str = "https://www.aviasales.com",
        currency: str = "USD",
        max_results: int = 10,
        timeout: float = 20.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._token = token
        self._marker = marker
        self._site_url = site_url.rstrip("/")
        self._currency = currency
        self._max_results = max_results
        self._timeout = timeout
        self._transport = transport

    def search(self, request: FlightSearchRequest) -> list[FlightOffer]:
        params: dict[str, Any] = {
            "origin": request.origin,
            "destination": request.destination,
            "departure_at": request.departure_date.isoformat(),
            "one_way": "false" if request.is_return else "true",
            "currency": self._currency.lower(),
            "sorting": "price",
            "limit": self._max_results,
            "token": self._token,
        }
        if request.is_return and request.return_date:
            params["return_at"] = request.return_date.isoformat()

        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.get(
                    self._endpoint,
                    params=params,
                    headers={"X-Access-Token": self._token},
                )
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise _error_from_status("Travelpayouts prices search", exc) from exc
        except httpx.HTTPError as exc:
            raise UpstreamError("Travelpayouts prices search failed") from exc

        if not payload.get("success", True):
            message = payload.get("error")
            raise UpstreamError(
                "Travelpayouts rejected the search",
                detail=message if isinstance(message, str) and message else "Search failed",
                payload=payload,
            )

        currency = str(payload.get("currency") or self._currency).upper()
        try:
            return [
                self._map_entry(entry, index, request=request, currency=currency)
                for index, entry in enumerate(payload.get("data") or [], 1)
            ]
        except (KeyError, TypeError, ValueError) as exc:
            raise UpstreamError("Travelpayouts returned an unexpected entry shape", payload=payload) from exc

    def _map_entry(
        self,
        entry: dict[str, Any],
        index: int,
        *,
        request: FlightSearchRequest,
        currency: str,
    ) -> FlightOffer:
        carrier = entry["airline"]
        number = entry.get("flight_number") or ""
        departure_time, departure_date = split_timestamp(entry.get("departure_at"))
        link = entry.get("link")
        if link:
            booking_url = append_marker(f"{self._site_url}{link}", self._marker)
        else:
            booking_url = build_booking_url(
                self._site_url,
                origin=request.origin,
                destination=request.destination,
                departure_date=request.departure_date,
                return_date=request.return_date if request.is_return else None,
                adults=request.travelers,
                marker=self._marker,
            )

        # Cached prices carry no arrival timestamp.
        return FlightOffer(
            id=f"{carrier}{number}-{index}",
            airline=airline_name(carrier),
            flight_number=f"{carrier} {number}".strip(),
            departure=FlightEndpoint(
                code=entry.get("origin_airport") or entry.get("origin") or request.origin,
                time=departure_time,
                date=departure_date,
            ),
            arrival=FlightEndpoint(
                code=entry.get("destination_airport") or entry.get("destination") or request.destination,
            ),
            duration=format_minutes(entry.get("duration_to") or entry.get("duration")),
            stops=int(entry.get("transfers") or 0),
            price=float(entry["price"]),
            currency=currency,
            booking_url=booking_url,
        )


# (flight id, carrier, number, departs, arrives, duration, stops, price)
_DemoFlight = tuple[str, str, str, str, str, str, int, float]

DEMO_ROUTES: dict[tuple[str, str], tuple[_DemoFlight, ...]] = {
    ("DAC", "LHR"): (
        ("BG101", "BG", "101", "10:30", "17:15", "12h45m", 0, 845.0),
        ("EK586", "EK", "586", "09:55", "19:40", "15h45m", 1, 925.0),
    ),
}
DEFAULT_DEMO_FLIGHTS: tuple[_DemoFlight, ...] = (
    ("QR641", "QR", "641", "08:15", "22:35", "14h20m", 1, 610.0),
    ("TK713", "TK", "713", "06:40", "22:45", "16h5m", 1, 655.0),
)


class SampleDataProvider:
    """Canned offers for demos; never touches the network."""

    name = "sample"

    def __init__(
        self,
        *,
        marker: str | None = None,
        site_url: str = "https://www.aviasales.com",
        currency: str = "USD",
    ) -> None:
        self._marker = marker
        self._site_url = site_url
        self._currency = currency

    def search(self, request: FlightSearchRequest) -> list[FlightOffer]:
        flights = DEMO_ROUTES.get((request.origin, request.destination), DEFAULT_DEMO_FLIGHTS)
        day = request.departure_date.isoformat()
        booking_url = None
        if self._marker:
            booking_url = build_booking_url(
                self._site_url,
                origin=request.origin,
                destination=request.destination,
                departure_date=request.departure_date,
                return_date=request.return_date if request.is_return else None,
                adults=request.travelers,
                marker=self._marker,
            )

        return [
            FlightOffer(
                id=flight_id,
                airline=airline_name(carrier),
                flight_number=f"{carrier} {number}",
                departure=FlightEndpoint(code=request.origin, time=departs, date=day),
                arrival=FlightEndpoint(code=request.destination, time=arrives, date=day),
                duration=duration,
                stops=stops,
                price=price,
                currency=self._currency,
                booking_url=booking_url,
            )
            for flight_id, carrier, number, departs, arrives, duration, stops, price in flights
        ]


def build_provider(
    settings: Settings,
    *,
    transport: httpx.BaseTransport | None = None,
) -> FlightProvider:
    """Instantiate the provider named by ``settings.flight_provider``."""

    if settings.flight_provider == "amadeus":
        if not (settings.amadeus_api_key and settings.amadeus_api_secret):
            raise ConfigurationError("AMADEUS_API_KEY and AMADEUS_API_SECRET must be set")
        return AmadeusClient(
            base_url=str(settings.amadeus_base_url),
            api_key=settings.amadeus_api_key,
            api_secret=settings.amadeus_api_secret,
            currency=settings.search_currency,
            max_results=settings.search_max_results,
            timeout=settings.http_timeout,
            transport=transport,
        )
    if settings.flight_provider == "travelpayouts":
        if not settings.travelpayouts_token:
            raise ConfigurationError("TRAVELPAYOUTS_TOKEN must be set")
        return TravelpayoutsClient(
            endpoint=str(settings.travelpayouts_endpoint),
            token=settings.travelpayouts_token,
            marker=settings.travelpayouts_marker,
            site_url=str(settings.aviasales_base_url),
            currency=settings.search_currency,
            max_results=settings.search_max_results,
            timeout=settings.http_timeout,
            transport=transport,
        )

    logger.warning("Serving canned sample flights; no upstream search is performed")
    return SampleDataProvider(
        marker=settings.travelpayouts_marker,
        site_url=str(settings.aviasales_base_url),
        currency=settings.search_currency,
    )


__all__ = [
    "AmadeusClient",
    "DEMO_ROUTES",
    "SampleDataProvider",
    "TravelpayoutsClient",
    "build_provider",
    "first_error_detail",
    "map_amadeus_offer",
]
