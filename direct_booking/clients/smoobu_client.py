"""Smoobu PMS API client for rates, availability and date blocking."""

import asyncio
from typing import Any, Optional

import httpx
from structlog import get_logger

from direct_booking.config import settings

logger = get_logger(__name__)


class SmoobuClientError(Exception):
    """Base exception for Smoobu client errors."""

    pass


class SmoobuAuthenticationError(SmoobuClientError):
    """Raised when Smoobu rejects the API key."""

    pass


class SmoobuNotFoundError(SmoobuClientError):
    """Raised when a Smoobu resource is not found."""

    pass


class SmoobuServerError(SmoobuClientError):
    """Raised when Smoobu returns a server error."""

    pass


class SmoobuClient:
    """Client for the Smoobu API endpoints used by the booking engine."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        apartment_id: Optional[str] = None,
        base_url: Optional[str] = None,
        max_retries: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the Smoobu client with settings.

        Args:
            api_key: Overrides ``SMOOBU_API_KEY``
            apartment_id: Overrides ``SMOOBU_APARTMENT_ID``
            base_url: Overrides ``SMOOBU_BASE_URL``
            max_retries: Overrides ``SMOOBU_MAX_RETRIES``
            transport: Optional httpx transport (tests)
        """
        self.base_url = (base_url or settings.smoobu.base_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.smoobu.api_key.get_secret_value()
        self.apartment_id = apartment_id if apartment_id is not None else settings.smoobu.apartment_id
        self.channel_id = settings.smoobu.channel_id
        self.timeout = settings.smoobu.request_timeout
        self.max_retries = max_retries or settings.smoobu.max_retries
        self.retry_backoff_base = 2  # Exponential backoff base
        self._transport = transport

    def _get_headers(self) -> dict[str, str]:
        """Get default headers for Smoobu API requests.

        Returns:
            Dictionary of HTTP headers including the API key.
        """
        return {
            "Api-Key": self.api_key,
            "Content-Type": "application/json",
            "Cache-Control": "no-cache",
            "User-Agent": "DirectBooking/1.0",
        }

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        data: Optional[dict[str, Any]] = None,
        params: Optional[Any] = None,
    ) -> dict[str, Any]:
        """Make an HTTP request to the Smoobu API with retry logic.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            endpoint: API endpoint path (without base URL)
            data: Request body data (for POST/PUT requests)
            params: Query parameters

        Returns:
            JSON response as a dictionary

        Raises:
            SmoobuAuthenticationError: If authentication fails
            SmoobuNotFoundError: If resource not found
            SmoobuServerError: If server error persists after retries
            SmoobuClientError: For other API errors
        """
        url = f"{self.base_url}{endpoint}"
        headers = self._get_headers()

        for attempt in range(self.max_retries):
            try:
                async with httpx.AsyncClient(
                    timeout=self.timeout, transport=self._transport
                ) as client:
                    response = await client.request(
                        method=method,
                        url=url,
                        headers=headers,
                        json=data,
                        params=params,
                    )

                if response.status_code in (401, 403):
                    logger.error(
                        "Smoobu authentication failed",
                        endpoint=endpoint,
                        status_code=response.status_code,
                    )
                    raise SmoobuAuthenticationError(
                        f"Authentication failed for {endpoint}: Check SMOOBU_API_KEY"
                    )

                if response.status_code == 404:
                    logger.warning(
                        "Smoobu resource not found",
                        endpoint=endpoint,
                        status_code=response.status_code,
                    )
                    raise SmoobuNotFoundError(f"Resource not found: {endpoint}")

                if response.status_code >= 500:
                    if attempt < self.max_retries - 1:
                        wait_time = self.retry_backoff_base ** attempt
                        logger.warning(
                            "Smoobu server error, retrying",
                            endpoint=endpoint,
                            status_code=response.status_code,
                            attempt=attempt + 1,
                            max_retries=self.max_retries,
                            wait_seconds=wait_time,
                        )
                        await asyncio.sleep(wait_time)
                        continue
                    logger.error(
                        "Smoobu server error, max retries exceeded",
                        endpoint=endpoint,
                        status_code=response.status_code,
                    )
                    raise SmoobuServerError(
                        f"Server error at {endpoint}: {response.text[:200]}"
                    )

                if 400 <= response.status_code < 500:
                    logger.error(
                        "Smoobu client error",
                        endpoint=endpoint,
                        status_code=response.status_code,
                        response_text=response.text[:200],
                    )
                    raise SmoobuClientError(
                        f"Client error at {endpoint}: {response.status_code} {response.text[:200]}"
                    )

                logger.debug(
                    "Smoobu request successful",
                    endpoint=endpoint,
                    method=method,
                    status_code=response.status_code,
                )
                if response.text:
                    return response.json()
                return {}

            except httpx.TimeoutException as e:
                if attempt < self.max_retries - 1:
                    wait_time = self.retry_backoff_base ** attempt
                    logger.warning(
                        "Smoobu request timeout, retrying",
                        endpoint=endpoint,
                        attempt=attempt + 1,
                        wait_seconds=wait_time,
                    )
                    await asyncio.sleep(wait_time)
                    continue
                logger.error("Smoobu request timeout, max retries exceeded", endpoint=endpoint)
                raise SmoobuClientError(f"Request timeout for {endpoint}") from e

            except httpx.RequestError as e:
                if attempt < self.max_retries - 1:
                    wait_time = self.retry_backoff_base ** attempt
                    logger.warning(
                        "Smoobu request error, retrying",
                        endpoint=endpoint,
                        error=str(e),
                        attempt=attempt + 1,
                        wait_seconds=wait_time,
                    )
                    await asyncio.sleep(wait_time)
                    continue
                logger.error(
                    "Smoobu request error, max retries exceeded",
                    endpoint=endpoint,
                    error=str(e),
                )
                raise SmoobuClientError(f"Request failed for {endpoint}: {str(e)}") from e

        raise SmoobuClientError(f"Failed to complete request to {endpoint}")

    async def get_rates(self, start_date: str, end_date: str) -> dict[str, Any]:
        """Fetch nightly rates and availability for the configured apartment.

        Args:
            start_date: First day, ISO format ("YYYY-MM-DD")
            end_date: Last day, ISO format ("YYYY-MM-DD")

        Returns:
            Rates payload ``{"data": {apartmentId: {date: {...}}}}``
        """
        logger.info("Fetching rates from Smoobu", start_date=start_date, end_date=end_date)
        params = [
            ("apartments[]", self.apartment_id),
            ("start_date", start_date),
            ("end_date", end_date),
        ]
        return await self._make_request("GET", "/rates", params=params)

    async def check_availability(self, arrival_date: str, departure_date: str) -> bool:
        """Ask Smoobu whether the apartment is free for a stay.

        Args:
            arrival_date: Arrival day, ISO format
            departure_date: Departure day, ISO format

        Returns:
            True if the apartment is listed as available
        """
        if not self.apartment_id or not self.api_key:
            raise SmoobuClientError(
                f"Smoobu config missing: apartment_id={bool(self.apartment_id)}, api_key={bool(self.api_key)}"
            )
        params = [
            ("arrivalDate", arrival_date),
            ("departureDate", departure_date),
            ("apartments[]", self.apartment_id),
        ]
        response = await self._make_request("GET", "/availability", params=params)
        available = response.get("availableApartments") or []
        return int(self.apartment_id) in [int(a) for a in available]

    async def create_reservation(self, booking: dict[str, Any]) -> int:
        """Create a booking in Smoobu, which blocks its dates.

        Args:
            booking: Request body built by ``BookingTransformer``

        Returns:
            Smoobu reservation id
        """
        logger.info(
            "Creating Smoobu reservation",
            arrival_date=booking.get("arrivalDate"),
            departure_date=booking.get("departureDate"),
        )
        response = await self._make_request("POST", "/reservations", data=booking)
        return int(response["id"])

    async def cancel_reservation(self, smoobu_reservation_id: int) -> None:
        """Cancel a Smoobu booking, releasing its dates.

        Args:
            smoobu_reservation_id: Id returned by ``create_reservation``
        """
        logger.info("Cancelling Smoobu reservation", smoobu_reservation_id=smoobu_reservation_id)
        await self._make_request("DELETE", f"/reservations/{smoobu_reservation_id}")
