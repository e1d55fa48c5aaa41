"""Tests for promo-code validation."""

import json
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, Mock

import httpx
import pytest

from direct_booking.clients.promo_code_client import PromoCodeClient, PromoCodeClientError
from direct_booking.models.promo_code import (
    PromoAccepted,
    PromoErrorKind,
    PromoRejected,
    PromoType,
)
from direct_booking.services.errors import UpstreamUnavailable
from direct_booking.services.promo_code_validator import (
    AppliedPromo,
    PromoCodeCatalog,
    PromoCodeValidator,
)

SERVICE_URL = "https://promo.example.com/validate"


@pytest.fixture
def catalog(promo_catalog_path):
    catalog = PromoCodeCatalog.from_file(promo_catalog_path)
    catalog._today = date(2026, 7, 1)
    return catalog


class TestPromoCodeCatalog:
    """Tests for the file-backed catalog."""

    @pytest.mark.asyncio
    async def test_percent_code_is_case_insensitive(self, catalog):
        result = await catalog.validate("welcome10", nights=3, total_price=Decimal("360"))

        assert isinstance(result, PromoAccepted)
        assert result.code == "WELCOME10"
        assert result.type == PromoType.PERCENT
        assert result.discount_amount == Decimal("36")

    @pytest.mark.asyncio
    async def test_unknown_code(self, catalog):
        result = await catalog.validate("NOPE", nights=3, total_price=Decimal("360"))

        assert result == PromoRejected(error=PromoErrorKind.INVALID_CODE, message="Code invalide")

    @pytest.mark.asyncio
    async def test_min_nights_not_met(self, catalog):
        result = await catalog.validate("LONGSTAY", nights=3, total_price=Decimal("360"))

        assert result.error == PromoErrorKind.MIN_NIGHTS_NOT_MET

    @pytest.mark.asyncio
    async def test_min_nights_skipped_without_dates(self, catalog):
        result = await catalog.validate("LONGSTAY", nights=0, total_price=Decimal("0"))

        assert isinstance(result, PromoAccepted)
        assert result.discount_amount == Decimal("0")

    @pytest.mark.asyncio
    async def test_fixed_code(self, catalog):
        result = await catalog.validate("LONGSTAY", nights=7, total_price=Decimal("756"))

        assert result.discount_amount == Decimal("100")

    @pytest.mark.asyncio
    async def test_inactive(self, catalog):
        result = await catalog.validate("RETIRED", nights=3, total_price=Decimal("360"))

        assert result.error == PromoErrorKind.INACTIVE

    @pytest.mark.asyncio
    async def test_usage_limit(self, catalog):
        result = await catalog.validate("LIMITED", nights=3, total_price=Decimal("360"))

        assert result.error == PromoErrorKind.USAGE_LIMIT_REACHED

    @pytest.mark.asyncio
    async def test_validity_window(self, catalog):
        catalog._today = date(2026, 5, 31)
        assert (await catalog.validate("SUMMER", 3, Decimal("360"))).error == PromoErrorKind.NOT_YET_VALID

        catalog._today = date(2026, 8, 31)
        assert (await catalog.validate("SUMMER", 3, Decimal("360"))).valid

        catalog._today = date(2026, 9, 1)
        assert (await catalog.validate("SUMMER", 3, Decimal("360"))).error == PromoErrorKind.EXPIRED

    def test_missing_file_yields_empty_catalog(self, tmp_path):
        catalog = PromoCodeCatalog.from_file(tmp_path / "missing.json")

        assert catalog.codes == {}

    def test_invalid_entries_are_skipped(self, tmp_path):
        path = tmp_path / "codes.json"
        path.write_text(json.dumps({
            "codes": {
                "GOOD": {"type": "fixed", "discount": 20},
                "BAD": {"type": "bogus", "discount": 20},
            }
        }))

        catalog = PromoCodeCatalog.from_file(path)

        assert list(catalog.codes) == ["GOOD"]


class TestPromoCodeValidator:
    """Tests for PromoCodeValidator."""

    @pytest.mark.asyncio
    async def test_blank_code_is_invalid_without_calling_service(self):
        service = Mock()
        service.validate = AsyncMock()

        result = await PromoCodeValidator(service).validate("   ", 3, Decimal("360"))

        assert result.error == PromoErrorKind.INVALID_CODE
        service.validate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_service_failure_is_upstream_unavailable(self):
        service = Mock()
        service.validate = AsyncMock(side_effect=PromoCodeClientError("down"))

        with pytest.raises(UpstreamUnavailable) as exc_info:
            await PromoCodeValidator(service).validate("WELCOME10", 3, Decimal("360"))

        assert exc_info.value.service == "promo-code service"

    @pytest.mark.asyncio
    async def test_code_is_trimmed(self, catalog):
        result = await PromoCodeValidator(catalog).validate("  welcome10 ", 3, Decimal("360"))

        assert result.valid


class TestAppliedPromo:
    """Tests for the applied-promo state."""

    def test_apply_then_refusal_clears(self):
        applied = AppliedPromo()
        accepted = PromoAccepted(code="WELCOME10", discount=Decimal("10"), type=PromoType.PERCENT)

        assert applied.apply(accepted) is None
        assert applied.is_applied

        error = applied.apply(PromoRejected(error=PromoErrorKind.EXPIRED))

        assert error == PromoErrorKind.EXPIRED
        assert not applied.is_applied
        assert applied.last_error == PromoErrorKind.EXPIRED

    def test_clear(self):
        applied = AppliedPromo()
        applied.apply(PromoRejected(error=PromoErrorKind.INVALID_CODE))

        applied.clear()

        assert applied.current is None
        assert applied.last_error is None


class TestPromoCodeClient:
    """Tests for the remote promo-code client."""

    @pytest.mark.asyncio
    async def test_accepted(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert json.loads(request.content) == {"code": "WELCOME10", "nights": 7, "totalPrice": 756.0}
            return httpx.Response(200, json={
                "valid": True,
                "code": "WELCOME10",
                "discount": 10,
                "type": "percent",
                "description": "Bienvenue",
                "discountAmount": 76,
            })

        client = PromoCodeClient(SERVICE_URL, transport=httpx.MockTransport(handler))
        result = await client.validate("WELCOME10", 7, Decimal("756"))

        assert isinstance(result, PromoAccepted)
        assert result.discount_amount == Decimal("76")

    @pytest.mark.asyncio
    async def test_rejected_with_kind(self):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(
                400, json={"valid": False, "errorKind": "expired", "error": "Ce code a expiré"}
            )
        )

        result = await PromoCodeClient(SERVICE_URL, transport=transport).validate("OLD", 3, Decimal("360"))

        assert result.error == PromoErrorKind.EXPIRED
        assert result.message == "Ce code a expiré"

    @pytest.mark.asyncio
    async def test_unknown_error_kind_defaults_to_invalid_code(self):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(404, json={"valid": False, "error": "Code invalide"})
        )

        result = await PromoCodeClient(SERVICE_URL, transport=transport).validate("X", 3, Decimal("360"))

        assert result.error == PromoErrorKind.INVALID_CODE

    @pytest.mark.asyncio
    async def test_server_error_raises(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(503, text="unavailable"))

        with pytest.raises(PromoCodeClientError):
            await PromoCodeClient(SERVICE_URL, transport=transport).validate("X", 3, Decimal("360"))

    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(PromoCodeClientError):
            await PromoCodeClient(SERVICE_URL, transport=httpx.MockTransport(handler)).validate(
                "X", 3, Decimal("360")
            )
