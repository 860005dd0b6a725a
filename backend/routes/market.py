"""Market data routes: liquidity, offers, providers and their charts.

Chart endpoints always answer 200 with an SVG (a fallback SVG when the
data source is down). JSON endpoints answer 503 when the source is
unavailable and an empty list when it simply has nothing to show.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from errors import DataUnavailableError, UnknownProviderError
from services import charts
from services.liquidity import (
    LiquidityService,
    btc_to_xmr,
    find_provider,
    format_days_ago,
    format_price,
    satoshis_to_btc,
)
from services.models import Offer, ProviderQuoteStats

logger = logging.getLogger(__name__)

router = APIRouter()

SVG_MEDIA_TYPE = "image/svg+xml"


def get_liquidity_service(request: Request) -> LiquidityService:
    return request.app.state.liquidity


def _svg(markup: str) -> Response:
    return Response(content=markup, media_type=SVG_MEDIA_TYPE)


# ---------------------------------------------------------------------------
# Charts
# ---------------------------------------------------------------------------

@router.get("/market/liquidity-chart")
async def liquidity_chart(service: LiquidityService = Depends(get_liquidity_service)) -> Response:
    """Daily total liquidity as an SVG area chart."""
    return _svg(charts.liquidity_chart(await service.fetch_liquidity_daily()))


@router.get("/market/price-chart")
async def price_chart(service: LiquidityService = Depends(get_liquidity_service)) -> Response:
    """Average daily price (BTC per XMR) as an SVG area chart."""
    return _svg(charts.best_price_chart(await service.fetch_daily_price_stats()))


@router.get("/market/providers/{peer_id}/chart")
async def provider_chart(
    peer_id: str,
    service: LiquidityService = Depends(get_liquidity_service),
) -> Response:
    return _svg(charts.provider_chart(await service.get_provider_historical_bounds(peer_id)))


# ---------------------------------------------------------------------------
# Offers and providers
# ---------------------------------------------------------------------------

def _offer_view(offer: Offer) -> dict:
    return {
        "peer_id": offer.peer_id,
        "multi_addr": offer.multi_addr,
        "price_btc": format_price(offer.price),
        "min_swap_btc": satoshis_to_btc(offer.min_swap_amount),
        "max_swap_btc": satoshis_to_btc(offer.max_swap_amount),
        "max_swap_xmr": btc_to_xmr(offer.max_swap_amount, offer.price) if offer.price > 0 else None,
    }


def _provider_view(provider: ProviderQuoteStats) -> dict:
    return {
        "peer_id": provider.peer_id,
        "multi_address": provider.multi_address,
        "min_swap_btc": satoshis_to_btc(provider.min_min_swap_amount),
        "max_swap_btc": satoshis_to_btc(provider.max_max_swap_amount),
        "online_days": provider.online_days,
        "age_days": provider.age_days,
        "last_seen": format_days_ago(provider.last_seen_ago_days),
    }


@router.get("/market/offers")
async def offers(service: LiquidityService = Depends(get_liquidity_service)) -> dict:
    """Current mainnet offers with amounts formatted in BTC and XMR."""
    result = await service.fetch_offers()
    if result is None:
        raise DataUnavailableError("Offers list")

    return {
        "_summary": f"{len(result)} mainnet offers available",
        "offers": [_offer_view(o) for o in result],
    }


@router.get("/market/providers")
async def providers(service: LiquidityService = Depends(get_liquidity_service)) -> dict:
    result = await service.fetch_provider_stats()
    if result is None:
        raise DataUnavailableError("Provider stats")

    return {
        "_summary": f"{len(result)} providers online for more than a day",
        "providers": [_provider_view(p) for p in result],
    }


@router.get("/market/providers/{peer_id}")
async def provider_detail(
    peer_id: str,
    service: LiquidityService = Depends(get_liquidity_service),
) -> dict:
    """One provider with its daily swap bounds, oldest day first."""
    stats = await service.fetch_provider_stats()
    if stats is None:
        raise DataUnavailableError("Provider stats")
    provider = find_provider(stats, peer_id)
    if provider is None:
        raise UnknownProviderError(peer_id)

    bounds = await service.get_provider_historical_bounds(peer_id)

    return {
        **_provider_view(provider),
        "historical_bounds": None if bounds is None else [
            {
                "day": b.day.isoformat(),
                "max_swap_btc": satoshis_to_btc(b.daily_max_max_swap_amount),
                "min_swap_btc": satoshis_to_btc(b.daily_min_min_swap_amount),
            }
            for b in bounds
        ],
    }
