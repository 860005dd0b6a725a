"""Market data from the eigenwallet API: liquidity, offers, providers, prices.

Every accessor follows the same shape: return the cached value if fresh,
otherwise fetch, validate, filter, cache and return. `None` means the
source is unavailable; an empty list means it answered with nothing.
"""

import asyncio
import logging
import math
from typing import Awaitable, Callable, TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from config import settings
from services.cache import Cache
from services.fetch import fetch_with_retry
from services.models import (
    DailyPriceStats,
    LiquidityDay,
    Offer,
    ProviderDailySwapBounds,
    ProviderQuoteStats,
)

logger = logging.getLogger(__name__)

API_BASE = "https://api.eigenwallet.org/api"
LIQUIDITY_DAILY_API_URL = f"{API_BASE}/liquidity-daily"
LIST_API_URL = f"{API_BASE}/list"
PROVIDER_QUOTE_STATS_API_URL = f"{API_BASE}/provider-quote-stats"
PROVIDER_DAILY_SWAP_BOUNDS_API_URL = f"{API_BASE}/provider-daily-swap-bounds"
DAILY_PRICE_STATS_API_URL = f"{API_BASE}/daily-price-stats"

LIQUIDITY_CACHE_KEY = "liquidity-daily"
OFFERS_CACHE_KEY = "offers-list"
PROVIDERS_CACHE_KEY = "provider-quote-stats"
PROVIDER_BOUNDS_CACHE_KEY = "provider-daily-swap-bounds"
PRICE_STATS_CACHE_KEY = "daily-price-stats"

SATOSHIS_PER_BTC = 100_000_000

M = TypeVar("M", bound=BaseModel)


class LiquidityService:
    def __init__(
        self,
        cache: Cache,
        client: httpx.AsyncClient,
        retries: int | None = None,
        backoff_seconds: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._cache = cache
        self._client = client
        self._retries = settings.api_retries if retries is None else retries
        self._backoff_seconds = (
            settings.retry_backoff_seconds if backoff_seconds is None else backoff_seconds
        )
        self._sleep = sleep

    async def _fetch_list(
        self,
        *,
        label: str,
        url: str,
        cache_key: str,
        model: type[M],
        keep: Callable[[M], bool] | None = None,
    ) -> list[M] | None:
        adapter = TypeAdapter(list[model])

        cached = self._cache.get(cache_key)
        if cached is not None:
            try:
                return adapter.validate_python(cached)
            except ValidationError:
                logger.warning("Ignoring cached %s: does not match schema", label)

        logger.info("Fetching %s from API...", label)
        try:
            response = await fetch_with_retry(
                self._client,
                url,
                retries=self._retries,
                backoff_seconds=self._backoff_seconds,
                sleep=self._sleep,
            )
            if not response.is_success:
                logger.warning("%s API responded with status: %d", label, response.status_code)
                return None
            items = adapter.validate_python(response.json())
        except httpx.HTTPError as e:
            logger.warning("Failed to fetch %s: %s", label, e)
            return None
        except (ValueError, ValidationError) as e:
            logger.warning("Malformed %s payload: %s", label, e)
            return None

        if keep is not None:
            items = [item for item in items if keep(item)]

        self._cache.set(cache_key, adapter.dump_python(items, mode="json", by_alias=True))
        return items

    async def fetch_liquidity_daily(self) -> list[LiquidityDay] | None:
        return await self._fetch_list(
            label="liquidity data",
            url=LIQUIDITY_DAILY_API_URL,
            cache_key=LIQUIDITY_CACHE_KEY,
            model=LiquidityDay,
        )

    async def fetch_offers(self) -> list[Offer] | None:
        """Current mainnet offers. Testnet offers are dropped."""
        return await self._fetch_list(
            label="offers data",
            url=LIST_API_URL,
            cache_key=OFFERS_CACHE_KEY,
            model=Offer,
            keep=lambda offer: not offer.testnet,
        )

    async def fetch_provider_stats(self) -> list[ProviderQuoteStats] | None:
        """Quote stats for providers that have been online more than one day."""
        return await self._fetch_list(
            label="provider stats",
            url=PROVIDER_QUOTE_STATS_API_URL,
            cache_key=PROVIDERS_CACHE_KEY,
            model=ProviderQuoteStats,
            keep=lambda provider: provider.online_days > 1,
        )

    async def fetch_provider_daily_bounds(self) -> list[ProviderDailySwapBounds] | None:
        return await self._fetch_list(
            label="provider daily bounds",
            url=PROVIDER_DAILY_SWAP_BOUNDS_API_URL,
            cache_key=PROVIDER_BOUNDS_CACHE_KEY,
            model=ProviderDailySwapBounds,
        )

    async def fetch_daily_price_stats(self) -> list[DailyPriceStats] | None:
        """Daily price stats; days with a zero average price carry no data and are dropped."""
        return await self._fetch_list(
            label="daily price stats",
            url=DAILY_PRICE_STATS_API_URL,
            cache_key=PRICE_STATS_CACHE_KEY,
            model=DailyPriceStats,
            keep=lambda stats: stats.avg_price > 0,
        )

    async def get_provider_by_id(self, peer_id: str) -> ProviderQuoteStats | None:
        providers = await self.fetch_provider_stats()
        if providers is None:
            return None
        return find_provider(providers, peer_id)

    async def get_provider_historical_bounds(
        self, peer_id: str
    ) -> list[ProviderDailySwapBounds] | None:
        """Daily swap bounds for one provider, oldest day first."""
        bounds = await self.fetch_provider_daily_bounds()
        if bounds is None:
            return None
        return sorted((b for b in bounds if b.peer_id == peer_id), key=lambda b: b.day)


def find_provider(providers: list[ProviderQuoteStats], peer_id: str) -> ProviderQuoteStats | None:
    return next((p for p in providers if p.peer_id == peer_id), None)


# ---------------------------------------------------------------------------
# Unit formatting
# ---------------------------------------------------------------------------

def satoshis_to_btc(satoshis: int) -> str:
    btc = satoshis / SATOSHIS_PER_BTC
    if btc >= 1:
        return f"{btc:.4f}"
    return f"{btc:.6f}"


def format_price(satoshis_per_xmr: int) -> str:
    """BTC per XMR, six decimals."""
    return f"{satoshis_per_xmr / SATOSHIS_PER_BTC:.6f}"


def btc_to_xmr(satoshis: int, price_in_satoshis_per_xmr: int) -> str:
    """XMR received for `satoshis` at the given offer price."""
    xmr = satoshis / price_in_satoshis_per_xmr
    if xmr >= 100:
        return f"{xmr:.1f}"
    if xmr >= 10:
        return f"{xmr:.2f}"
    return f"{xmr:.3f}"


def format_days_ago(days: float | None) -> str:
    if days is None or math.isnan(days) or days < 0:
        return "Unknown"
    if days == 0:
        return "today"
    if days == 1:
        return "1 day ago"
    return f"{days} days ago"
