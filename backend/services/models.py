"""Schemas for remote API payloads and the records derived from them.

Amounts are satoshis and prices are satoshis per XMR unless noted.
"""

import datetime as dt
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _from_year_day(year: int, day_of_year: int) -> dt.date:
    return dt.date(year, 1, 1) + dt.timedelta(days=day_of_year - 1)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# api.eigenwallet.org
# ---------------------------------------------------------------------------

class LiquidityDay(_CamelModel):
    date: tuple[int, int]  # (year, day_of_year)
    total_liquidity_btc: float

    @property
    def day(self) -> dt.date:
        return _from_year_day(*self.date)


class Offer(_CamelModel):
    peer_id: str
    multi_addr: str
    price: int
    min_swap_amount: int
    max_swap_amount: int
    testnet: bool = False


class ProviderQuoteStats(BaseModel):
    peer_id: str
    multi_address: str
    max_max_swap_amount: int
    min_min_swap_amount: int
    online_days: int
    age_days: int
    last_seen_ago_days: int | None = None


class ProviderDailySwapBounds(BaseModel):
    day: dt.date
    peer_id: str
    daily_max_max_swap_amount: int
    daily_min_min_swap_amount: int


class DailyPriceStats(BaseModel):
    date: tuple[int, int]  # (year, day_of_year)
    lowest_price: int
    highest_price: int
    avg_price: int

    @property
    def day(self) -> dt.date:
        return _from_year_day(*self.date)


# ---------------------------------------------------------------------------
# GitHub releases
# ---------------------------------------------------------------------------

class GitHubAsset(BaseModel):
    name: str
    size: int
    browser_download_url: str


class GitHubRelease(BaseModel):
    tag_name: str
    published_at: dt.datetime
    assets: list[GitHubAsset] = []


AssetType = Literal["executable", "appimage", "installer", "bundle", "archive", "instructions"]


class DownloadAsset(BaseModel):
    name: str
    download_url: str
    signature_url: str = ""
    size: str = ""
    architecture: str = ""
    platform: str
    type: AssetType


class ReleaseInfo(BaseModel):
    version: str
    release_date: str
    assets: list[DownloadAsset]


class QuickDownloadUrls(BaseModel):
    windows: str
    macos_silicon: str
    macos_intel: str
    linux: str


class AurPackage(BaseModel):
    name: str
    package_url: str
    maintainer: str
    maintainer_url: str
    architectures: list[str]
    version: str = "N/A"


class AurResult(BaseModel):
    name: str = Field(alias="Name")
    version: str | None = Field(None, alias="Version")


class AurInfo(BaseModel):
    """Body of an AUR RPC v5 ``info`` response."""

    results: list[AurResult] = []
