"""GitHub release metadata and AUR package versions for the download page.

Asset file names carry everything we show: platform, architecture and
package kind are all parsed from the lowercase name.
"""

import asyncio
import logging
import math
from typing import Awaitable, Callable

import httpx
from pydantic import ValidationError

from config import settings
from services.cache import Cache
from services.fetch import fetch_with_retry
from services.models import (
    AssetType,
    AurInfo,
    AurPackage,
    DownloadAsset,
    GitHubAsset,
    GitHubRelease,
    QuickDownloadUrls,
    ReleaseInfo,
)

logger = logging.getLogger(__name__)

GITHUB_API_BASE = "https://api.github.com/repos/eigenwallet/core"
GITHUB_RELEASES_API = f"{GITHUB_API_BASE}/releases/latest"
RELEASE_CACHE_KEY = "github-release-latest"

AUR_INFO_API = "https://aur.archlinux.org/rpc/v5/info"
AUR_UNKNOWN_VERSION = "N/A"

WALLET_ASSET_PREFIX = "eigenwallet_"
SIGNATURE_SUFFIXES = (".sig", ".asc")

FALLBACK_DOWNLOAD_URL = "/download"
FLATPAK_URL = "/flatpak"

AUR_PACKAGES = [
    AurPackage(
        name="eigenwallet-bin",
        package_url="https://aur.archlinux.org/packages/eigenwallet-bin",
        maintainer="Kainoa Kanter (That1Calculator)",
        maintainer_url="https://aur.archlinux.org/account/That1Calculator",
        architectures=["x86_64"],
    ),
    AurPackage(
        name="eigenwallet-developertools-bin",
        package_url="https://aur.archlinux.org/packages/eigenwallet-developertools-bin",
        maintainer="Kainoa Kanter (That1Calculator)",
        maintainer_url="https://aur.archlinux.org/account/That1Calculator",
        architectures=["x86_64"],
    ),
]


def _float_right(label: str) -> str:
    return f"<span style='float: right;'>{label}</span>"


class ReleaseService:
    def __init__(
        self,
        cache: Cache,
        client: httpx.AsyncClient,
        github_token: str | None = None,
        retries: int | None = None,
        backoff_seconds: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._cache = cache
        self._client = client
        self._github_token = github_token
        self._retries = settings.api_retries if retries is None else retries
        self._backoff_seconds = (
            settings.retry_backoff_seconds if backoff_seconds is None else backoff_seconds
        )
        self._sleep = sleep

    def _github_headers(self) -> dict[str, str]:
        headers = {"Accept": "application/vnd.github+json"}
        if self._github_token:
            headers["Authorization"] = f"Bearer {self._github_token}"
        return headers

    async def _get(self, url: str, headers: dict[str, str] | None = None) -> httpx.Response:
        return await fetch_with_retry(
            self._client,
            url,
            headers=headers,
            retries=self._retries,
            backoff_seconds=self._backoff_seconds,
            sleep=self._sleep,
        )

    async def fetch_github_release(self) -> GitHubRelease | None:
        """Latest GitHub release, or None if GitHub is unreachable or misbehaving."""
        cached = self._cache.get(RELEASE_CACHE_KEY)
        if cached is not None:
            try:
                return GitHubRelease.model_validate(cached)
            except ValidationError:
                logger.warning("Ignoring cached GitHub release: does not match schema")

        logger.info("Fetching fresh GitHub release data...")
        try:
            response = await self._get(GITHUB_RELEASES_API, headers=self._github_headers())
            if not response.is_success:
                logger.warning("GitHub API responded with status: %d", response.status_code)
                return None
            release = GitHubRelease.model_validate(response.json())
        except httpx.HTTPError as e:
            logger.warning("Failed to fetch GitHub release: %s", e)
            return None
        except (ValueError, ValidationError) as e:
            logger.warning("Malformed GitHub release payload: %s", e)
            return None

        self._cache.set(RELEASE_CACHE_KEY, release.model_dump(mode="json"))
        return release

    async def fetch_latest_release(self) -> ReleaseInfo | None:
        release = await self.fetch_github_release()
        if release is None:
            return None
        return build_release_info(release)

    async def get_quick_download_urls(self) -> QuickDownloadUrls:
        release = await self.fetch_github_release()
        assets = filter_wallet_assets(release.assets) if release else []

        def find(predicate: Callable[[str], bool]) -> str:
            for asset in assets:
                if predicate(asset.name.lower()):
                    return asset.browser_download_url
            return FALLBACK_DOWNLOAD_URL

        return QuickDownloadUrls(
            windows=find(lambda name: name.endswith(".exe")),
            macos_silicon=find(lambda name: name.endswith(".dmg") and _is_arm(name)),
            macos_intel=find(lambda name: name.endswith(".dmg") and _is_x86(name)),
            linux=FLATPAK_URL,
        )

    async def fetch_aur_package_version(self, package_name: str) -> str:
        """Current AUR version of a package, or "N/A". "N/A" is never cached."""
        cache_key = f"aur-{package_name}"
        cached = self._cache.get(cache_key)
        if isinstance(cached, str) and cached:
            return cached

        url = str(httpx.URL(AUR_INFO_API, params={"arg[]": package_name}))
        try:
            response = await self._get(url)
            if not response.is_success:
                logger.warning("AUR API responded with status %d for %s", response.status_code, package_name)
                return AUR_UNKNOWN_VERSION
            info = AurInfo.model_validate(response.json())
        except httpx.HTTPError as e:
            logger.warning("Failed to fetch AUR version for %s: %s", package_name, e)
            return AUR_UNKNOWN_VERSION
        except (ValueError, ValidationError) as e:
            logger.warning("Malformed AUR payload for %s: %s", package_name, e)
            return AUR_UNKNOWN_VERSION

        version = info.results[0].version if info.results else None
        if not version:
            return AUR_UNKNOWN_VERSION
        self._cache.set(cache_key, version)
        return version

    async def aur_packages(self) -> list[AurPackage]:
        versions = await asyncio.gather(
            *[self.fetch_aur_package_version(pkg.name) for pkg in AUR_PACKAGES]
        )
        return [
            pkg.model_copy(update={"version": version})
            for pkg, version in zip(AUR_PACKAGES, versions)
        ]


# ---------------------------------------------------------------------------
# Asset parsing
# ---------------------------------------------------------------------------

def _is_signature(name: str) -> bool:
    return name.endswith(SIGNATURE_SUFFIXES)


def _is_arm(name: str) -> bool:
    return "aarch64" in name or "arm64" in name


def _is_x86(name: str) -> bool:
    return "x86_64" in name or "x64" in name or "amd64" in name


def filter_wallet_assets(assets: list[GitHubAsset]) -> list[GitHubAsset]:
    return [
        a for a in assets
        if a.name.startswith(WALLET_ASSET_PREFIX) and not _is_signature(a.name)
    ]


def build_release_info(release: GitHubRelease) -> ReleaseInfo:
    """Turn a GitHub release into download rows, each paired with its `.asc` signature."""
    url_by_name = {a.name: a.browser_download_url for a in release.assets}

    assets = [
        transform_asset(asset, url_by_name.get(f"{asset.name}.asc", ""))
        for asset in release.assets
        if not _is_signature(asset.name)
    ]
    assets.extend(special_install_methods())

    return ReleaseInfo(
        version=release.tag_name.removeprefix("v"),
        release_date=release.published_at.date().isoformat(),
        assets=assets,
    )


def transform_asset(asset: GitHubAsset, signature_url: str) -> DownloadAsset:
    platform, architecture, asset_type = parse_asset_name(asset.name)
    return DownloadAsset(
        name=display_name(asset.name),
        download_url=asset.browser_download_url,
        signature_url=signature_url,
        size=format_file_size(asset.size),
        architecture=architecture,
        platform=platform,
        type=asset_type,
    )


def special_install_methods() -> list[DownloadAsset]:
    """Linux install routes that are documented rather than downloaded."""
    return [
        DownloadAsset(
            name="Flatpak",
            download_url=FLATPAK_URL,
            architecture=f"x86_64 {_float_right('Flatpak')}",
            platform="Linux",
            type="instructions",
        ),
        DownloadAsset(
            name="AUR",
            download_url="/download#aur",
            architecture=f"x86_64 {_float_right('AUR')}",
            platform="Linux",
            type="instructions",
        ),
    ]


def parse_asset_name(asset_name: str) -> tuple[str, str, AssetType]:
    """Return (platform, architecture label, asset type) for a release file name."""
    name = asset_name.lower()
    platform = detect_platform(name)
    return platform, format_architecture(name, platform), detect_asset_type(name)


def detect_platform(name: str) -> str:
    # Linux first: ".appimage" would otherwise look like a macOS ".app".
    if "linux" in name or ".appimage" in name or ".deb" in name or ".rpm" in name:
        return "Linux"
    if "darwin" in name or "macos" in name or ".dmg" in name or ".app.tar.gz" in name:
        return "macOS"
    if "windows" in name or "win" in name or ".exe" in name or ".msi" in name:
        return "Windows"
    return "Unknown"


def detect_asset_type(name: str) -> AssetType:
    if ".exe" in name:
        return "executable"
    if ".msi" in name or ".deb" in name or ".rpm" in name:
        return "installer"
    if ".dmg" in name or ".app.tar.gz" in name:
        return "bundle"
    if ".appimage" in name:
        return "appimage"
    return "archive"


def _mac_release_type(name: str) -> str:
    if ".dmg" in name:
        return "DMG"
    if ".app.tar.gz" in name:
        return "Bundle"
    return "Binary"


def format_architecture(name: str, platform: str) -> str:
    if _is_x86(name):
        if platform == "macOS":
            return f"Intel {_float_right(_mac_release_type(name))}"
        if ".appimage" in name:
            return f"x86_64 {_float_right('AppImage')}"
        if ".deb" in name:
            return f"x86_64 {_float_right('Debian')}"
        return "x86_64"

    if _is_arm(name):
        if platform == "macOS":
            return f"Silicon {_float_right(_mac_release_type(name))}"
        return "ARM64"

    return ""


_DISPLAY_NAMES = [
    (".dmg", "DMG Installer"),
    (".appimage", "AppImage"),
    (".deb", "DEB Package"),
    (".rpm", "RPM Package"),
    (".msi", "MSI Installer"),
    (".exe", "Executable"),
    (".app.tar.gz", "macOS App Bundle"),
    (".tar", "TAR Archive"),
    (".zip", "ZIP Archive"),
]


def display_name(asset_name: str) -> str:
    name = asset_name.lower()
    for marker, label in _DISPLAY_NAMES:
        if marker in name:
            return label
    return "Archive"


def format_file_size(num_bytes: int) -> str:
    units = ["B", "KB", "MB", "GB"]
    size = float(num_bytes)
    unit = 0
    while size >= 1024 and unit < len(units) - 1:
        size /= 1024
        unit += 1
    return f"{math.floor(size + 0.5)} {units[unit]}"
