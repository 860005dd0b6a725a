"""Download page routes: release tables, AUR table and quick links."""

import logging

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from errors import DataUnavailableError
from services.models import QuickDownloadUrls, ReleaseInfo
from services.platform import recommended_download
from services.releases import FALLBACK_DOWNLOAD_URL, ReleaseService
from services.tables import generate_aur_table, generate_cli_table, generate_gui_table

logger = logging.getLogger(__name__)

router = APIRouter()


def get_release_service(request: Request) -> ReleaseService:
    return request.app.state.releases


@router.get("/downloads/release")
async def release(service: ReleaseService = Depends(get_release_service)) -> ReleaseInfo:
    info = await service.fetch_latest_release()
    if info is None:
        raise DataUnavailableError("GitHub release")
    return info


@router.get("/downloads/gui", response_class=HTMLResponse)
async def gui_table(service: ReleaseService = Depends(get_release_service)) -> str:
    return generate_gui_table(await service.fetch_latest_release())


@router.get("/downloads/cli", response_class=HTMLResponse)
async def cli_table(service: ReleaseService = Depends(get_release_service)) -> str:
    return generate_cli_table(await service.fetch_latest_release())


@router.get("/downloads/aur", response_class=HTMLResponse)
async def aur_table(service: ReleaseService = Depends(get_release_service)) -> str:
    return generate_aur_table(await service.aur_packages())


@router.get("/downloads/quick")
async def quick_downloads(service: ReleaseService = Depends(get_release_service)) -> QuickDownloadUrls:
    return await service.get_quick_download_urls()


@router.get("/downloads/recommended")
async def recommended(
    service: ReleaseService = Depends(get_release_service),
    user_agent: str | None = Header(None),
    sec_ch_ua_platform: str | None = Header(None),
    sec_ch_ua_arch: str | None = Header(None),
) -> RedirectResponse:
    """Redirect to the installer that best matches the visitor's browser."""
    urls = await service.get_quick_download_urls()
    target = recommended_download(urls, user_agent, sec_ch_ua_platform, sec_ch_ua_arch)
    return RedirectResponse(target or FALLBACK_DOWNLOAD_URL, status_code=302)
