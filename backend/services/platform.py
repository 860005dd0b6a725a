"""Visitor OS and CPU architecture from request headers.

Uses the User-Agent string plus the optional client hints
`Sec-CH-UA-Platform` and `Sec-CH-UA-Arch` (sent quoted, e.g. "macOS").
Browsers on Apple Silicon still report an Intel Mac user agent, so
without the arch hint a Mac is assumed to be x86_64.
"""

import re
from typing import Literal

from services.models import QuickDownloadUrls

OS = Literal["windows", "macos", "linux", "unknown"]
Arch = Literal["arm64", "x86_64"]

_ARM_UA = re.compile(r"arm64|aarch64", re.IGNORECASE)


def _hint(value: str | None) -> str:
    return (value or "").strip().strip('"').lower()


def detect_os(user_agent: str | None, platform_hint: str | None = None) -> OS:
    ua = (user_agent or "").lower()
    platform = _hint(platform_hint)

    if "win" in platform or "windows" in ua:
        return "windows"
    if "mac" in platform or "mac" in ua:
        return "macos"
    if "linux" in platform or "linux" in ua:
        return "linux"
    return "unknown"


def detect_arch(user_agent: str | None, arch_hint: str | None = None) -> Arch:
    if _hint(arch_hint) == "arm":
        return "arm64"
    if _ARM_UA.search(user_agent or ""):
        return "arm64"
    return "x86_64"


def is_silicon_mac(
    user_agent: str | None,
    platform_hint: str | None = None,
    arch_hint: str | None = None,
) -> bool:
    return (
        detect_os(user_agent, platform_hint) == "macos"
        and detect_arch(user_agent, arch_hint) == "arm64"
    )


def recommended_download(
    urls: QuickDownloadUrls,
    user_agent: str | None,
    platform_hint: str | None = None,
    arch_hint: str | None = None,
) -> str | None:
    """Best quick-download URL for the visitor, or None when the OS is unknown."""
    os_name = detect_os(user_agent, platform_hint)
    if os_name == "windows":
        return urls.windows
    if os_name == "macos":
        if detect_arch(user_agent, arch_hint) == "arm64":
            return urls.macos_silicon
        return urls.macos_intel
    if os_name == "linux":
        return urls.linux
    return None
