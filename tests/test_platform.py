"""OS and architecture detection from request headers."""

import pytest

from services.models import QuickDownloadUrls
from services.platform import detect_arch, detect_os, is_silicon_mac, recommended_download

WINDOWS_UA = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/126.0 Safari/537.36"
MAC_UA = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.5 Safari/605.1.15"
LINUX_UA = "Mozilla/5.0 (X11; Linux x86_64; rv:127.0) Gecko/20100101 Firefox/127.0"
LINUX_ARM_UA = "Mozilla/5.0 (X11; Linux aarch64; rv:127.0) Gecko/20100101 Firefox/127.0"

URLS = QuickDownloadUrls(
    windows="https://example.org/setup.exe",
    macos_silicon="https://example.org/aarch64.dmg",
    macos_intel="https://example.org/x64.dmg",
    linux="/flatpak",
)


@pytest.mark.parametrize(
    "user_agent, platform_hint, expected",
    [
        (WINDOWS_UA, None, "windows"),
        (MAC_UA, None, "macos"),
        (LINUX_UA, None, "linux"),
        ("", '"Windows"', "windows"),
        ("", '"macOS"', "macos"),
        ("", '"Linux"', "linux"),
        ("curl/8.5.0", None, "unknown"),
        (None, None, "unknown"),
    ],
)
def test_detect_os(user_agent, platform_hint, expected):
    assert detect_os(user_agent, platform_hint) == expected


def test_detect_arch():
    assert detect_arch(LINUX_ARM_UA) == "arm64"
    assert detect_arch(LINUX_UA) == "x86_64"
    assert detect_arch(MAC_UA, '"arm"') == "arm64"
    assert detect_arch(MAC_UA, '"x86"') == "x86_64"


def test_is_silicon_mac():
    assert is_silicon_mac(MAC_UA, '"macOS"', '"arm"')
    assert not is_silicon_mac(MAC_UA)
    assert not is_silicon_mac(LINUX_ARM_UA)


def test_recommended_download():
    assert recommended_download(URLS, WINDOWS_UA) == URLS.windows
    assert recommended_download(URLS, MAC_UA) == URLS.macos_intel
    assert recommended_download(URLS, MAC_UA, '"macOS"', '"arm"') == URLS.macos_silicon
    assert recommended_download(URLS, LINUX_UA) == "/flatpak"
    assert recommended_download(URLS, "curl/8.5.0") is None
