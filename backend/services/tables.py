"""HTML download tables (Jinja) for the download page."""

from __future__ import annotations

from collections import defaultdict

from jinja2 import Environment

from services.models import AurPackage, DownloadAsset, ReleaseInfo

PLATFORM_ORDER = ["Linux", "Windows", "macOS"]

PLATFORM_ICONS: dict[str, str] = {
    platform: (
        f'<img src="/icons/os-{platform.lower()}.svg" width="20" height="20" alt="{platform}" '
        'style="display:inline-block;vertical-align:middle;"/>'
    )
    for platform in PLATFORM_ORDER
}

DOWNLOAD_ICON = (
    '<img src="/icons/download.svg" width="20" height="20" alt="Download" '
    'style="display:inline-block;vertical-align:middle;margin-left:0.5em;"/>'
)
DOWNLOAD_ICON_SMALL = (
    '<img src="/icons/download.svg" width="16" height="16" alt="Download" '
    'style="display:inline-block;vertical-align:middle;margin-left:0.3em;"/>'
)

NO_DOWNLOADS = "<p><em>No downloads available.</em></p>"
DOWNLOADS_UNAVAILABLE = "<p><em>Downloads are temporarily unavailable.</em></p>"

CLI_ASSET_MARKERS = ("asb_", "swap_", "orchestrator_", "rendezvous-server_")

# Architecture labels and icons are trusted markup built in services.releases.
_DOWNLOAD_TABLE = """
<table>
  <thead>
    <tr>
      <th scope="col">Architecture</th>
      <th scope="col">File</th>
      <th scope="col">Signature</th>
      <th scope="col">Size</th>
    </tr>
  </thead>
  <tbody>
{%- for platform, assets in sections %}
    <tr>
      <td colspan="4" style="background: #e8e8e8; color: #222; font-weight: bold; padding: 0.5em 1em;">
        {{ icons.get(platform, '') | safe }} {{ platform }}
      </td>
    </tr>
{%- for asset in assets %}
    <tr>
      <td>{{ asset.architecture | safe }}</td>
      <td>
{%- if asset.type == 'instructions' -%}
<a href="{{ asset.download_url }}">Instructions</a>
{%- else -%}
<a href="{{ asset.download_url }}" style="text-decoration: none; display: inline-flex; align-items: center;"><code style="font-size: 0.85em; word-break: break-all;">{{ asset.download_url.rsplit('/', 1)[-1] }}</code>{{ download_icon | safe }}</a>
{%- endif -%}
</td>
      <td>
{%- if asset.signature_url -%}
<a href="{{ asset.signature_url }}" style="display: inline-flex; align-items: center;">signature{{ download_icon_small | safe }}</a>
{%- endif -%}
</td>
      <td>{{ asset.size }}</td>
    </tr>
{%- endfor %}
{%- endfor %}
  </tbody>
</table>"""

_AUR_TABLE = """<table>
  <thead>
    <tr>
      <th class="hide-mobile">Architecture</th>
      <th>Package</th>
      <th>Version</th>
      <th>Maintainer</th>
    </tr>
  </thead>
  <tbody>
{%- for pkg in packages %}
  <tr>
    <td class="hide-mobile">{{ pkg.architectures | join(', ') }}</td>
    <td><a href="{{ pkg.package_url }}"><code>{{ pkg.name }}</code></a></td>
    <td>{{ pkg.version }}</td>
    <td><a href="{{ pkg.maintainer_url }}">{{ pkg.maintainer }}</a></td>
  </tr>
{%- endfor %}
  <tr>
    <td colspan="4" class="notice">
    The Arch packages are unofficial and community maintained. Use at your own risk.
    </td>
  </tr>
  </tbody>
</table>"""

_env = Environment(autoescape=True)
_download_template = _env.from_string(_DOWNLOAD_TABLE)
_aur_template = _env.from_string(_AUR_TABLE)


def group_by_platform(assets: list[DownloadAsset]) -> list[tuple[str, list[DownloadAsset]]]:
    """Group assets into (platform, assets) sections in PLATFORM_ORDER; other platforms are left out."""
    groups: dict[str, list[DownloadAsset]] = defaultdict(list)
    for asset in assets:
        groups[asset.platform].append(asset)
    return [(platform, groups[platform]) for platform in PLATFORM_ORDER if groups.get(platform)]


def generate_table(assets: list[DownloadAsset]) -> str:
    if not assets:
        return NO_DOWNLOADS
    return _download_template.render(
        sections=group_by_platform(assets),
        icons=PLATFORM_ICONS,
        download_icon=DOWNLOAD_ICON,
        download_icon_small=DOWNLOAD_ICON_SMALL,
    )


def generate_gui_table(release: ReleaseInfo | None) -> str:
    if release is None:
        return DOWNLOADS_UNAVAILABLE
    return generate_table(
        [
            a for a in release.assets
            if "eigenwallet_" in a.download_url or a.type == "instructions"
        ]
    )


def generate_cli_table(release: ReleaseInfo | None) -> str:
    if release is None:
        return DOWNLOADS_UNAVAILABLE
    return generate_table(
        [
            a for a in release.assets
            if any(marker in a.download_url for marker in CLI_ASSET_MARKERS)
        ]
    )


def generate_aur_table(packages: list[AurPackage]) -> str:
    return _aur_template.render(packages=packages)
