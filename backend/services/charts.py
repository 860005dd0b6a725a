"""SVG area charts for the market pages.

Charts are rendered server-side with matplotlib and inlined into HTML,
so the root <svg> loses its fixed size and scales to its container.
Empty data or a rendering failure yields a small fallback SVG instead.
"""

import io
import logging
import re
from typing import Callable

import matplotlib

matplotlib.use("Agg")

import matplotlib.dates as mdates  # noqa: E402
import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd  # noqa: E402
from matplotlib.ticker import FuncFormatter  # noqa: E402

from services.liquidity import SATOSHIS_PER_BTC  # noqa: E402
from services.models import DailyPriceStats, LiquidityDay, ProviderDailySwapBounds  # noqa: E402

logger = logging.getLogger(__name__)

LIQUIDITY_COLOR = "#ff6b35"
PRICE_COLOR = "#22c55e"
LABEL_COLOR = "#666"

NO_DATA = "No data available"
NO_HISTORY = "No historical data available"
CHART_FAILED = "Chart generation failed"

RESPONSIVE_STYLE = "width: 100%; height: auto; display: block;"


def fallback_svg(message: str = NO_DATA) -> str:
    return (
        '<svg viewBox="0 0 800 200" preserveAspectRatio="xMidYMid meet" '
        'style="width:100%; height:auto; display:block;">\n'
        f'  <text x="400" y="100" text-anchor="middle" fill="{LABEL_COLOR}">{message}</text>\n'
        "</svg>"
    )


FALLBACK_SVG = fallback_svg()


def _make_responsive(svg: str) -> str:
    """Drop the XML prolog and the fixed width/height of the root element."""
    svg = svg[svg.index("<svg"):]
    head_end = svg.index(">") + 1
    head = svg[:head_end]
    head = re.sub(r'\s+width="[^"]*"', "", head, count=1)
    head = re.sub(r'\s+height="[^"]*"', "", head, count=1)
    head = head.replace("<svg", f'<svg style="{RESPONSIVE_STYLE}"', 1)
    return head + svg[head_end:]


def render_area_chart(
    frame: pd.DataFrame,
    value_column: str,
    color: str,
    label: Callable[[float], str],
) -> str:
    """Render `frame` (a `date` column plus `value_column`) as an area chart with a line on top."""
    frame = frame.sort_values("date")

    with plt.rc_context({"svg.hashsalt": "eigenwallet-charts", "svg.fonttype": "none"}):
        fig, ax = plt.subplots(figsize=(7.5, 4.0))
        try:
            fig.patch.set_alpha(0)
            ax.patch.set_alpha(0)

            ax.fill_between(frame["date"], frame[value_column], color=color, alpha=0.15, linewidth=0)
            ax.plot(
                frame["date"],
                frame[value_column],
                color=color,
                linewidth=2,
                solid_capstyle="round",
                solid_joinstyle="round",
            )

            ax.xaxis.set_major_formatter(mdates.DateFormatter("%b %d"))
            ax.yaxis.set_major_formatter(FuncFormatter(lambda value, _pos: label(value)))
            ax.tick_params(length=0, labelsize=14, labelcolor=LABEL_COLOR)
            for spine in ax.spines.values():
                spine.set_visible(False)
            ax.grid(False)
            ax.set_ylim(bottom=0)
            fig.tight_layout(pad=0)

            buffer = io.StringIO()
            fig.savefig(buffer, format="svg", transparent=True)
        finally:
            plt.close(fig)

    return _make_responsive(buffer.getvalue())


def liquidity_chart(days: list[LiquidityDay] | None) -> str:
    """Total liquidity (BTC) per day."""
    if not days:
        return FALLBACK_SVG

    frame = pd.DataFrame(
        {
            "date": pd.to_datetime([d.day for d in days]),
            "liquidity": [d.total_liquidity_btc for d in days],
        }
    )
    try:
        return render_area_chart(
            frame,
            "liquidity",
            LIQUIDITY_COLOR,
            lambda v: "" if v == 0 else f"{v:.0f} BTC",
        )
    except Exception as e:
        logger.error("Failed to generate liquidity chart: %s", e)
        return FALLBACK_SVG


def best_price_chart(stats: list[DailyPriceStats] | None) -> str:
    """Average daily price in BTC per XMR; the lowest price is the best rate for BTC to XMR."""
    valid = [s for s in stats or [] if s.avg_price > 0]
    if not valid:
        return FALLBACK_SVG

    frame = pd.DataFrame(
        {
            "date": pd.to_datetime([s.day for s in valid]),
            "avg_price": [s.avg_price / SATOSHIS_PER_BTC for s in valid],
        }
    )
    try:
        return render_area_chart(frame, "avg_price", PRICE_COLOR, lambda v: f"{v:.6f} BTC")
    except Exception as e:
        logger.error("Failed to generate best price chart: %s", e)
        return FALLBACK_SVG


def provider_chart(bounds: list[ProviderDailySwapBounds] | None) -> str:
    """Daily maximum swap amount (BTC) for one provider."""
    if not bounds:
        return fallback_svg(NO_HISTORY)

    frame = pd.DataFrame(
        {
            "date": pd.to_datetime([b.day for b in bounds]),
            "max_swap": [b.daily_max_max_swap_amount / SATOSHIS_PER_BTC for b in bounds],
        }
    )
    try:
        return render_area_chart(frame, "max_swap", LIQUIDITY_COLOR, lambda v: f"{v:.3f} BTC")
    except Exception as e:
        logger.error("Failed to generate provider chart: %s", e)
        return fallback_svg(CHART_FAILED)
