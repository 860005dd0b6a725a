"""SVG charts and their fallbacks."""

import re

import pytest

from services import charts
from services.models import DailyPriceStats, LiquidityDay, ProviderDailySwapBounds


def root_tag(svg: str) -> str:
    return svg[: svg.index(">") + 1]


@pytest.fixture
def liquidity_days() -> list[LiquidityDay]:
    # newest first, as the API sends them
    return [
        LiquidityDay(date=(2025, 12), total_liquidity_btc=14.0),
        LiquidityDay(date=(2025, 11), total_liquidity_btc=12.0),
        LiquidityDay(date=(2025, 10), total_liquidity_btc=10.0),
    ]


def test_liquidity_chart_is_responsive_svg(liquidity_days):
    svg = charts.liquidity_chart(liquidity_days)

    tag = root_tag(svg)
    assert svg.startswith("<svg")
    assert 'style="width: 100%; height: auto; display: block;"' in tag
    assert not re.search(r'\swidth="', tag)
    assert not re.search(r'\sheight="', tag)
    assert "viewBox" in tag
    assert "BTC" in svg


@pytest.mark.parametrize("data", [None, []])
def test_liquidity_chart_fallback(data):
    assert charts.liquidity_chart(data) == charts.FALLBACK_SVG


def test_best_price_chart_renders():
    stats = [
        DailyPriceStats(date=(2025, 10), lowest_price=590_000, highest_price=610_000, avg_price=600_000),
        DailyPriceStats(date=(2025, 11), lowest_price=595_000, highest_price=615_000, avg_price=605_000),
    ]

    svg = charts.best_price_chart(stats)

    assert svg.startswith("<svg")
    assert charts.PRICE_COLOR in svg


def test_best_price_chart_without_valid_points_falls_back():
    stats = [DailyPriceStats(date=(2025, 10), lowest_price=0, highest_price=0, avg_price=0)]

    assert charts.best_price_chart(stats) == charts.FALLBACK_SVG
    assert charts.best_price_chart(None) == charts.FALLBACK_SVG


def test_provider_chart_without_history():
    svg = charts.provider_chart([])

    assert "No historical data available" in svg
    assert charts.provider_chart(None) == svg


def test_provider_chart_render_failure(monkeypatch):
    def broken(*_args, **_kwargs):
        raise RuntimeError("renderer exploded")

    monkeypatch.setattr(charts, "render_area_chart", broken)
    bounds = [
        ProviderDailySwapBounds(
            day="2025-03-01",
            peer_id="a",
            daily_max_max_swap_amount=10_000_000,
            daily_min_min_swap_amount=100_000,
        )
    ]

    assert "Chart generation failed" in charts.provider_chart(bounds)


def test_liquidity_chart_render_failure(monkeypatch, liquidity_days):
    monkeypatch.setattr(charts, "render_area_chart", lambda *a, **k: 1 / 0)

    assert charts.liquidity_chart(liquidity_days) == charts.FALLBACK_SVG


def test_make_responsive_only_touches_root_element():
    raw = (
        '<?xml version="1.0" encoding="utf-8"?>\n'
        '<svg width="540pt" height="288pt" viewBox="0 0 540 288" xmlns="http://www.w3.org/2000/svg">\n'
        '<rect width="10" height="20"/>\n'
        "</svg>\n"
    )

    svg = charts._make_responsive(raw)

    assert svg.startswith('<svg style="width: 100%; height: auto; display: block;" viewBox="0 0 540 288"')
    assert '<rect width="10" height="20"/>' in svg
