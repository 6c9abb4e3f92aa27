"""Static snapshot rendering of a normalised series into a PIL image."""
from __future__ import annotations

import io
from typing import Sequence

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import mplfinance as mpf
import pandas as pd
from PIL import Image

from .config import ChartOptions, SnapshotConfig
from .document import PALETTE
from .types import Observation

try:  # Pillow 10+ exposes the Resampling enum
    RESAMPLE_BICUBIC = Image.Resampling.BICUBIC
except AttributeError:  # pragma: no cover - compatibility path
    RESAMPLE_BICUBIC = Image.BICUBIC


def _rgba_to_mpl(color: str) -> tuple:
    channels = color[color.index("(") + 1 : color.index(")")].split(",")
    red, green, blue, alpha = (float(part) for part in channels)
    return (red / 255.0, green / 255.0, blue / 255.0, alpha)


PALETTE_RGB = [_rgba_to_mpl(color) for color in PALETTE]


def _ohlc_frame(observations: Sequence[Observation]) -> pd.DataFrame:
    """Build an mplfinance-ready frame, using a synthetic daily index when dates are unusable."""

    synthetic = pd.date_range("2000-01-01", periods=len(observations), freq="D")
    try:
        index = pd.DatetimeIndex(pd.to_datetime([obs.date for obs in observations], errors="coerce"))
    except (TypeError, ValueError):
        index = synthetic
    if index.tz is not None:
        index = index.tz_localize(None)
    if index.isna().any() or not index.is_monotonic_increasing or index.has_duplicates:
        index = synthetic
    return pd.DataFrame(
        {
            "Open": [obs.open for obs in observations],
            "High": [obs.high for obs in observations],
            "Low": [obs.low for obs in observations],
            "Close": [obs.close for obs in observations],
        },
        index=index,
    )


def _candlestick_figure(observations: Sequence[Observation], options: ChartOptions, cfg: SnapshotConfig):
    market_colors = mpf.make_marketcolors(
        up=cfg.up_color,
        down=cfg.down_color,
        edge={"up": cfg.up_color, "down": cfg.down_color},
        wick={"up": cfg.up_color, "down": cfg.down_color},
    )
    rc = {
        "axes.facecolor": cfg.bg,
        "figure.facecolor": cfg.bg,
        "savefig.facecolor": cfg.bg,
        "axes.labelcolor": "#e0e0e0",
        "xtick.color": "#a0a0a0",
        "ytick.color": "#a0a0a0",
    }
    style = mpf.make_mpf_style(marketcolors=market_colors, rc=rc)
    fig, _ = mpf.plot(
        _ohlc_frame(observations),
        type="candle",
        style=style,
        figsize=(cfg.img_size / cfg.dpi, cfg.img_size / cfg.dpi),
        update_width_config={"candle_linewidth": cfg.line_width},
        ylabel=options.y_label,
        title=options.display_title,
        returnfig=True,
    )
    return fig


def _matplotlib_figure(observations: Sequence[Observation], options: ChartOptions, cfg: SnapshotConfig):
    values = [obs.value for obs in observations]
    labels = [obs.label or obs.date or "" for obs in observations]

    fig, ax = plt.subplots(figsize=(cfg.img_size / cfg.dpi, cfg.img_size / cfg.dpi))
    fig.patch.set_facecolor(cfg.bg)
    ax.set_facecolor(cfg.bg)
    ax.set_title(options.display_title, color="#e0e0e0")

    # Wedges cannot be negative; an all-zero breakdown is drawn as bars.
    sizes = [max(value, 0.0) for value in values]
    if options.is_proportion and sum(sizes) > 0:
        wedge = {"width": 0.4} if options.chart_type == "doughnut" else None
        ax.pie(
            sizes,
            labels=labels,
            colors=[PALETTE_RGB[i % len(PALETTE_RGB)] for i in range(len(sizes))],
            wedgeprops=wedge,
            textprops={"color": "#e0e0e0"},
        )
        return fig

    positions = list(range(len(values)))
    if options.chart_type in ("bar", "candlestick") or options.is_proportion:
        ax.bar(positions, values, color=cfg.line_color)
    elif options.chart_type == "scatter":
        ax.scatter(positions, values, color=cfg.line_color)
    else:
        ax.plot(positions, values, color=cfg.line_color, linewidth=cfg.line_width)
        if options.chart_type == "area":
            ax.fill_between(positions, values, alpha=0.3, color=cfg.line_color)

    if options.chart_type != "scatter":
        ax.set_xticks(positions)
        ax.set_xticklabels(labels, rotation=45, ha="right")
    ax.set_xlabel(options.x_label, color="#e0e0e0")
    ax.set_ylabel(options.y_label, color="#e0e0e0")
    ax.tick_params(colors="#a0a0a0")
    return fig


def render_snapshot(
    observations: Sequence[Observation], options: ChartOptions, cfg: SnapshotConfig
) -> Image.Image:
    """Render a static preview of the chart into a PIL image.

    Candlestick charts use mplfinance when every observation carries all four
    price fields; otherwise they fall back to a bar of ``value``.
    """

    if options.chart_type == "candlestick" and all(obs.has_ohlc for obs in observations):
        fig = _candlestick_figure(observations, options, cfg)
    else:
        fig = _matplotlib_figure(observations, options, cfg)

    buf = io.BytesIO()
    try:
        fig.savefig(
            buf,
            format="png",
            dpi=cfg.dpi,
            bbox_inches="tight",
            pad_inches=cfg.tight_layout_pad,
        )
    finally:
        plt.close(fig)
    buf.seek(0)
    image = Image.open(buf).convert("RGB")
    image = image.resize((cfg.img_size, cfg.img_size), RESAMPLE_BICUBIC)
    return image
