"""
Figure rendering with matplotlib.

Every function builds a figure, saves it when a path is given, and
returns it. Figures that are saved are closed.

Author: Olivier Vitrac, PhD, HDR
        Generative Simulation Initiative
        olivier.vitrac@gmail.com
"""

from __future__ import annotations

import logging
from pathlib import Path

import matplotlib

matplotlib.use("Agg")  # Non-interactive backend for batch rendering

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.figure import Figure

from .colormap import apply_filter_color
from .composite import CompositeImage
from .config import FilterRecord, WCSInfo, filter_wavelength_um
from .stats import CorrelationMatrix, PCAResult, pixel_histogram

logger = logging.getLogger(__name__)

DPI = 150


def _finish(fig: Figure, path: str | Path | None) -> Figure:
    if path is not None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(path, dpi=DPI, bbox_inches="tight")
        plt.close(fig)
        logger.info("Wrote figure: %s", path)
    return fig


def plot_filter(
    record: FilterRecord,
    channel: np.ndarray,
    path: str | Path | None = None,
) -> Figure:
    """
    Render one filter on its black-to-color gradient.

    Parameters
    ----------
    record : FilterRecord
        Filter whose name and color label the view.
    channel : np.ndarray
        Preprocessed channel in [0, 1] (see stretch.preprocess_channel).
    path : str or Path, optional
        Output image path.
    """
    fig, ax = plt.subplots(figsize=(6, 6))
    ax.imshow(apply_filter_color(channel, record.color), origin="upper", interpolation="nearest")
    ax.set_title(f"{record.name.upper()} ({filter_wavelength_um(record.name):g} µm)")
    ax.set_xlabel("x [pixel]")
    ax.set_ylabel("y [pixel]")
    return _finish(fig, path)


def _draw_north_arrow(ax) -> None:
    """North up, east left, in axes coordinates."""
    style = dict(arrowstyle="<-", color="white", lw=1.5)
    ax.annotate("", xy=(0.92, 0.78), xytext=(0.92, 0.95), xycoords="axes fraction", arrowprops=style)
    ax.annotate("", xy=(0.92, 0.78), xytext=(0.75, 0.78), xycoords="axes fraction", arrowprops=style)
    ax.text(0.92, 0.97, "N", color="white", ha="center", va="bottom", transform=ax.transAxes)
    ax.text(0.73, 0.78, "E", color="white", ha="right", va="center", transform=ax.transAxes)


def _draw_scale_bar(ax, shape: tuple[int, int], wcs: WCSInfo, arcsec: float) -> None:
    height, width = shape
    length_px = wcs.arcsec_to_pixels(arcsec)
    x0 = 0.05 * width
    y = 0.93 * height  # bottom of the frame with origin="upper"
    ax.plot([x0, x0 + length_px], [y, y], color="white", lw=2)
    ax.text(
        x0 + length_px / 2,
        y - 0.02 * height,
        f'{arcsec:g}"',
        color="white",
        ha="center",
        va="bottom",
    )


def plot_composite(
    composite: CompositeImage,
    wcs: WCSInfo,
    scale_bar_arcsec: float = 10.0,
    path: str | Path | None = None,
) -> Figure:
    """
    Render the RGB composite with north arrow and scale bar.

    Parameters
    ----------
    composite : CompositeImage
        Composite to draw.
    wcs : WCSInfo
        WCS of the shared pixel grid, for the scale bar.
    scale_bar_arcsec : float, default 10.0
        Scale bar length.
    path : str or Path, optional
        Output image path.
    """
    fig, ax = plt.subplots(figsize=(7, 7))
    ax.imshow(np.clip(composite.rgb, 0, 1), origin=composite.origin, interpolation="nearest")
    _draw_north_arrow(ax)
    _draw_scale_bar(ax, composite.shape, wcs, scale_bar_arcsec)
    ax.set_title(
        f"R={composite.red.upper()}  G={composite.green.upper()}  B={composite.blue.upper()}"
    )
    ax.set_axis_off()
    return _finish(fig, path)


def plot_histograms(
    records: list[FilterRecord],
    bins: int = 100,
    path: str | Path | None = None,
) -> Figure:
    """Histogram of finite intensities per filter, log-scaled counts."""
    fig, axes = plt.subplots(1, len(records), figsize=(4.5 * len(records), 3.5), squeeze=False)
    for ax, record in zip(axes[0], records):
        counts, edges = pixel_histogram(record.image, bins=bins)
        ax.stairs(counts, edges, color=record.color, fill=True, alpha=0.8)
        ax.set_yscale("log")
        ax.set_title(record.name.upper())
        ax.set_xlabel("Intensity [MJy/sr]")
    axes[0][0].set_ylabel("Pixels")
    fig.tight_layout()
    return _finish(fig, path)


def plot_correlation(corr: CorrelationMatrix, path: str | Path | None = None) -> Figure:
    """Correlation matrix heat map with annotated coefficients."""
    fig, ax = plt.subplots(figsize=(4.5, 4))
    image = ax.imshow(corr.matrix, vmin=-1, vmax=1, cmap="coolwarm")
    labels = [n.upper() for n in corr.names]
    ax.set_xticks(range(len(labels)), labels)
    ax.set_yticks(range(len(labels)), labels)
    for i in range(len(labels)):
        for j in range(len(labels)):
            ax.text(j, i, f"{corr.matrix[i, j]:.2f}", ha="center", va="center")
    fig.colorbar(image, ax=ax, label="Pearson r")
    fig.tight_layout()
    return _finish(fig, path)


def plot_pca_scores(
    pca: PCAResult,
    max_points: int = 50_000,
    path: str | Path | None = None,
) -> Figure:
    """
    Scatter of the first two principal component scores.

    At most max_points rows are drawn, sampled with a fixed seed.
    """
    scores = pca.scores
    if scores.shape[0] > max_points:
        rng = np.random.default_rng(0)
        scores = scores[rng.choice(scores.shape[0], size=max_points, replace=False)]

    fig, ax = plt.subplots(figsize=(5.5, 5))
    ax.scatter(scores[:, 0], scores[:, 1], s=1, alpha=0.3, color="0.2", rasterized=True)
    ax.set_xlabel(f"PC1 ({pca.proportion[0]:.1%})")
    ax.set_ylabel(f"PC2 ({pca.proportion[1]:.1%})")
    ax.axhline(0, color="0.6", lw=0.5)
    ax.axvline(0, color="0.6", lw=0.5)
    fig.tight_layout()
    return _finish(fig, path)
