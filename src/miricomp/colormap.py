"""
Single-filter colorization.

Each filter is shown on a gradient from black to its display color, so a
view reads as one broadband channel rather than reconstructed RGB.

Author: Olivier Vitrac, PhD, HDR
        Generative Simulation Initiative
        olivier.vitrac@gmail.com
"""

from __future__ import annotations

import logging

import numpy as np

logger = logging.getLogger(__name__)


def hex_to_rgb(color: str) -> tuple[float, float, float]:
    """Convert '#RRGGBB' to an (R, G, B) tuple in [0, 1]."""
    value = color.lstrip("#")
    if len(value) != 6:
        raise ValueError(f"Expected '#RRGGBB', got {color!r}")
    return tuple(int(value[i:i + 2], 16) / 255.0 for i in (0, 2, 4))


def rgb_to_hex(rgb: tuple[float, float, float]) -> str:
    """Convert an (R, G, B) tuple in [0, 1] to '#RRGGBB'."""
    levels = [int(round(min(max(c, 0.0), 1.0) * 255)) for c in rgb]
    return "#{:02X}{:02X}{:02X}".format(*levels)


def _linear_interpolate(x: np.ndarray, colors: list[tuple[float, float, float]]) -> np.ndarray:
    """
    Linearly interpolate between colors based on input values.

    Parameters
    ----------
    x : np.ndarray
        Input values in [0, 1] range.
    colors : list of tuples
        List of (R, G, B) colors to interpolate between.

    Returns
    -------
    np.ndarray
        RGB array with shape (*x.shape, 3).
    """
    n_colors = len(colors)
    if n_colors < 2:
        raise ValueError("Need at least 2 colors for interpolation")

    x = np.clip(np.nan_to_num(x, nan=0.0), 0, 1)

    # Segment index and local parameter within the segment
    segments = np.minimum((x * (n_colors - 1)).astype(int), n_colors - 2)
    t = x * (n_colors - 1) - segments

    colors_array = np.array(colors)
    c0 = colors_array[segments]
    c1 = colors_array[segments + 1]

    result = c0 + t[..., np.newaxis] * (c1 - c0)

    return result.astype(np.float32)


def filter_palette(color: str) -> list[tuple[float, float, float]]:
    """Black-to-color palette for a filter's display color."""
    return [(0.0, 0.0, 0.0), hex_to_rgb(color)]


def apply_filter_color(channel: np.ndarray, color: str) -> np.ndarray:
    """
    Colorize a normalized channel with a filter's display color.

    Parameters
    ----------
    channel : np.ndarray
        2D channel with values in [0, 1]. NaN is drawn black.
    color : str
        Display color as '#RRGGBB'.

    Returns
    -------
    np.ndarray
        RGB image with shape (H, W, 3), values in [0, 1].
    """
    if channel.ndim != 2:
        raise ValueError(f"Expected 2D array, got shape {channel.shape}")

    rgb = _linear_interpolate(channel, filter_palette(color))
    logger.debug("Applied filter color %s", color)
    return rgb
