"""
Intensity normalization for display and compositing.

Provides the percentile (zscale-style) contrast stretch and the channel
preprocessing shared by single-filter views and the RGB composite.

Author: Olivier Vitrac, PhD, HDR
        Generative Simulation Initiative
        olivier.vitrac@gmail.com
"""

from __future__ import annotations

import logging

import numpy as np

logger = logging.getLogger(__name__)

# Percentile window of the stretch
LOW_PERCENTILE = 5.0
HIGH_PERCENTILE = 95.0


def zscale_normalize(x: np.ndarray, contrast: float = 1.0) -> np.ndarray:
    """
    Map intensities to [0, 1] with a 5-95 percentile stretch.

    Parameters
    ----------
    x : np.ndarray
        Input image. May contain NaN and Inf.
    contrast : float, default 1.0
        Multiplier applied after scaling, in (0, 1].

    Returns
    -------
    np.ndarray
        Array of the same shape with values in [0, 1]. NaN inputs stay NaN.

    Notes
    -----
    Percentiles are computed over finite values only, with linear
    interpolation between order statistics. With fewer than 2 finite
    values, or when the 5th and 95th percentiles coincide, the window is
    degenerate and an all-zero array is returned.

    Percentile windows are robust to cosmic rays and saturated cores,
    which would dominate a min/max stretch.
    """
    if not 0.0 < contrast <= 1.0:
        raise ValueError(f"contrast must be in (0, 1], got {contrast}")

    x = np.asarray(x, dtype=np.float64)
    valid = x[np.isfinite(x)]

    if valid.size < 2:
        logger.debug("Degenerate input: %d finite values, returning zeros", valid.size)
        return np.zeros(x.shape, dtype=np.float64)

    q05, q95 = np.percentile(valid, [LOW_PERCENTILE, HIGH_PERCENTILE])
    if q95 - q05 <= 0:
        logger.debug("Degenerate input: zero-width percentile window at %g", q05)
        return np.zeros(x.shape, dtype=np.float64)

    scaled = (x - q05) / (q95 - q05) * contrast

    # np.clip keeps NaN as NaN
    return np.clip(scaled, 0.0, 1.0)


def fill_nan_with_median(image: np.ndarray) -> np.ndarray:
    """
    Replace NaN pixels by the median of the non-NaN pixels.

    Infinite values are kept and take part in the median. An all-NaN
    image is returned unchanged.
    """
    image = np.asarray(image, dtype=np.float64)
    nan_mask = np.isnan(image)
    if not nan_mask.any():
        return image.copy()
    if nan_mask.all():
        return image.copy()

    filled = image.copy()
    filled[nan_mask] = np.median(image[~nan_mask])
    return filled


def preprocess_channel(
    image: np.ndarray,
    gamma: float = 0.8,
    contrast: float = 0.1,
) -> np.ndarray:
    """
    Prepare a raw image for display: NaN fill, zscale stretch, gamma.

    Parameters
    ----------
    image : np.ndarray
        Raw 2D image.
    gamma : float, default 0.8
        Power applied after normalization. Values below 1 brighten midtones.
    contrast : float, default 0.1
        Contrast passed to zscale_normalize.

    Returns
    -------
    np.ndarray
        Channel in [0, 1], same shape as the input.
    """
    if gamma <= 0:
        raise ValueError(f"gamma must be positive, got {gamma}")

    normalized = zscale_normalize(fill_nan_with_median(image), contrast=contrast)
    return np.power(normalized, gamma)
