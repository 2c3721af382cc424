"""
RGB composite construction from three filters.

Filters are assigned to channels by wavelength (longest -> red,
shortest -> blue), each channel is stretched independently and the three
are stacked into an (H, W, 3) image.

Author: Olivier Vitrac, PhD, HDR
        Generative Simulation Initiative
        olivier.vitrac@gmail.com
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

import numpy as np

from .config import FilterRecord, as_triple, filter_wavelength_um
from .errors import ShapeMismatchError
from .stretch import preprocess_channel

logger = logging.getLogger(__name__)


class ChannelRole(Enum):
    """Display channel a filter is assigned to."""

    RED = "red"
    GREEN = "green"
    BLUE = "blue"


@dataclass(frozen=True)
class CompositeImage:
    """
    RGB composite.

    ``rgb`` has shape (H, W, 3) with values in [0, 1]. Row 0 is drawn at
    the top: increasing row index maps to decreasing display y.
    """

    rgb: np.ndarray
    red: str
    green: str
    blue: str

    # matplotlib imshow origin matching the row convention above
    origin = "upper"

    @property
    def shape(self) -> tuple[int, int]:
        return self.rgb.shape[:2]

    @property
    def roles(self) -> dict[ChannelRole, str]:
        return {
            ChannelRole.RED: self.red,
            ChannelRole.GREEN: self.green,
            ChannelRole.BLUE: self.blue,
        }

    def hex_colors(self) -> np.ndarray:
        """Per-pixel display color as an (H, W) array of '#RRGGBB' strings."""
        levels = np.rint(np.clip(self.rgb, 0, 1) * 255).astype(np.uint32)
        packed = (levels[..., 0] << 16) | (levels[..., 1] << 8) | levels[..., 2]
        return np.vectorize(lambda v: f"#{int(v):06X}", otypes=[object])(packed)


def assign_roles(records: list[FilterRecord]) -> dict[ChannelRole, FilterRecord]:
    """
    Assign three filters to display channels by wavelength.

    Parameters
    ----------
    records : list[FilterRecord]
        Exactly three loaded filters, in any order.

    Returns
    -------
    dict[ChannelRole, FilterRecord]
        Longest wavelength as RED, middle as GREEN, shortest as BLUE.
    """
    if len(records) != 3:
        raise ValueError(f"Composite needs exactly 3 filters, got {len(records)}")

    ordered = sorted(records, key=lambda r: filter_wavelength_um(r.name))
    roles = {
        ChannelRole.BLUE: ordered[0],
        ChannelRole.GREEN: ordered[1],
        ChannelRole.RED: ordered[2],
    }
    logger.debug(
        "Channel roles: R=%s G=%s B=%s",
        roles[ChannelRole.RED].name,
        roles[ChannelRole.GREEN].name,
        roles[ChannelRole.BLUE].name,
    )
    return roles


def build_composite(
    red: FilterRecord,
    green: FilterRecord,
    blue: FilterRecord,
    gamma: float | tuple[float, float, float] = 0.8,
    contrast: float | tuple[float, float, float] = 0.1,
) -> CompositeImage:
    """
    Build an RGB composite from three co-registered filters.

    Parameters
    ----------
    red, green, blue : FilterRecord
        Filters assigned to each channel.
    gamma : float or (r, g, b), default 0.8
        Gamma applied per channel.
    contrast : float or (r, g, b), default 0.1
        Contrast applied per channel.

    Returns
    -------
    CompositeImage
        Stacked RGB image.

    Raises
    ------
    ShapeMismatchError
        If the three images do not share the same pixel grid.
    """
    shapes = [r.image.shape for r in (red, green, blue)]
    if len(set(shapes)) != 1:
        raise ShapeMismatchError(
            {f"{role}:{r.name}": r.image.shape for role, r in zip("RGB", (red, green, blue))}
        )

    gammas = as_triple(gamma)
    contrasts = as_triple(contrast)

    channels = [
        preprocess_channel(record.image, gamma=g, contrast=c)
        for record, g, c in zip((red, green, blue), gammas, contrasts)
    ]
    rgb = np.stack(channels, axis=-1)

    logger.info(
        "Built composite %dx%d (R=%s G=%s B=%s)",
        rgb.shape[1],
        rgb.shape[0],
        red.name,
        green.name,
        blue.name,
    )

    return CompositeImage(rgb=rgb, red=red.name, green=green.name, blue=blue.name)


def composite_from_records(
    records: list[FilterRecord],
    gamma: float | tuple[float, float, float] = 0.8,
    contrast: float | tuple[float, float, float] = 0.1,
) -> CompositeImage:
    """Assign roles by wavelength and build the composite."""
    roles = assign_roles(records)
    return build_composite(
        roles[ChannelRole.RED],
        roles[ChannelRole.GREEN],
        roles[ChannelRole.BLUE],
        gamma=gamma,
        contrast=contrast,
    )
