"""
Configuration and record dataclasses for the miricomp pipeline.

Author: Olivier Vitrac, PhD, HDR
        Generative Simulation Initiative
        olivier.vitrac@gmail.com
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from .composite import CompositeImage
    from .stats import CorrelationMatrix, PCAResult, StatsSummary

# JWST program 6553, observation 1, MIRI imaging
PRODUCT_PREFIX = "jw06553-o001_t001_miri"

_HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")
_FILTER_NAME = re.compile(r"^f(\d+)[a-z]*$", re.IGNORECASE)


def image_filename(filter_name: str) -> str:
    """Return the i2d product file name for a filter."""
    return f"{PRODUCT_PREFIX}_{filter_name}_i2d.fits"


def catalog_filename(filter_name: str) -> str:
    """Return the source catalog file name for a filter."""
    return f"{PRODUCT_PREFIX}_{filter_name}_cat.ecsv"


def filter_wavelength_um(filter_name: str) -> float:
    """
    Pivot wavelength encoded in a MIRI filter name, in microns.

    MIRI names carry the wavelength in units of 10 nm
    ("f770w" -> 7.7, "f1130w" -> 11.3).
    """
    match = _FILTER_NAME.match(filter_name)
    if match is None:
        raise ValueError(f"Cannot parse wavelength from filter name {filter_name!r}")
    return int(match.group(1)) / 100.0


@dataclass(frozen=True)
class FilterSpec:
    """One entry of the filter table: name, data directory and display color."""

    name: str
    path: str
    color: str  # hex "#RRGGBB"

    @property
    def wavelength_um(self) -> float:
        return filter_wavelength_um(self.name)


# Standard filter table, shortest to longest wavelength
DEFAULT_FILTERS: tuple[tuple[str, str], ...] = (
    ("f770w", "#3B7DD8"),
    ("f1130w", "#4DAF4A"),
    ("f1500w", "#E4572E"),
)


def as_triple(value: float | tuple[float, float, float]) -> tuple[float, float, float]:
    """Expand a scalar to (red, green, blue), or validate a 3-tuple."""
    if np.isscalar(value):
        return (float(value),) * 3
    values = tuple(float(v) for v in value)
    if len(values) != 3:
        raise ValueError(f"Expected a scalar or 3 values, got {len(values)}")
    return values


@dataclass
class PipelineConfig:
    """
    Configuration for an analysis run.

    Passed explicitly to every entry point; there is no module-level state.
    """

    # --- Inputs ---
    filters: list[FilterSpec] = field(default_factory=list)
    """Exactly three filters. Relative paths resolve against data_root."""

    data_root: str = "."
    """Root directory holding one sub-directory per filter."""

    # --- Single-filter display ---
    display_gamma: float = 0.8
    """Gamma applied to single-filter views (< 1 brightens midtones)."""

    display_contrast: float = 0.1
    """Contrast factor applied after the 5-95 percentile stretch."""

    # --- Composite ---
    composite_gamma: float | tuple[float, float, float] = 0.8
    """Gamma for the RGB composite: scalar or (red, green, blue)."""

    composite_contrast: float | tuple[float, float, float] = 0.1
    """Contrast for the RGB composite: scalar or (red, green, blue)."""

    # --- Analysis / rendering ---
    histogram_bins: int = 100
    """Number of bins for pixel intensity histograms."""

    scale_bar_arcsec: float = 10.0
    """Length of the composite scale bar in arcseconds."""

    @classmethod
    def default(cls, data_root: str | Path = ".", **kwargs) -> "PipelineConfig":
        """Build the standard three-filter configuration under data_root."""
        filters = [FilterSpec(name=name, path=name, color=color) for name, color in DEFAULT_FILTERS]
        return cls(filters=filters, data_root=str(data_root), **kwargs)

    def filter_dir(self, spec: FilterSpec) -> Path:
        """Directory holding the products of one filter."""
        path = Path(spec.path)
        if not path.is_absolute():
            path = Path(self.data_root) / path
        return path

    def image_path(self, spec: FilterSpec) -> Path:
        return self.filter_dir(spec) / image_filename(spec.name)

    def catalog_path(self, spec: FilterSpec) -> Path:
        return self.filter_dir(spec) / catalog_filename(spec.name)

    def validate(self) -> None:
        """Validate configuration parameters."""
        if len(self.filters) != 3:
            raise ValueError(f"Exactly 3 filters are required, got {len(self.filters)}")
        names = [f.name for f in self.filters]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate filter names: {names}")
        for spec in self.filters:
            if not _HEX_COLOR.match(spec.color):
                raise ValueError(f"Filter {spec.name}: color must be '#RRGGBB', got {spec.color!r}")
            filter_wavelength_um(spec.name)
        for label, value in (
            ("display_gamma", self.display_gamma),
            ("composite_gamma", self.composite_gamma),
        ):
            if any(g <= 0 for g in as_triple(value)):
                raise ValueError(f"{label} must be positive, got {value}")
        for label, value in (
            ("display_contrast", self.display_contrast),
            ("composite_contrast", self.composite_contrast),
        ):
            if any(not 0.0 < c <= 1.0 for c in as_triple(value)):
                raise ValueError(f"{label} must be in (0, 1], got {value}")
        if self.histogram_bins < 1:
            raise ValueError(f"histogram_bins must be >= 1, got {self.histogram_bins}")
        if self.scale_bar_arcsec <= 0:
            raise ValueError(f"scale_bar_arcsec must be positive, got {self.scale_bar_arcsec}")


@dataclass(frozen=True)
class WCSInfo:
    """Reduced six-parameter WCS. CDELT values are in arcsec/pixel."""

    CRPIX1: float
    CRPIX2: float
    CDELT1: float
    CDELT2: float
    CRVAL1: float
    CRVAL2: float

    @property
    def pixel_scale_arcsec(self) -> float:
        """Mean absolute pixel scale in arcsec/pixel."""
        return (abs(self.CDELT1) + abs(self.CDELT2)) / 2.0

    def arcsec_to_pixels(self, arcsec: float) -> float:
        """Convert an angular length to pixels."""
        scale = self.pixel_scale_arcsec
        if scale == 0:
            raise ValueError("Pixel scale is zero")
        return arcsec / scale


@dataclass(frozen=True)
class FilterRecord:
    """A loaded filter: image, WCS and display color."""

    name: str
    image: np.ndarray
    wcs: WCSInfo
    color: str
    path: str = ""
    catalog_path: str = ""

    @property
    def shape(self) -> tuple[int, ...]:
        return self.image.shape


@dataclass
class AnalysisResult:
    """
    Result of an analysis run.

    Holds the derived products and the paths of everything written to disk.
    """

    filters: list[str] = field(default_factory=list)
    """Filter names in configuration order."""

    stats: list[StatsSummary] = field(default_factory=list)
    """Per-filter summary statistics."""

    correlation: CorrelationMatrix | None = None
    """Pearson correlation over complete observations."""

    pca: PCAResult | None = None
    """Principal component decomposition."""

    composite: CompositeImage | None = None
    """RGB composite."""

    n_complete: int = 0
    """Number of pixel positions finite in all three filters."""

    catalog_rows: dict[str, int] = field(default_factory=dict)
    """Source count per filter when its catalog exists."""

    outputs: dict[str, str] = field(default_factory=dict)
    """Map of output type to path."""

    config: PipelineConfig | None = None
    version: str = ""
    timestamp: str = ""
    platform: str = ""
