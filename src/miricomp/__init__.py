"""
miricomp - Three-filter composite and pixel statistics for JWST/MIRI images.

Loads the f770w, f1130w and f1500w i2d products of program 6553, builds a
percentile-stretched RGB composite, and computes summary statistics,
correlation and principal components of the pixel intensities.

Author: Olivier Vitrac, PhD, HDR
        Generative Simulation Initiative
        olivier.vitrac@gmail.com

Example
-------
>>> from miricomp import PipelineConfig, run_analysis
>>> config = PipelineConfig.default("data/")
>>> result = run_analysis(config, output_root="analysis")
>>> print(result.pca.summary_rows())

Example (library use)
---------------------
>>> from miricomp import load_filters, composite_from_records, zscale_normalize
>>> records = load_filters(config)
>>> composite = composite_from_records(records, gamma=0.8, contrast=0.1)
"""

from .config import (
    AnalysisResult,
    FilterRecord,
    FilterSpec,
    PipelineConfig,
    WCSInfo,
    catalog_filename,
    filter_wavelength_um,
    image_filename,
)
from .errors import FileReadError, MiricompError, MissingHeaderKeyError, ShapeMismatchError
from .utils import __version__, __version_info__, get_version_banner

# Primary entry point
from .cli import run_analysis

# I/O functions
from .io import extract_wcs, load_filter, load_filters, read_catalog, read_fits, write_fits

# Normalization
from .stretch import fill_nan_with_median, preprocess_channel, zscale_normalize

# Composite
from .composite import (
    ChannelRole,
    CompositeImage,
    assign_roles,
    build_composite,
    composite_from_records,
)

# Statistics
from .stats import (
    CorrelationMatrix,
    PCAResult,
    StatsSummary,
    complete_observations,
    correlation_matrix,
    pixel_histogram,
    principal_components,
    summarize,
    summarize_filters,
)

# Colorization
from .colormap import apply_filter_color, hex_to_rgb, rgb_to_hex

__all__ = [
    # Version
    "__version__",
    "__version_info__",
    "get_version_banner",
    # Config / records
    "PipelineConfig",
    "FilterSpec",
    "FilterRecord",
    "WCSInfo",
    "AnalysisResult",
    "image_filename",
    "catalog_filename",
    "filter_wavelength_um",
    # Errors
    "MiricompError",
    "MissingHeaderKeyError",
    "FileReadError",
    "ShapeMismatchError",
    # Main entry point
    "run_analysis",
    # I/O
    "read_fits",
    "write_fits",
    "extract_wcs",
    "load_filter",
    "load_filters",
    "read_catalog",
    # Normalization
    "zscale_normalize",
    "fill_nan_with_median",
    "preprocess_channel",
    # Composite
    "ChannelRole",
    "CompositeImage",
    "assign_roles",
    "build_composite",
    "composite_from_records",
    # Statistics
    "StatsSummary",
    "CorrelationMatrix",
    "PCAResult",
    "summarize",
    "summarize_filters",
    "pixel_histogram",
    "complete_observations",
    "correlation_matrix",
    "principal_components",
    # Colorization
    "apply_filter_color",
    "hex_to_rgb",
    "rgb_to_hex",
]
