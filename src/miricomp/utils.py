"""
Utility functions for the miricomp pipeline.

Includes:
- Version info
- Image type conversion for raster output
- Output directory helpers

Author: Olivier Vitrac, PhD, HDR
        Generative Simulation Initiative
        olivier.vitrac@gmail.com
"""

from __future__ import annotations

import platform
import sys
from datetime import datetime, timezone
from pathlib import Path

import numpy as np

__version__ = "0.3.0"
__version_info__ = {
    "major": 0,
    "minor": 3,
    "patch": 0,
    "status": "beta",
    "date": "2026-10-17",
}


def get_version_banner() -> str:
    """Return a formatted version banner for logging."""
    return f"miricomp v{__version__} | MIRI three-filter composite and analysis"


def get_version() -> str:
    """Return the library version string."""
    return __version__


def get_platform_info() -> str:
    """Return platform information string."""
    return f"{platform.system()} {platform.release()} / Python {sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"


def get_timestamp_iso() -> str:
    """Return current UTC timestamp in ISO format."""
    return datetime.now(timezone.utc).isoformat()


def to_uint8(data: np.ndarray) -> np.ndarray:
    """
    Convert normalized [0,1] float array to uint8 [0,255].

    NaN is mapped to 0.
    """
    return (np.clip(np.nan_to_num(data, nan=0.0), 0, 1) * 255).astype(np.uint8)


def ensure_output_dir(output_root: str | Path, run_id: str) -> Path:
    """
    Create and return the output directory for a run.

    Figures go to a ``figures`` subdirectory.
    """
    run_dir = Path(output_root) / run_id
    run_dir.mkdir(parents=True, exist_ok=True)
    (run_dir / "figures").mkdir(exist_ok=True)
    return run_dir
