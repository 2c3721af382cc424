"""
I/O operations for MIRI i2d products.

Handles:
- FITS reading of the science array and its header
- Reduced WCS extraction from headers
- Per-filter loading into FilterRecord objects
- Optional ECSV source catalogs

Author: Olivier Vitrac, PhD, HDR
        Generative Simulation Initiative
        olivier.vitrac@gmail.com
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import numpy as np
from astropy.io import fits
from astropy.table import Table

from .config import FilterRecord, FilterSpec, PipelineConfig, WCSInfo
from .errors import FileReadError, MissingHeaderKeyError

logger = logging.getLogger(__name__)

WCS_KEYWORDS = ("CRPIX1", "CRPIX2", "CDELT1", "CDELT2", "CRVAL1", "CRVAL2")

DEG_TO_ARCSEC = 3600.0


def read_fits(
    path: str | Path,
    dtype: np.dtype = np.float64,
) -> tuple[np.ndarray, fits.Header]:
    """
    Read the image array and header of a FITS file.

    Parameters
    ----------
    path : str or Path
        Path to the FITS file.
    dtype : np.dtype, default np.float64
        Output data type.

    Returns
    -------
    tuple[np.ndarray, fits.Header]
        (image, header) of the first HDU holding 2D data.

    Notes
    -----
    JWST i2d products keep an empty primary HDU and store the science
    array in the SCI extension, whose header carries the WCS keywords.
    Plain single-HDU files are read from the primary HDU.
    """
    path = Path(path)
    try:
        with fits.open(path) as hdul:
            for hdu in hdul:
                if hdu.data is None or hdu.data.ndim < 2:
                    continue
                data = np.asarray(hdu.data, dtype=dtype)
                if data.ndim > 2:
                    data = data[0]
                return data, hdu.header.copy()
    except (OSError, ValueError) as e:
        raise FileReadError(path, detail=str(e)) from e

    raise FileReadError(path, detail="no 2D image data found")


def _header_value(header: Any, keyword: str) -> Any:
    """Look up a keyword in a mapping or a flat keyword/value sequence."""
    # fits.Header also registers as a Sequence; only plain lists and tuples are flat
    if isinstance(header, (list, tuple)):
        items = [str(item).strip() for item in header]
        try:
            index = items.index(keyword)
        except ValueError:
            raise KeyError(keyword) from None
        if index + 1 >= len(items):
            raise KeyError(keyword)
        return header[index + 1]

    if keyword not in header:
        raise KeyError(keyword)
    return header[keyword]


def extract_wcs(header: Mapping | fits.Header | Sequence, source: str = "") -> WCSInfo:
    """
    Extract the reduced WCS from an image header.

    Parameters
    ----------
    header : fits.Header, mapping, or sequence
        Header as an ordered keyword -> value mapping, or a flat sequence
        where each value immediately follows its keyword.
    source : str, optional
        Label used in error messages (e.g., filter name).

    Returns
    -------
    WCSInfo
        Six-parameter WCS with CDELT1/CDELT2 converted to arcsec/pixel.

    Raises
    ------
    MissingHeaderKeyError
        If any of the six keywords is absent.
    """
    values: dict[str, float] = {}
    for keyword in WCS_KEYWORDS:
        try:
            raw = _header_value(header, keyword)
        except KeyError:
            raise MissingHeaderKeyError(keyword, source) from None
        try:
            values[keyword] = float(raw)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Header keyword {keyword} is not numeric: {raw!r}") from e

    values["CDELT1"] *= DEG_TO_ARCSEC
    values["CDELT2"] *= DEG_TO_ARCSEC

    return WCSInfo(**values)


def load_filter(spec: FilterSpec, config: PipelineConfig) -> FilterRecord:
    """
    Load one filter's i2d image and WCS.

    Parameters
    ----------
    spec : FilterSpec
        Filter descriptor.
    config : PipelineConfig
        Run configuration (for path resolution).

    Returns
    -------
    FilterRecord
        Loaded record. The catalog path is recorded but not required.
    """
    image_path = config.image_path(spec)
    catalog_path = config.catalog_path(spec)

    try:
        image, header = read_fits(image_path)
    except FileReadError as e:
        e.filter_name = spec.name
        raise

    wcs = extract_wcs(header, source=spec.name)

    logger.info(
        "Loaded %s: shape=%s, scale=%.4f arcsec/px, finite=%d/%d",
        spec.name,
        image.shape,
        wcs.pixel_scale_arcsec,
        int(np.isfinite(image).sum()),
        image.size,
    )

    image.setflags(write=False)
    return FilterRecord(
        name=spec.name,
        image=image,
        wcs=wcs,
        color=spec.color,
        path=str(image_path),
        catalog_path=str(catalog_path),
    )


def load_filters(config: PipelineConfig, show_progress: bool = True) -> list[FilterRecord]:
    """
    Load all configured filters in order. Any failure aborts.

    Parameters
    ----------
    config : PipelineConfig
        Run configuration.
    show_progress : bool, default True
        Show progress bar.

    Returns
    -------
    list[FilterRecord]
        One record per configured filter, in configuration order.
    """
    from .cli_output import create_progress_bar

    records = []
    with create_progress_bar(len(config.filters), "Loading", disable=not show_progress) as pbar:
        for spec in config.filters:
            records.append(load_filter(spec, config))
            pbar.update(1)
    return records


def read_catalog(path: str | Path) -> Table | None:
    """
    Read an ECSV source catalog.

    Returns None if the file does not exist.
    """
    path = Path(path)
    if not path.exists():
        logger.debug("Catalog not found: %s", path)
        return None

    try:
        table = Table.read(path, format="ascii.ecsv")
    except (OSError, ValueError) as e:
        raise FileReadError(path, detail=str(e)) from e

    logger.info("Read catalog %s: %d sources", path.name, len(table))
    return table


def write_fits(
    path: str | Path,
    data: np.ndarray,
    header: fits.Header | None = None,
    overwrite: bool = False,
) -> None:
    """
    Write a FITS file with an optional header.

    Parameters
    ----------
    path : str or Path
        Output path.
    data : np.ndarray
        Image data to write.
    header : fits.Header, optional
        Header to include. A minimal header is created if not provided.
    overwrite : bool, default False
        Whether to overwrite existing file.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    if header is None:
        header = fits.Header()

    hdu = fits.PrimaryHDU(data=data, header=header)
    hdu.writeto(path, overwrite=overwrite)
    logger.info("Wrote FITS: %s", path)
