"""
Pytest configuration and fixtures.

Author: Olivier Vitrac, PhD, HDR
        Generative Simulation Initiative
        olivier.vitrac@gmail.com
"""

import numpy as np
import pytest
from astropy.io import fits

from miricomp.config import FilterRecord, PipelineConfig, WCSInfo, image_filename

# MIRI imager pixel scale, 0.11 arcsec/pixel
MIRI_CDELT_DEG = 0.11 / 3600.0


@pytest.fixture
def wcs_header():
    """Create a FITS header carrying the six WCS keywords (CDELT in degrees)."""
    def _create(**overrides):
        header = fits.Header()
        values = {
            "CRPIX1": 512.5,
            "CRPIX2": 480.0,
            "CDELT1": -MIRI_CDELT_DEG,
            "CDELT2": MIRI_CDELT_DEG,
            "CRVAL1": 80.4875,
            "CRVAL2": -69.4986,
        }
        values.update(overrides)
        for key, value in values.items():
            if value is not None:
                header[key] = value
        return header

    return _create


@pytest.fixture
def synthetic_source_field():
    """Create a synthetic MIRI-like image: background, extended source, NaN border."""
    def _create(height=64, width=64, background=5.0, amplitude=100.0, sigma=8.0,
                noise=1.0, nan_border=2, seed=42):
        rng = np.random.default_rng(seed)
        yy, xx = np.mgrid[0:height, 0:width]
        image = background + rng.normal(0, noise, (height, width))
        image += amplitude * np.exp(
            -((xx - width / 2) ** 2 + (yy - height / 2) ** 2) / (2 * sigma ** 2)
        )
        if nan_border:
            image[:nan_border, :] = np.nan
            image[:, :nan_border] = np.nan
        return image

    return _create


@pytest.fixture
def make_record():
    """Create a FilterRecord from an array without touching disk."""
    def _create(name, image, color="#FFFFFF"):
        wcs = WCSInfo(
            CRPIX1=1.0, CRPIX2=1.0, CDELT1=-0.11, CDELT2=0.11, CRVAL1=0.0, CRVAL2=0.0
        )
        return FilterRecord(name=name, image=np.asarray(image, dtype=np.float64), wcs=wcs, color=color)

    return _create


@pytest.fixture
def write_products(tmp_path, wcs_header):
    """
    Write one i2d product per filter under tmp_path, JWST layout.

    Each file has an empty primary HDU and a SCI extension carrying the
    image and WCS keywords. Returns the matching default PipelineConfig.
    """
    def _create(images):
        config = PipelineConfig.default(tmp_path / "data")
        for spec in config.filters:
            directory = config.filter_dir(spec)
            directory.mkdir(parents=True, exist_ok=True)
            hdul = fits.HDUList([
                fits.PrimaryHDU(),
                fits.ImageHDU(data=np.asarray(images[spec.name], dtype=np.float32),
                              header=wcs_header(), name="SCI"),
            ])
            hdul.writeto(directory / image_filename(spec.name))
        return config

    return _create


@pytest.fixture
def correlated_images(synthetic_source_field):
    """Three co-registered images sharing a source with different noise."""
    base = synthetic_source_field(seed=1)
    return {
        "f770w": base * 0.5 + np.random.default_rng(2).normal(0, 2.0, base.shape),
        "f1130w": base * 1.0 + np.random.default_rng(3).normal(0, 2.0, base.shape),
        "f1500w": base * 2.0 + np.random.default_rng(4).normal(0, 2.0, base.shape),
    }
