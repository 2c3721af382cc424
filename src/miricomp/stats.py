"""
Descriptive statistics across filters.

Summary statistics per filter, intensity histograms, Pearson correlation
and principal component analysis over pixel positions that are finite in
every filter.

Author: Olivier Vitrac, PhD, HDR
        Generative Simulation Initiative
        olivier.vitrac@gmail.com
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from .config import FilterRecord
from .errors import ShapeMismatchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatsSummary:
    """Summary statistics of one filter over its finite pixels."""

    name: str
    mean: float
    median: float
    std: float  # sample standard deviation (ddof=1)
    n_valid: int


@dataclass(frozen=True)
class CorrelationMatrix:
    """Symmetric Pearson correlation matrix with unit diagonal."""

    names: tuple[str, ...]
    matrix: np.ndarray

    def value(self, a: str, b: str) -> float:
        """Correlation between two named filters."""
        i = self.names.index(a)
        j = self.names.index(b)
        return float(self.matrix[i, j])


@dataclass(frozen=True)
class PCAResult:
    """
    Principal component decomposition of standardized pixel intensities.

    Components are ordered by decreasing explained variance.
    """

    names: tuple[str, ...]
    std: np.ndarray  # sqrt of eigenvalues
    proportion: np.ndarray  # fraction of total variance
    cumulative: np.ndarray  # running sum of proportion
    rotation: np.ndarray  # (n_vars, n_components), columns are eigenvectors
    scores: np.ndarray  # (n_rows, n_components)
    center: np.ndarray
    scale: np.ndarray

    @property
    def n_components(self) -> int:
        return len(self.std)

    @property
    def component_names(self) -> list[str]:
        return [f"PC{i + 1}" for i in range(self.n_components)]

    def summary_rows(self) -> list[dict[str, float | str]]:
        """Variance summary, one row per component."""
        return [
            {
                "component": name,
                "std": float(s),
                "proportion": float(p),
                "cumulative": float(c),
            }
            for name, s, p, c in zip(self.component_names, self.std, self.proportion, self.cumulative)
        ]


def summarize(image: np.ndarray, name: str = "") -> StatsSummary:
    """
    Compute mean, median and sample standard deviation over finite pixels.

    Parameters
    ----------
    image : np.ndarray
        Input image. NaN and Inf pixels are ignored.
    name : str, optional
        Filter name stored in the summary.

    Returns
    -------
    StatsSummary
        Summary. Statistics are NaN when there are no finite pixels; the
        standard deviation is NaN with a single finite pixel.

    Notes
    -----
    The median of an even number of values is the mean of the two middle
    values.
    """
    values = np.asarray(image, dtype=np.float64)
    values = values[np.isfinite(values)]
    n = values.size

    if n == 0:
        logger.warning("No finite pixels in %s", name or "image")
        return StatsSummary(name=name, mean=np.nan, median=np.nan, std=np.nan, n_valid=0)

    return StatsSummary(
        name=name,
        mean=float(np.mean(values)),
        median=float(np.median(values)),
        std=float(np.std(values, ddof=1)) if n > 1 else np.nan,
        n_valid=int(n),
    )


def summarize_filters(records: list[FilterRecord]) -> list[StatsSummary]:
    """Summary statistics for each filter, in input order."""
    summaries = [summarize(r.image, r.name) for r in records]
    for s in summaries:
        logger.info(
            "%s: mean=%.4g median=%.4g std=%.4g (n=%d)",
            s.name, s.mean, s.median, s.std, s.n_valid,
        )
    return summaries


def pixel_histogram(
    image: np.ndarray,
    bins: int = 100,
    log: bool = False,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Histogram of finite pixel intensities.

    Parameters
    ----------
    image : np.ndarray
        Input image.
    bins : int, default 100
        Number of bins.
    log : bool, default False
        Histogram log10 of the positive finite values instead.

    Returns
    -------
    tuple[np.ndarray, np.ndarray]
        (counts, bin_edges) as returned by np.histogram.
    """
    values = np.asarray(image, dtype=np.float64)
    values = values[np.isfinite(values)]
    if log:
        values = np.log10(values[values > 0])
    if values.size == 0:
        return np.zeros(bins, dtype=np.int64), np.linspace(0.0, 1.0, bins + 1)
    return np.histogram(values, bins=bins)


def complete_observations(records: list[FilterRecord]) -> tuple[np.ndarray, np.ndarray]:
    """
    Table of pixel intensities at positions finite in every filter.

    Parameters
    ----------
    records : list[FilterRecord]
        Co-registered filters.

    Returns
    -------
    tuple[np.ndarray, np.ndarray]
        (table, mask)
        table: (N, n_filters) array, one row per complete pixel position,
               columns in input order.
        mask: boolean image, True where the position is complete.

    Notes
    -----
    A single joint mask is applied to all filters, so every row refers to
    the same pixel in every column.
    """
    shapes = {r.name: r.image.shape for r in records}
    if len(set(shapes.values())) != 1:
        raise ShapeMismatchError(shapes)

    stack = np.stack([np.asarray(r.image, dtype=np.float64) for r in records], axis=-1)
    mask = np.all(np.isfinite(stack), axis=-1)
    table = stack[mask]

    logger.debug("Complete observations: %d of %d positions", table.shape[0], mask.size)
    return table, mask


def _check_table(table: np.ndarray, names: tuple[str, ...]) -> None:
    if table.ndim != 2 or table.shape[1] != len(names):
        raise ValueError(f"Expected table with {len(names)} columns, got shape {table.shape}")
    if table.shape[0] < 2:
        raise ValueError(f"Need at least 2 complete observations, got {table.shape[0]}")
    std = np.std(table, axis=0, ddof=1)
    constant = [n for n, s in zip(names, std) if not s > 0]
    if constant:
        raise ValueError(f"Zero variance in {', '.join(constant)}")


def correlation_matrix(table: np.ndarray, names: tuple[str, ...] | list[str]) -> CorrelationMatrix:
    """
    Pearson correlation between the columns of a complete-observation table.

    Parameters
    ----------
    table : np.ndarray
        (N, k) table from complete_observations.
    names : sequence of str
        Column names.

    Returns
    -------
    CorrelationMatrix
        Symmetric k x k matrix, diagonal exactly 1, entries in [-1, 1].
    """
    names = tuple(names)
    _check_table(table, names)

    corr = np.corrcoef(table, rowvar=False)
    corr = np.clip((corr + corr.T) / 2.0, -1.0, 1.0)
    np.fill_diagonal(corr, 1.0)

    return CorrelationMatrix(names=names, matrix=corr)


def principal_components(table: np.ndarray, names: tuple[str, ...] | list[str]) -> PCAResult:
    """
    Principal component analysis of standardized columns.

    Parameters
    ----------
    table : np.ndarray
        (N, k) table from complete_observations.
    names : sequence of str
        Column names.

    Returns
    -------
    PCAResult
        All k components, ordered by decreasing variance.

    Notes
    -----
    Columns are centered and scaled to unit sample variance, so the
    eigendecomposition is that of the correlation matrix. Each
    eigenvector's sign is chosen so its largest-magnitude loading is
    positive. Scores are the standardized data projected on the
    eigenvectors.
    """
    names = tuple(names)
    _check_table(table, names)

    n = table.shape[0]
    center = table.mean(axis=0)
    scale = table.std(axis=0, ddof=1)
    z = (table - center) / scale

    cov = (z.T @ z) / (n - 1)
    eigvals, eigvecs = np.linalg.eigh(cov)

    order = np.argsort(eigvals)[::-1]
    eigvals = np.clip(eigvals[order], 0.0, None)
    eigvecs = eigvecs[:, order]

    pivot = np.argmax(np.abs(eigvecs), axis=0)
    signs = np.sign(eigvecs[pivot, np.arange(eigvecs.shape[1])])
    signs[signs == 0] = 1.0
    eigvecs = eigvecs * signs

    proportion = eigvals / eigvals.sum()
    cumulative = np.cumsum(proportion)

    logger.info(
        "PCA: %s",
        ", ".join(f"PC{i + 1}={p:.1%}" for i, p in enumerate(proportion)),
    )

    return PCAResult(
        names=names,
        std=np.sqrt(eigvals),
        proportion=proportion,
        cumulative=cumulative,
        rotation=eigvecs,
        scores=z @ eigvecs,
        center=center,
        scale=scale,
    )
