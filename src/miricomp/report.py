"""
Report generation for the miricomp pipeline.

Produces:
- report.json: Machine-readable record of the run
- report.md: Human-readable Markdown report

Author: Olivier Vitrac, PhD, HDR
        Generative Simulation Initiative
        olivier.vitrac@gmail.com
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import numpy as np

from .config import AnalysisResult, PipelineConfig
from .stats import CorrelationMatrix, PCAResult, StatsSummary
from .utils import get_platform_info, get_timestamp_iso, get_version

logger = logging.getLogger(__name__)


def _to_native(obj: Any) -> Any:
    """Convert numpy types to native Python types for JSON serialization."""
    if isinstance(obj, np.floating):
        obj = float(obj)
    elif isinstance(obj, np.integer):
        return int(obj)
    elif isinstance(obj, np.ndarray):
        return _to_native(obj.tolist())
    elif isinstance(obj, dict):
        return {k: _to_native(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [_to_native(v) for v in obj]
    if isinstance(obj, float) and not np.isfinite(obj):
        return None
    return obj


def _serialize_config(config: PipelineConfig) -> dict[str, Any]:
    """Serialize PipelineConfig to JSON-compatible dict."""
    return {
        "data_root": config.data_root,
        "filters": [
            {"name": f.name, "path": f.path, "color": f.color} for f in config.filters
        ],
        "display_gamma": config.display_gamma,
        "display_contrast": config.display_contrast,
        "composite_gamma": config.composite_gamma,
        "composite_contrast": config.composite_contrast,
        "histogram_bins": config.histogram_bins,
        "scale_bar_arcsec": config.scale_bar_arcsec,
    }


def _serialize_pca(pca: PCAResult) -> dict[str, Any]:
    return {
        "variables": list(pca.names),
        "summary": pca.summary_rows(),
        "rotation": {
            name: dict(zip(pca.component_names, row)) for name, row in zip(pca.names, pca.rotation)
        },
    }


def format_stats_table(stats: list[StatsSummary]) -> list[str]:
    """Markdown table of per-filter summary statistics."""
    lines = [
        "| Filter | Mean | Median | Std | Valid pixels |",
        "|--------|------|--------|-----|--------------|",
    ]
    for s in stats:
        lines.append(f"| {s.name} | {s.mean:.4f} | {s.median:.4f} | {s.std:.4f} | {s.n_valid} |")
    return lines


def format_correlation_table(corr: CorrelationMatrix) -> list[str]:
    """Markdown table of the correlation matrix."""
    lines = [
        "| | " + " | ".join(corr.names) + " |",
        "|---|" + "---|" * len(corr.names),
    ]
    for name, row in zip(corr.names, corr.matrix):
        lines.append(f"| {name} | " + " | ".join(f"{v:.4f}" for v in row) + " |")
    return lines


def format_pca_table(pca: PCAResult) -> list[str]:
    """Markdown table of the PCA variance summary."""
    lines = [
        "| Component | Std | Proportion | Cumulative |",
        "|-----------|-----|------------|------------|",
    ]
    for row in pca.summary_rows():
        lines.append(
            f"| {row['component']} | {row['std']:.4f} | {row['proportion']:.4f} | {row['cumulative']:.4f} |"
        )
    return lines


def write_report_json(result: AnalysisResult, output_dir: Path) -> Path:
    """
    Write the run record as JSON.

    Parameters
    ----------
    result : AnalysisResult
        Analysis result.
    output_dir : Path
        Output directory.

    Returns
    -------
    Path
        Path to written report file.
    """
    report = {
        "miricomp_version": result.version or get_version(),
        "timestamp": result.timestamp or get_timestamp_iso(),
        "platform": result.platform or get_platform_info(),
        "config": _serialize_config(result.config) if result.config else {},
        "filters": result.filters,
        "statistics": [
            {
                "filter": s.name,
                "mean": s.mean,
                "median": s.median,
                "std": s.std,
                "n_valid": s.n_valid,
            }
            for s in result.stats
        ],
        "complete_observations": result.n_complete,
        "correlation": (
            {"names": list(result.correlation.names), "matrix": result.correlation.matrix}
            if result.correlation is not None
            else None
        ),
        "pca": _serialize_pca(result.pca) if result.pca is not None else None,
        "composite": (
            {
                "red": result.composite.red,
                "green": result.composite.green,
                "blue": result.composite.blue,
                "shape": list(result.composite.shape),
            }
            if result.composite is not None
            else None
        ),
        "catalogs": result.catalog_rows,
        "outputs": {k: str(v) for k, v in result.outputs.items()},
    }

    report_path = output_dir / "report.json"
    with open(report_path, "w") as f:
        json.dump(_to_native(report), f, indent=2)

    logger.info("Wrote report: %s", report_path)
    return report_path


def write_report_markdown(result: AnalysisResult, output_dir: Path) -> Path:
    """
    Write human-readable Markdown report.

    Parameters
    ----------
    result : AnalysisResult
        Analysis result.
    output_dir : Path
        Output directory.

    Returns
    -------
    Path
        Path to written report file.
    """
    lines = [
        f"# MIRI Analysis Report: {', '.join(result.filters)}",
        "",
        f"**Generated:** {result.timestamp or get_timestamp_iso()}",
        f"**miricomp version:** {result.version or get_version()}",
        f"**Platform:** {result.platform or get_platform_info()}",
        "",
    ]

    if result.config:
        lines.extend([
            "## Configuration",
            "",
            "| Filter | Color | Path |",
            "|--------|-------|------|",
        ])
        for f in result.config.filters:
            lines.append(f"| {f.name} | `{f.color}` | `{f.path}` |")
        lines.extend([
            "",
            f"- Display: gamma {result.config.display_gamma}, contrast {result.config.display_contrast}",
            f"- Composite: gamma {result.config.composite_gamma}, contrast {result.config.composite_contrast}",
            "",
        ])

    if result.stats:
        lines.extend(["## Summary Statistics", ""])
        lines.extend(format_stats_table(result.stats))
        lines.append("")

    if result.correlation is not None:
        lines.extend([
            "## Correlation",
            "",
            f"Pearson coefficients over {result.n_complete} pixel positions finite in all filters.",
            "",
        ])
        lines.extend(format_correlation_table(result.correlation))
        lines.append("")

    if result.pca is not None:
        lines.extend(["## Principal Components", ""])
        lines.extend(format_pca_table(result.pca))
        lines.append("")

    if result.catalog_rows:
        lines.extend([
            "## Source Catalogs",
            "",
            "| Filter | Sources |",
            "|--------|---------|",
        ])
        for name, count in result.catalog_rows.items():
            lines.append(f"| {name} | {count} |")
        lines.append("")

    if result.outputs:
        lines.extend(["## Outputs", ""])
        for name, path in result.outputs.items():
            lines.append(f"- **{name}:** `{path}`")
        lines.append("")

    report_path = output_dir / "report.md"
    with open(report_path, "w") as f:
        f.write("\n".join(lines))

    logger.info("Wrote Markdown report: %s", report_path)
    return report_path


def write_all_reports(result: AnalysisResult, output_dir: Path) -> dict[str, Path]:
    """
    Write all report files.

    Returns
    -------
    dict[str, Path]
        Map of report type to path.
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    return {
        "json": write_report_json(result, output_dir),
        "markdown": write_report_markdown(result, output_dir),
    }
