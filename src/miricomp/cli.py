"""
Command-line interface for the miricomp pipeline.

Usage:
    python -m miricomp analyze <data_root> [options]
    miricomp composite <data_root> --out composite.png [options]
    miricomp stats <data_root>

Author: Olivier Vitrac, PhD, HDR
        Generative Simulation Initiative
        olivier.vitrac@gmail.com
"""

from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path

import imageio.v3 as iio
import numpy as np

from .cli_output import (
    PipelineProgress,
    Symbols,
    print_banner,
    print_error,
    print_header,
    print_info,
    print_metric,
    print_path,
    print_success,
    print_summary_box,
    print_table,
    print_warning,
    setup_terminal,
)
from .composite import CompositeImage, composite_from_records
from .config import AnalysisResult, FilterRecord, PipelineConfig
from .errors import FileReadError, MiricompError
from .io import load_filters, read_catalog, write_fits
from .report import (
    format_correlation_table,
    format_pca_table,
    format_stats_table,
    write_all_reports,
)
from .stats import (
    complete_observations,
    correlation_matrix,
    principal_components,
    summarize_filters,
)
from .stretch import preprocess_channel
from .utils import (
    ensure_output_dir,
    get_platform_info,
    get_timestamp_iso,
    get_version,
    get_version_banner,
    to_uint8,
)

logger = logging.getLogger(__name__)

DEFAULT_RUN_ID = "jw06553-o001"


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for CLI."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-7s | %(message)s",
        datefmt="%H:%M:%S",
    )


def write_composite(composite: CompositeImage, output_dir: Path) -> dict[str, str]:
    """Write the composite as PNG (display) and FITS cube (float channels)."""
    png_path = output_dir / "composite_rgb.png"
    iio.imwrite(png_path, to_uint8(composite.rgb))
    logger.info("Wrote composite PNG: %s", png_path)

    fits_path = output_dir / "composite_rgb.fits"
    cube = np.moveaxis(composite.rgb, -1, 0).astype(np.float32)
    write_fits(fits_path, cube, overwrite=True)

    return {"composite_png": str(png_path), "composite_fits": str(fits_path)}


def analyze_records(records: list[FilterRecord], result: AnalysisResult) -> AnalysisResult:
    """Fill statistics (unless already present), correlation and PCA into a result."""
    names = [r.name for r in records]
    if not result.stats:
        result.stats = summarize_filters(records)
    table, _ = complete_observations(records)
    result.n_complete = int(table.shape[0])
    result.correlation = correlation_matrix(table, names)
    result.pca = principal_components(table, names)
    return result


def run_analysis(
    config: PipelineConfig,
    output_root: str | Path = "analysis",
    run_id: str = DEFAULT_RUN_ID,
    quiet: bool = False,
) -> AnalysisResult:
    """
    Execute the full analysis for three filters.

    Parameters
    ----------
    config : PipelineConfig
        Run configuration.
    output_root : str or Path, default "analysis"
        Root directory for outputs.
    run_id : str
        Name of the run subdirectory.
    quiet : bool, default False
        If True, suppress colored output (use logging only).

    Returns
    -------
    AnalysisResult
        Statistics, correlation, PCA, composite and output paths.
    """
    # Plotting pulls in matplotlib; keep it off the import path of the other commands
    from .plotting import (
        plot_composite,
        plot_correlation,
        plot_filter,
        plot_histograms,
        plot_pca_scores,
    )

    start_time = time.time()
    config.validate()

    if not quiet:
        setup_terminal()
        print_banner(get_version())
        print_header(f"Run: {run_id}")
        for spec in config.filters:
            print_metric(spec.name, f"{spec.wavelength_um:g} µm  {spec.color}")
        print_metric("Composite gamma/contrast", f"{config.composite_gamma} / {config.composite_contrast}")

    logger.info(get_version_banner())
    logger.info("Analysis run %s on %s", run_id, config.data_root)

    result = AnalysisResult(
        filters=[f.name for f in config.filters],
        config=config,
        version=get_version(),
        platform=get_platform_info(),
    )
    output_dir = ensure_output_dir(output_root, run_id)
    figures_dir = output_dir / "figures"

    progress = PipelineProgress(total_stages=4, quiet=quiet)

    # --- Stage 1: Loading ---
    progress.start_stage(1, "Loading Filters", Symbols.FILE)
    try:
        records = load_filters(config, show_progress=not quiet)
    except MiricompError as e:
        progress.fail_stage(str(e))
        raise
    for record in records:
        progress.update_detail(f"{record.name}: {record.shape[1]}x{record.shape[0]}")
        try:
            catalog = read_catalog(record.catalog_path)
        except FileReadError as e:
            # Catalogs are informational; a bad one does not stop the run
            logger.warning("Skipping catalog for %s: %s", record.name, e)
            if not quiet:
                print_warning(f"Unreadable source catalog for {record.name}")
            continue
        if catalog is not None:
            result.catalog_rows[record.name] = len(catalog)
        elif not quiet:
            print_warning(f"No source catalog for {record.name}")
    progress.complete_stage(f"{len(records)} filters loaded")

    # --- Stage 2: Statistics ---
    progress.start_stage(2, "Statistics, Correlation, PCA", Symbols.CHART)
    analyze_records(records, result)
    progress.update_detail(f"Complete observations: {result.n_complete}")
    progress.update_detail(
        "Variance explained: "
        + ", ".join(f"PC{i + 1} {p:.1%}" for i, p in enumerate(result.pca.proportion))
    )
    progress.complete_stage()

    # --- Stage 3: Composite and figures ---
    progress.start_stage(3, "Composite and Figures", Symbols.PALETTE)
    for record in records:
        channel = preprocess_channel(
            record.image, gamma=config.display_gamma, contrast=config.display_contrast
        )
        fig_path = figures_dir / f"{record.name}.png"
        plot_filter(record, channel, path=fig_path)
        result.outputs[f"view_{record.name}"] = str(fig_path)

    result.composite = composite_from_records(
        records, gamma=config.composite_gamma, contrast=config.composite_contrast
    )
    result.outputs.update(write_composite(result.composite, output_dir))

    # Co-registered grids share the WCS; take the red channel's for the scale bar
    red_wcs = next(r.wcs for r in records if r.name == result.composite.red)
    figure_paths = {
        "composite": figures_dir / "composite.png",
        "histograms": figures_dir / "histograms.png",
        "correlation": figures_dir / "correlation.png",
        "pca_scores": figures_dir / "pca_scores.png",
    }
    plot_composite(
        result.composite,
        red_wcs,
        scale_bar_arcsec=config.scale_bar_arcsec,
        path=figure_paths["composite"],
    )
    plot_histograms(records, bins=config.histogram_bins, path=figure_paths["histograms"])
    plot_correlation(result.correlation, path=figure_paths["correlation"])
    plot_pca_scores(result.pca, path=figure_paths["pca_scores"])
    result.outputs.update({f"figure_{k}": str(v) for k, v in figure_paths.items()})
    progress.complete_stage(f"{len(result.outputs)} outputs")

    # --- Stage 4: Reports ---
    progress.start_stage(4, "Reports", Symbols.FILE)
    result.timestamp = get_timestamp_iso()
    report_paths = write_all_reports(result, output_dir)
    result.outputs.update({f"report_{k}": str(v) for k, v in report_paths.items()})
    progress.complete_stage()

    elapsed = time.time() - start_time
    if not quiet:
        print_summary_box(
            [
                f"Filters: {', '.join(result.filters)}",
                f"Complete observations: {result.n_complete}",
                f"PC1 variance: {result.pca.proportion[0]:.1%}",
                f"Processing time: {elapsed:.1f}s",
            ],
            title=f"{Symbols.SPARKLE} Complete {Symbols.SPARKLE}",
        )
        print_path("Output", str(output_dir))

    logger.info("Analysis complete in %.1fs", elapsed)
    return result


def _channel_value(values: list[float] | None, default):
    if values is None:
        return default
    if len(values) == 1:
        return values[0]
    if len(values) == 3:
        return tuple(values)
    raise ValueError(f"Expected 1 or 3 values, got {len(values)}")


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="miricomp",
        description="Composite and statistical analysis of three MIRI filter images",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"miricomp {get_version()}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "data_root",
        type=str,
        help="Directory holding one sub-directory per filter (f770w/, f1130w/, f1500w/)",
    )
    common.add_argument(
        "--gamma",
        type=float,
        nargs="+",
        default=None,
        help="Composite gamma: one value or three (R G B) (default: 0.8)",
    )
    common.add_argument(
        "--contrast",
        type=float,
        nargs="+",
        default=None,
        help="Composite contrast in (0, 1]: one value or three (R G B) (default: 0.1)",
    )
    common.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    analyze_parser = subparsers.add_parser(
        "analyze",
        parents=[common],
        help="Full run: statistics, composite, figures and reports",
    )
    analyze_parser.add_argument(
        "--out",
        type=str,
        default="analysis",
        help="Output root directory (default: analysis)",
    )
    analyze_parser.add_argument(
        "--run-id",
        type=str,
        default=DEFAULT_RUN_ID,
        help=f"Run subdirectory name (default: {DEFAULT_RUN_ID})",
    )
    analyze_parser.add_argument(
        "--display-gamma",
        type=float,
        default=0.8,
        help="Gamma for single-filter views (default: 0.8)",
    )
    analyze_parser.add_argument(
        "--display-contrast",
        type=float,
        default=0.1,
        help="Contrast for single-filter views (default: 0.1)",
    )
    analyze_parser.add_argument(
        "--bins",
        type=int,
        default=100,
        help="Histogram bins (default: 100)",
    )
    analyze_parser.add_argument(
        "--scale-bar",
        type=float,
        default=10.0,
        help="Scale bar length in arcsec (default: 10)",
    )
    analyze_parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress colored output",
    )

    composite_parser = subparsers.add_parser(
        "composite",
        parents=[common],
        help="Write the RGB composite only",
    )
    composite_parser.add_argument(
        "--out",
        type=str,
        required=True,
        help="Output PNG path",
    )

    subparsers.add_parser(
        "stats",
        parents=[common],
        help="Print statistics, correlation and PCA tables",
    )

    return parser


def _config_from_args(args: argparse.Namespace) -> PipelineConfig:
    config = PipelineConfig.default(args.data_root)
    config.composite_gamma = _channel_value(args.gamma, config.composite_gamma)
    config.composite_contrast = _channel_value(args.contrast, config.composite_contrast)
    if args.command == "analyze":
        config.display_gamma = args.display_gamma
        config.display_contrast = args.display_contrast
        config.histogram_bins = args.bins
        config.scale_bar_arcsec = args.scale_bar
    config.validate()
    return config


def main(argv: list[str] | None = None) -> int:
    """Main entry point for CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    setup_logging(args.verbose)

    try:
        config = _config_from_args(args)

        if args.command == "analyze":
            run_analysis(config, output_root=args.out, run_id=args.run_id, quiet=args.quiet)
            return 0

        setup_terminal()
        records = load_filters(config)

        if args.command == "composite":
            composite = composite_from_records(
                records, gamma=config.composite_gamma, contrast=config.composite_contrast
            )
            out_path = Path(args.out)
            out_path.parent.mkdir(parents=True, exist_ok=True)
            iio.imwrite(out_path, to_uint8(composite.rgb))
            print_success(
                f"Composite R={composite.red} G={composite.green} B={composite.blue}"
            )
            print_path("Output", str(out_path))
            return 0

        if args.command == "stats":
            # Per-filter statistics are shown even if correlation or PCA fails
            result = AnalysisResult(
                filters=[r.name for r in records], stats=summarize_filters(records)
            )
            print_header("Summary Statistics")
            print_table(format_stats_table(result.stats))
            analyze_records(records, result)
            print_header("Correlation")
            print_info(f"{result.n_complete} complete observations")
            print_table(format_correlation_table(result.correlation))
            print_header("Principal Components")
            print_table(format_pca_table(result.pca))
            return 0

    except Exception as e:
        print_error(f"{args.command} failed: {e}")
        logger.exception("%s failed: %s", args.command, e)
        return 1

    return 1
