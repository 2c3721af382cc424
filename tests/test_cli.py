"""
End-to-end tests for the pipeline and the command-line interface.

Author: Olivier Vitrac, PhD, HDR
        Generative Simulation Initiative
        olivier.vitrac@gmail.com
"""

import json
from pathlib import Path

import imageio.v3 as iio
import numpy as np
import pytest
from astropy.io import fits
from astropy.table import Table

from miricomp.cli import create_parser, main, run_analysis
from miricomp.io import load_filters
from miricomp.stats import summarize_filters


class TestConstantImages:
    """Loading constant images from disk gives exact statistics."""

    def test_exact_statistics(self, write_products):
        config = write_products({
            "f770w": np.full((20, 30), 5.0),
            "f1130w": np.full((20, 30), 18.0),
            "f1500w": np.full((20, 30), 42.0),
        })
        records = load_filters(config)
        summaries = summarize_filters(records)

        assert [s.name for s in summaries] == ["f770w", "f1130w", "f1500w"]
        assert [s.mean for s in summaries] == [5.0, 18.0, 42.0]
        assert [s.median for s in summaries] == [5.0, 18.0, 42.0]
        assert all(s.std == 0.0 for s in summaries)
        assert all(s.n_valid == 600 for s in summaries)

    def test_wcs_converted(self, write_products):
        """CDELT values arrive in arcsec/pixel."""
        config = write_products({name: np.ones((4, 4)) for name in ("f770w", "f1130w", "f1500w")})
        record = load_filters(config)[0]
        assert record.wcs.CDELT2 == pytest.approx(0.11)
        assert record.wcs.CDELT1 == pytest.approx(-0.11)


class TestRunAnalysis:
    """Full run on synthetic co-registered images."""

    def test_outputs(self, write_products, correlated_images, tmp_path):
        config = write_products(correlated_images)
        spec = config.filters[0]
        Table({"id": [1, 2, 3], "flux": [1.0, 2.0, 3.0]}).write(
            config.catalog_path(spec), format="ascii.ecsv"
        )

        result = run_analysis(config, output_root=tmp_path / "out", run_id="test", quiet=True)

        assert result.composite.red == "f1500w"
        assert result.composite.blue == "f770w"
        assert result.n_complete == 62 * 62
        assert result.catalog_rows == {"f770w": 3}
        assert result.pca.proportion.sum() == pytest.approx(1.0)

        for key in (
            "view_f770w", "view_f1130w", "view_f1500w",
            "composite_png", "composite_fits",
            "figure_composite", "figure_histograms", "figure_correlation", "figure_pca_scores",
            "report_json", "report_markdown",
        ):
            assert Path(result.outputs[key]).exists(), key

        png = iio.imread(result.outputs["composite_png"])
        assert png.shape == (64, 64, 3)
        assert png.dtype == np.uint8

        with fits.open(result.outputs["composite_fits"]) as hdul:
            assert hdul[0].data.shape == (3, 64, 64)

        report = json.loads(Path(result.outputs["report_json"]).read_text())
        assert report["composite"]["red"] == "f1500w"
        assert report["complete_observations"] == 62 * 62
        assert report["correlation"]["matrix"][0][0] == 1.0

    def test_corrupt_catalog_skipped(self, write_products, correlated_images, tmp_path):
        """An unreadable catalog is skipped and the run completes."""
        config = write_products(correlated_images)
        config.catalog_path(config.filters[2]).write_text("not a catalog\n")

        result = run_analysis(config, output_root=tmp_path / "out", quiet=True)

        assert result.catalog_rows == {}
        assert Path(result.outputs["report_json"]).exists()

    def test_missing_filter(self, write_products, correlated_images, tmp_path):
        """A missing product aborts the run with FileReadError."""
        from miricomp.errors import FileReadError

        config = write_products(correlated_images)
        config.image_path(config.filters[1]).unlink()
        with pytest.raises(FileReadError, match="f1130w"):
            run_analysis(config, output_root=tmp_path / "out", quiet=True)


class TestMain:
    """Tests for the command-line entry point."""

    def test_parser(self):
        args = create_parser().parse_args(
            ["analyze", "data", "--gamma", "0.4", "0.8", "0.8", "--contrast", "0.2", "-q"]
        )
        assert args.command == "analyze"
        assert args.data_root == "data"
        assert args.gamma == [0.4, 0.8, 0.8]
        assert args.contrast == [0.2]
        assert args.quiet
        assert args.out == "analysis"

    def test_no_command(self):
        assert main([]) == 1

    def test_stats(self, write_products, correlated_images, capsys):
        config = write_products(correlated_images)
        assert main(["stats", config.data_root]) == 0
        out = capsys.readouterr().out
        assert "f1500w" in out
        assert "PC1" in out

    def test_composite(self, write_products, correlated_images, tmp_path):
        config = write_products(correlated_images)
        out = tmp_path / "png" / "rgb.png"
        assert main(["composite", config.data_root, "--out", str(out), "--gamma", "0.4"]) == 0
        assert iio.imread(out).shape == (64, 64, 3)

    def test_bad_contrast(self, write_products, correlated_images, tmp_path):
        config = write_products(correlated_images)
        out = tmp_path / "rgb.png"
        assert main(["composite", config.data_root, "--out", str(out), "--contrast", "2"]) == 1
        assert not out.exists()

    def test_missing_data(self, tmp_path):
        assert main(["stats", str(tmp_path / "nowhere")]) == 1

    def test_constant_stats_fail_pca(self, write_products, capsys):
        """Constant filters print their statistics, then fail on correlation."""
        config = write_products({
            "f770w": np.full((8, 8), 5.0),
            "f1130w": np.full((8, 8), 18.0),
            "f1500w": np.full((8, 8), 42.0),
        })
        assert main(["stats", config.data_root]) == 1
        captured = capsys.readouterr()
        assert "| f770w | 5.0000 | 5.0000 | 0.0000 | 64 |" in captured.out
        assert "| f1500w | 42.0000 | 42.0000 | 0.0000 | 64 |" in captured.out
        assert "Zero variance" in captured.err
