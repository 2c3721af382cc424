#!/usr/bin/env python3
"""
Render RGB composite variants over a grid of gamma and contrast values.

Loads the three MIRI filters once and writes one PNG per (gamma, contrast)
pair, plus a contact sheet, to compare stretches side by side.

Usage:
    python scripts/composite_variants.py data/ --out variants/
    python scripts/composite_variants.py data/ --gammas 0.4 0.8 --contrasts 0.1 0.2 0.3

Author: Olivier Vitrac, PhD, HDR
        Generative Simulation Initiative
        olivier.vitrac@gmail.com
"""

import argparse
import logging
import sys
from pathlib import Path

import imageio.v3 as iio
import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from miricomp.composite import composite_from_records
from miricomp.config import PipelineConfig
from miricomp.io import load_filters
from miricomp.utils import to_uint8

logger = logging.getLogger("composite_variants")


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.split("\n")[1])
    parser.add_argument("data_root", help="Directory with one sub-directory per filter")
    parser.add_argument("--out", default="variants", help="Output directory")
    parser.add_argument("--gammas", type=float, nargs="+", default=[0.4, 0.8])
    parser.add_argument("--contrasts", type=float, nargs="+", default=[0.1, 0.2, 0.3])
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)-7s | %(message)s",
        datefmt="%H:%M:%S",
    )

    config = PipelineConfig.default(args.data_root)
    config.validate()
    records = load_filters(config)

    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)

    fig, axes = plt.subplots(
        len(args.gammas),
        len(args.contrasts),
        figsize=(4 * len(args.contrasts), 4 * len(args.gammas)),
        squeeze=False,
    )
    for i, gamma in enumerate(args.gammas):
        for j, contrast in enumerate(args.contrasts):
            composite = composite_from_records(records, gamma=gamma, contrast=contrast)
            path = out_dir / f"composite_g{gamma:g}_c{contrast:g}.png"
            iio.imwrite(path, to_uint8(composite.rgb))
            logger.info("Wrote %s", path)

            ax = axes[i][j]
            ax.imshow(composite.rgb, origin=composite.origin)
            ax.set_title(f"gamma={gamma:g}  contrast={contrast:g}")
            ax.set_axis_off()

    sheet = out_dir / "contact_sheet.png"
    fig.tight_layout()
    fig.savefig(sheet, dpi=120)
    plt.close(fig)
    logger.info("Wrote %s", sheet)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
