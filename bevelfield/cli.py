"""Command-line entry point: bevelfield INPUT OUTPUT [options]."""

import argparse
import dataclasses
import logging
import sys
import time
from pathlib import Path

from bevelfield import defaults
from bevelfield.errors import BevelError
from bevelfield.pipeline import process_file
from bevelfield.serialization import load_config, save_config
from bevelfield.types import BevelConfig


def _parse_size(text: str) -> tuple[int, int]:
    try:
        width, height = (int(v) for v in text.lower().split("x"))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected WIDTHxHEIGHT, got {text!r}")
    return width, height


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bevelfield",
        description="Render a soft bevel gradient inside a logo shape.",
    )
    parser.add_argument("input", type=Path, help="Source image (PNG, JPEG, ...)")
    parser.add_argument("output", type=Path, help="Output PNG path")
    parser.add_argument("--config", type=Path, default=None, help="JSON config to start from.")
    parser.add_argument("--save-config", type=Path, default=None, help="Write the effective config as JSON.")
    parser.add_argument("--method", choices=defaults.METHODS, default=None)
    parser.add_argument("--adaptive", action="store_true", default=None,
                        help="Stop on residual threshold instead of a fixed sweep count.")
    parser.add_argument("--threshold", type=float, default=None, dest="convergence_threshold")
    parser.add_argument("--max-iterations", type=int, default=None)
    parser.add_argument("--direct", action="store_true",
                        help="Solve at (clamped) source resolution instead of the working size.")
    parser.add_argument("--working-size", type=int, default=None)
    parser.add_argument("--working-iterations", type=int, default=None)
    parser.add_argument("--gradient-proportion", type=float, default=None)
    parser.add_argument("--reference-size", type=int, default=None)
    parser.add_argument("--contrast", type=float, default=None, dest="contrast_exponent")
    parser.add_argument("--no-neighbor-table", action="store_true",
                        help="Resolve stencil neighbors on the fly.")
    parser.add_argument("--size", type=_parse_size, default=None, help="Output size as WIDTHxHEIGHT.")
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument("--debug", action="store_true")
    return parser


def config_from_args(args: argparse.Namespace) -> BevelConfig:
    config = load_config(args.config) if args.config is not None else BevelConfig()
    overrides = {}
    for name in (
        "method",
        "convergence_threshold",
        "max_iterations",
        "working_size",
        "working_iterations",
        "gradient_proportion",
        "reference_size",
        "contrast_exponent",
    ):
        value = getattr(args, name)
        if value is not None:
            overrides[name] = value
    if args.adaptive:
        overrides["adaptive_convergence"] = True
    if args.direct:
        overrides["use_working_resolution"] = False
    if args.no_neighbor_table:
        overrides["use_neighbor_table"] = False
    config = dataclasses.replace(config, **overrides)
    config.validate()
    return config


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    level = logging.DEBUG if args.debug else logging.INFO if args.verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(message)s")

    try:
        config = config_from_args(args)
        if args.save_config is not None:
            save_config(config, args.save_config)

        t_start = time.time()
        result = process_file(args.input, args.output, config=config, output_size=args.size)
        elapsed = time.time() - t_start
    except (BevelError, OSError) as e:
        print(f"bevelfield: error: {e}", file=sys.stderr)
        return 1

    out_w, out_h = result.output_size
    solve_w, solve_h = result.solve_size
    print(
        f"Wrote {args.output} ({out_w}×{out_h}, solved at {solve_w}×{solve_h}, "
        f"{result.stats.sweeps} {result.stats.method} sweeps) in {elapsed:.2f}s"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
