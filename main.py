from __future__ import annotations

import argparse
from dataclasses import replace
import logging
from pathlib import Path
from typing import Sequence

from surfchart import samplers
from surfchart.chart import ChartCompositor
from surfchart.config import ChartConfig, demo_config, load_chart_config
from surfchart.encode import write_png
from surfchart.errors import ChartError, ConfigError
from surfchart.raster import DrawingBackend, SoftwareBackend, TensorBackend


LOGGER = logging.getLogger("surfchart")


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="surfchart")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], default="WARNING")
    sub = parser.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render", help="Render a chart to PNG. Without --config renders the surface + helix demo.")
    render.add_argument("--config", type=Path, default=None, help="Chart TOML file.")
    render.add_argument("--out", type=Path, default=Path("demo.png"))
    render.add_argument("--width", type=int, default=None)
    render.add_argument("--height", type=int, default=None)
    render.add_argument("--backend", choices=["software", "tensor"], default="software")
    render.add_argument("--device", default="cpu", help="Torch device for --backend tensor.")
    render.add_argument("--yaw", type=float, default=None)
    render.add_argument("--pitch", type=float, default=None)
    render.add_argument("--scale", type=float, default=None)

    sub.add_parser("samplers", help="List built-in surface functions and curves usable from chart TOML.")
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    if args.command == "samplers":
        print("surfaces: " + ", ".join(sorted(samplers.SURFACES)))
        print("curves: " + ", ".join(sorted(samplers.CURVES)))
        return 0

    if args.command == "render":
        try:
            config = load_chart_config(args.config) if args.config is not None else demo_config()
            config = _apply_overrides(config, args)
            backend = _build_backend(args.backend, config, device=args.device)
            result = ChartCompositor(config).render(backend)
            path = write_png(args.out, backend.snapshot())
        except ChartError as exc:
            LOGGER.error("%s: %s", type(exc).__name__, exc)
            return 1
        for err in result.axis_report.errors:
            LOGGER.warning("axis label skipped: %s", err)
        print(
            f"render complete: out={path} size={backend.width}x{backend.height} "
            f"quads={result.quads_drawn} lines={result.lines_drawn} "
            f"legend={'yes' if result.legend_layout is not None else 'no'}"
        )
        return 0

    raise RuntimeError(f"unsupported command: {args.command}")


def _apply_overrides(config: ChartConfig, args: argparse.Namespace) -> ChartConfig:
    if args.width is not None:
        config.width = args.width
    if args.height is not None:
        config.height = args.height
    camera = config.camera
    try:
        if args.yaw is not None:
            camera = replace(camera, yaw=args.yaw)
        if args.pitch is not None:
            camera = replace(camera, pitch=args.pitch)
        if args.scale is not None:
            camera = replace(camera, scale=args.scale)
    except ValueError as exc:
        raise ConfigError(f"invalid camera override: {exc}") from exc
    config.camera = camera
    return config


def _build_backend(name: str, config: ChartConfig, *, device: str) -> DrawingBackend:
    if name == "tensor":
        return TensorBackend(config.width, config.height, device=device, background=config.background)
    return SoftwareBackend(config.width, config.height, background=config.background)


if __name__ == "__main__":
    raise SystemExit(main())
