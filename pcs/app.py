# File: pcs/app.py
# Project: PolyCurveStudio (PCS)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-18
# Purpose: Entry-point CLI: import SVG -> JSON, export JSON -> SVG, simplify de trazos.
# Notes: Sin UI. Errores de I/O/esquema salen con código 2 y un mensaje corto.
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from pcs.core.models import Layer
from pcs.core.serialization import load_layers, save_layers
from pcs.core.settings import load_editor_settings
from pcs.core.version import APP_NAME, APP_VERSION
from pcs.geom.simplify import simplify_path
from pcs.svg.exporter import export_svg
from pcs.svg.importer import import_svg
from pcs.utils.errors import PcsError
from pcs.utils.log import get_logger, setup_logging

log = get_logger(__name__)


def simplify_layers(layers: Sequence[Layer], tolerance: float) -> list[Layer]:
    """RDP sobre cada capa (y cada segmento de las compuestas)."""
    out: list[Layer] = []
    for layer in layers:
        l = layer.copy()
        if l.segments is not None:
            l.segments = [simplify_path(s, tolerance) for s in l.segments]
            l.sync_points()
        else:
            l.points = simplify_path(l.points, tolerance)
        out.append(l)
    return out


def _cmd_import(args: argparse.Namespace) -> int:
    layers = import_svg(args.input)
    out = Path(args.output) if args.output else Path(args.input).with_suffix(".json")
    save_layers(layers, out)
    print(f"{len(layers)} capa(s) -> {out}")
    return 0


def _cmd_export(args: argparse.Namespace) -> int:
    layers = load_layers(args.input)
    out = Path(args.output) if args.output else Path(args.input).with_suffix(".svg")
    p = export_svg(layers, out, time=args.time)
    print(f"{len(layers)} capa(s) -> {p}")
    return 0


def _cmd_simplify(args: argparse.Namespace) -> int:
    tol = args.tolerance
    if tol is None:
        tol = load_editor_settings().simplify_tolerance
    layers = load_layers(args.input)
    before = sum(len(l.points) for l in layers)
    simplified = simplify_layers(layers, tol)
    after = sum(len(l.points) for l in simplified)
    out = Path(args.output) if args.output else Path(args.input)
    save_layers(simplified, out)
    print(f"{before} -> {after} puntos (tol={tol}) -> {out}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="pcs",
        description=f"{APP_NAME} v{APP_VERSION}: import/export SVG y simplificación de trazos.",
    )
    ap.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING... (default: PCS_LOG_LEVEL o INFO)")
    ap.add_argument("--no-log-file", action="store_true", help="Solo consola (no escribe logs/pcs.log)")
    sub = ap.add_subparsers(dest="command", required=True)

    p_imp = sub.add_parser("import", help="SVG -> documento JSON (frame 800x600)")
    p_imp.add_argument("input", help="Ruta al .svg")
    p_imp.add_argument("-o", "--output", default="", help="Ruta .json (default: junto al input)")
    p_imp.set_defaults(func=_cmd_import)

    p_exp = sub.add_parser("export", help="documento JSON -> SVG")
    p_exp.add_argument("input", help="Ruta al .json")
    p_exp.add_argument("-o", "--output", default="", help="Ruta .svg (default: junto al input)")
    p_exp.add_argument("--time", type=float, default=None, help="Tiempo de timeline (ms) para capas animadas")
    p_exp.set_defaults(func=_cmd_export)

    p_simp = sub.add_parser("simplify", help="Ramer-Douglas-Peucker sobre todas las capas")
    p_simp.add_argument("input", help="Ruta al .json")
    p_simp.add_argument("-o", "--output", default="", help="Ruta .json (default: pisa el input)")
    p_simp.add_argument(
        "-t",
        "--tolerance",
        type=float,
        default=None,
        help="Tolerancia en px (default: simplify_tolerance de pcs_settings.json / PCS_SIMPLIFY_TOLERANCE)",
    )
    p_simp.set_defaults(func=_cmd_simplify)
    return ap


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    level = logging.getLevelName(str(args.log_level or "INFO").upper())
    setup_logging(None if args.no_log_file else "logs", level if isinstance(level, int) else logging.INFO)
    log.debug("%s v%s: %s", APP_NAME, APP_VERSION, args.command)
    try:
        return int(args.func(args))
    except PcsError as e:
        log.error("%s", e)
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
