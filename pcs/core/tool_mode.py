# File: pcs/core/tool_mode.py
# Project: PolyCurveStudio (PCS)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-18
# Purpose: Herramientas de dibujo (pen + figuras) y coerción desde settings/CLI.
# Notes: No forma parte del .json de capas.

from __future__ import annotations

from enum import Enum


class ShapeTool(str, Enum):
    """Herramienta activa al completar un gesto.

    - pen: trazo libre / puntos sueltos (abierto salvo que se pida cerrado)
    - square: rectángulo de 4 vértices (esquina a esquina)
    - circle: 16 vértices a radio |drag|
    - triangle: isósceles con vértice arriba al medio
    - star: 10 vértices alternando radio y 0.4 * radio
    """

    PEN = "pen"
    SQUARE = "square"
    CIRCLE = "circle"
    TRIANGLE = "triangle"
    STAR = "star"


def coerce_shape_tool(v: object, default: ShapeTool = ShapeTool.PEN) -> ShapeTool:
    s = str(getattr(v, "value", v) or "").strip().lower()
    for m in ShapeTool:
        if m.value == s:
            return m
    return default
