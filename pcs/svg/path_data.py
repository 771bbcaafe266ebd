# File: pcs/svg/path_data.py
# Project: PolyCurveStudio (PCS)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-18
# Purpose: Parser del atributo `d` de SVG -> puntos por subpath (aproximación por muestreo).
# Notes:
# - Comandos M/L/H/V/C/S/Q/T/A/Z, absolutos y relativos, con repetición implícita.
# - Curvas muestreadas con cantidad fija de pasos (no es una conversión exacta).
# - Nunca lanza: tokens incompletos o basura se saltean; subpaths vacíos se descartan.
from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Optional

from pcs.geom.primitives import Point, distance

log = logging.getLogger(__name__)

CUBIC_STEPS = 7
QUAD_STEPS = 5
ARC_STEPS = 12
CLOSE_EPS = 0.1

_TOKEN_RE = re.compile(r"[MmLlHhVvCcSsQqTtAaZz]|[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")

_ARITY = {"M": 2, "L": 2, "H": 1, "V": 1, "C": 6, "S": 4, "Q": 4, "T": 2, "A": 7, "Z": 0}


@dataclass(frozen=True)
class SubPath:
    points: list[Point]
    closed: bool = False


def _is_command(tok: str) -> bool:
    return len(tok) == 1 and tok.isalpha()


def _cubic_at(p0: Point, c1: Point, c2: Point, p1: Point, t: float) -> Point:
    mt = 1.0 - t
    a, b, c, d = mt * mt * mt, 3 * mt * mt * t, 3 * mt * t * t, t * t * t
    return Point(
        a * p0.x + b * c1.x + c * c2.x + d * p1.x,
        a * p0.y + b * c1.y + c * c2.y + d * p1.y,
    )


def _quad_at(p0: Point, c: Point, p1: Point, t: float) -> Point:
    mt = 1.0 - t
    a, b, d = mt * mt, 2 * mt * t, t * t
    return Point(a * p0.x + b * c.x + d * p1.x, a * p0.y + b * c.y + d * p1.y)


def _vec_angle(ux: float, uy: float, vx: float, vy: float) -> float:
    """Ángulo con signo de u a v (radianes)."""
    norm = math.hypot(ux, uy) * math.hypot(vx, vy)
    if norm == 0:
        return 0.0
    cos_a = max(-1.0, min(1.0, (ux * vx + uy * vy) / norm))
    sign = -1.0 if ux * vy - uy * vx < 0 else 1.0
    return sign * math.acos(cos_a)


def arc_points(
    p0: Point,
    rx: float,
    ry: float,
    x_axis_rotation: float,
    large_arc: bool,
    sweep: bool,
    p1: Point,
    steps: int = ARC_STEPS,
) -> list[Point]:
    """Muestrea un arco elíptico SVG (sin incluir p0, incluye p1).

    - p0 == p1: sin puntos (el arco no dibuja nada).
    - radio 0: línea recta a p1.
    """
    if p0 == p1:
        return []
    rx, ry = abs(rx), abs(ry)
    if rx == 0 or ry == 0:
        return [p1]

    phi = math.radians(x_axis_rotation)
    cos_phi, sin_phi = math.cos(phi), math.sin(phi)
    hx = (p0.x - p1.x) / 2.0
    hy = (p0.y - p1.y) / 2.0
    x1p = cos_phi * hx + sin_phi * hy
    y1p = -sin_phi * hx + cos_phi * hy

    # Radios demasiado chicos para unir los extremos: se agrandan proporcionalmente.
    lam = (x1p * x1p) / (rx * rx) + (y1p * y1p) / (ry * ry)
    if lam > 1.0:
        s = math.sqrt(lam)
        rx *= s
        ry *= s

    num = rx * rx * ry * ry - rx * rx * y1p * y1p - ry * ry * x1p * x1p
    den = rx * rx * y1p * y1p + ry * ry * x1p * x1p
    coef = math.sqrt(max(0.0, num / den)) if den else 0.0
    if large_arc == sweep:
        coef = -coef
    cxp = coef * rx * y1p / ry
    cyp = -coef * ry * x1p / rx
    cx = cos_phi * cxp - sin_phi * cyp + (p0.x + p1.x) / 2.0
    cy = sin_phi * cxp + cos_phi * cyp + (p0.y + p1.y) / 2.0

    ux, uy = (x1p - cxp) / rx, (y1p - cyp) / ry
    vx, vy = (-x1p - cxp) / rx, (-y1p - cyp) / ry
    theta1 = _vec_angle(1.0, 0.0, ux, uy)
    dtheta = _vec_angle(ux, uy, vx, vy)
    if not sweep and dtheta > 0:
        dtheta -= 2.0 * math.pi
    elif sweep and dtheta < 0:
        dtheta += 2.0 * math.pi

    n = steps + 1
    out: list[Point] = []
    for i in range(1, n):
        th = theta1 + dtheta * i / n
        ex, ey = rx * math.cos(th), ry * math.sin(th)
        out.append(Point(cx + cos_phi * ex - sin_phi * ey, cy + sin_phi * ex + cos_phi * ey))
    out.append(p1)
    return out


class _Tokens:
    def __init__(self, d: str) -> None:
        self.items = _TOKEN_RE.findall(d or "")
        self.i = 0

    def done(self) -> bool:
        return self.i >= len(self.items)

    def peek(self) -> str:
        return self.items[self.i]

    def take_args(self, cmd: str) -> Optional[list[float]]:
        """Lee los argumentos de `cmd`. None si faltan (los leídos se descartan)."""
        need = _ARITY[cmd]
        out: list[float] = []
        while len(out) < need:
            if self.done() or _is_command(self.peek()):
                return None
            tok = self.peek()
            if cmd == "A" and len(out) in (3, 4) and tok[0] in "01" and len(tok) > 1 and tok[1] != ".":
                # Flags compactados ("a1 1 0 011 5"): un dígito por flag.
                out.append(float(tok[0]))
                self.items[self.i] = tok[1:]
                continue
            self.i += 1
            try:
                out.append(float(tok))
            except ValueError:
                return None
        return out


class _Builder:
    def __init__(self) -> None:
        self.out: list[SubPath] = []
        self.current: list[Point] = []
        self.cur = Point(0.0, 0.0)
        self.start = Point(0.0, 0.0)

    def ensure_started(self) -> None:
        if not self.current:
            self.current.append(self.cur)

    def add(self, pts: list[Point]) -> None:
        self.ensure_started()
        self.current.extend(pts)
        if pts:
            self.cur = pts[-1]

    def flush(self, closed: bool = False) -> None:
        pts = self.current
        self.current = []
        if not pts:
            return
        if closed and len(pts) > 1 and distance(pts[-1], pts[0]) < CLOSE_EPS:
            pts = pts[:-1]
        self.out.append(SubPath(pts, closed))


def parse_path_data_ex(d: str) -> list[SubPath]:
    """Como parse_path_data, pero conserva si cada subpath terminó en Z."""
    toks = _Tokens(d)
    b = _Builder()
    cmd: Optional[str] = None
    prev: Optional[str] = None  # comando previo (mayúscula) para S/T
    last_ctrl: Optional[Point] = None
    skipped = 0

    while not toks.done():
        tok = toks.peek()
        if _is_command(tok):
            cmd = tok
            toks.i += 1
        elif cmd is None or cmd in "Zz":
            # Números sin comando (o después de Z): no hay a qué asignarlos.
            toks.i += 1
            skipped += 1
            continue

        up = cmd.upper()
        rel = cmd.islower()

        if up == "Z":
            b.flush(closed=True)
            b.cur = b.start
            prev, last_ctrl = "Z", None
            continue

        args = toks.take_args(up)
        if args is None:
            skipped += 1
            # El comando se pierde; si el stream sigue con números se consumen como basura.
            cmd = None
            continue

        ox, oy = (b.cur.x, b.cur.y) if rel else (0.0, 0.0)
        ctrl: Optional[Point] = None

        if up == "M":
            b.flush()
            b.cur = Point(ox + args[0], oy + args[1])
            b.start = b.cur
            b.current = [b.cur]
            # Pares extra después de M se interpretan como L (l si era m).
            cmd = "l" if rel else "L"
        elif up == "L":
            b.add([Point(ox + args[0], oy + args[1])])
        elif up == "H":
            b.add([Point((b.cur.x if rel else 0.0) + args[0], b.cur.y)])
        elif up == "V":
            b.add([Point(b.cur.x, (b.cur.y if rel else 0.0) + args[0])])
        elif up in ("C", "S"):
            p0 = b.cur
            if up == "C":
                c1 = Point(ox + args[0], oy + args[1])
                c2 = Point(ox + args[2], oy + args[3])
                p1 = Point(ox + args[4], oy + args[5])
            else:
                if prev in ("C", "S") and last_ctrl is not None:
                    c1 = Point(2 * p0.x - last_ctrl.x, 2 * p0.y - last_ctrl.y)
                else:
                    c1 = p0
                c2 = Point(ox + args[0], oy + args[1])
                p1 = Point(ox + args[2], oy + args[3])
            n = CUBIC_STEPS + 1
            b.add([_cubic_at(p0, c1, c2, p1, i / n) for i in range(1, n)] + [p1])
            ctrl = c2
        elif up in ("Q", "T"):
            p0 = b.cur
            if up == "Q":
                c = Point(ox + args[0], oy + args[1])
                p1 = Point(ox + args[2], oy + args[3])
            else:
                if prev in ("Q", "T") and last_ctrl is not None:
                    c = Point(2 * p0.x - last_ctrl.x, 2 * p0.y - last_ctrl.y)
                else:
                    c = p0
                p1 = Point(ox + args[0], oy + args[1])
            n = QUAD_STEPS + 1
            b.add([_quad_at(p0, c, p1, i / n) for i in range(1, n)] + [p1])
            ctrl = c
        elif up == "A":
            p1 = Point(ox + args[5], oy + args[6])
            pts = arc_points(b.cur, args[0], args[1], args[2], args[3] != 0, args[4] != 0, p1)
            if pts:
                b.add(pts)

        prev = up
        last_ctrl = ctrl

    b.flush()
    if skipped:
        log.debug("path data: %d token(s)/comando(s) incompletos ignorados", skipped)
    return b.out


def parse_path_data(d: str) -> list[list[Point]]:
    """Puntos por subpath del atributo `d` (ver parse_path_data_ex)."""
    return [s.points for s in parse_path_data_ex(d)]
