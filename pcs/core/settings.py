# File: pcs/core/settings.py
# Project: PolyCurveStudio (PCS)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-18
# Purpose: Defaults del editor: pcs_settings.json (repo-local) + overrides por env.
# Notes:
# - No depende de Qt.
# - Orden de prioridad: env var > JSON > default de version.py.
# - Valores fuera de rango se recortan; valores ilegibles se ignoran con warning.
from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from pcs.core.tool_mode import ShapeTool, coerce_shape_tool
from pcs.core.version import (
    DEFAULT_HIT_PX,
    DEFAULT_INSERT_PX,
    DEFAULT_SNAP_PX,
    DEFAULT_TENSION,
    DEFAULT_TIMELINE_MS,
    HISTORY_LIMIT,
    TENSION_MAX,
    TENSION_MIN,
)

log = logging.getLogger(__name__)

PROJECT_SETTINGS_FILENAME = "pcs_settings.json"

ENV_HISTORY_LIMIT = "PCS_HISTORY_LIMIT"
ENV_DEFAULT_TENSION = "PCS_DEFAULT_TENSION"
ENV_SIMPLIFY_TOLERANCE = "PCS_SIMPLIFY_TOLERANCE"
ENV_SNAP_PX = "PCS_SNAP_PX"


@dataclass
class EditorSettings:
    """Parámetros del editor que no viajan en el documento."""

    history_limit: int = HISTORY_LIMIT
    default_tension: float = DEFAULT_TENSION
    # 0 = no simplificar trazos a mano alzada
    simplify_tolerance: float = 0.0
    snap_px: float = DEFAULT_SNAP_PX
    snap_to_points: bool = True
    snap_to_guides: bool = True
    insert_px: float = DEFAULT_INSERT_PX
    hit_px: float = DEFAULT_HIT_PX
    timeline_ms: float = DEFAULT_TIMELINE_MS
    shape_tool: ShapeTool = ShapeTool.PEN

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["shape_tool"] = self.shape_tool.value
        return d


def find_project_settings_path(start: Path | None = None) -> Path | None:
    """Busca pcs_settings.json subiendo desde start (o CWD)."""
    start = (start or Path.cwd()).resolve()
    for p in (start, *start.parents):
        candidate = p / PROJECT_SETTINGS_FILENAME
        if candidate.is_file():
            return candidate
    return None


def load_project_settings(start: Path | None = None) -> Dict[str, Any]:
    """Carga el JSON de project settings. Devuelve {} si no existe o es inválido."""
    p = find_project_settings_path(start)
    if not p:
        return {}
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        log.warning("No se pudo leer %s: %s", p, e)
        return {}
    if not isinstance(data, dict):
        log.warning("%s ignorado: la raíz no es un objeto JSON", p)
        return {}
    return data


def save_project_settings(settings: EditorSettings, path: Path) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(settings.to_dict(), indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    return p


def _coerce_int(v: Any, min_v: int, max_v: int, default: int) -> int:
    try:
        n = int(v)
    except (TypeError, ValueError):
        return int(default)
    return max(min_v, min(max_v, n))


def _coerce_float(v: Any, min_v: float, max_v: float, default: float) -> float:
    try:
        f = float(v)
    except (TypeError, ValueError):
        return float(default)
    if f != f:  # NaN
        return float(default)
    return max(min_v, min(max_v, f))


def _coerce_bool(v: Any, default: bool) -> bool:
    if isinstance(v, bool):
        return v
    if isinstance(v, str):
        s = v.strip().lower()
        if s in ("1", "true", "yes", "on"):
            return True
        if s in ("0", "false", "no", "off"):
            return False
    return default


def settings_from_dict(data: Mapping[str, Any], base: Optional[EditorSettings] = None) -> EditorSettings:
    out = EditorSettings(**asdict(base)) if base else EditorSettings()
    if "history_limit" in data:
        out.history_limit = _coerce_int(data["history_limit"], 1, 1000, out.history_limit)
    if "default_tension" in data:
        out.default_tension = _coerce_float(data["default_tension"], TENSION_MIN, TENSION_MAX, out.default_tension)
    if "simplify_tolerance" in data:
        out.simplify_tolerance = _coerce_float(data["simplify_tolerance"], 0.0, 100.0, out.simplify_tolerance)
    if "snap_px" in data:
        out.snap_px = _coerce_float(data["snap_px"], 0.0, 200.0, out.snap_px)
    if "snap_to_points" in data:
        out.snap_to_points = _coerce_bool(data["snap_to_points"], out.snap_to_points)
    if "snap_to_guides" in data:
        out.snap_to_guides = _coerce_bool(data["snap_to_guides"], out.snap_to_guides)
    if "insert_px" in data:
        out.insert_px = _coerce_float(data["insert_px"], 0.0, 200.0, out.insert_px)
    if "hit_px" in data:
        out.hit_px = _coerce_float(data["hit_px"], 0.0, 200.0, out.hit_px)
    if "timeline_ms" in data:
        out.timeline_ms = _coerce_float(data["timeline_ms"], 1.0, 3_600_000.0, out.timeline_ms)
    if "shape_tool" in data:
        out.shape_tool = coerce_shape_tool(data["shape_tool"], out.shape_tool)
    return out


def _env_overrides(env: Mapping[str, str]) -> Dict[str, Any]:
    mapping = {
        ENV_HISTORY_LIMIT: "history_limit",
        ENV_DEFAULT_TENSION: "default_tension",
        ENV_SIMPLIFY_TOLERANCE: "simplify_tolerance",
        ENV_SNAP_PX: "snap_px",
    }
    out: Dict[str, Any] = {}
    for key, field_name in mapping.items():
        raw = env.get(key)
        if raw is None or not raw.strip():
            continue
        out[field_name] = raw.strip()
    return out


def load_editor_settings(
    start: Path | None = None,
    *,
    env: Mapping[str, str] | None = None,
) -> EditorSettings:
    """JSON del proyecto (si existe) y luego overrides de env vars."""
    data = load_project_settings(start)
    settings = settings_from_dict(data)
    overrides = _env_overrides(os.environ if env is None else env)
    if overrides:
        settings = settings_from_dict(overrides, settings)
        log.debug("Overrides por env: %s", overrides)
    if data or overrides:
        log.info("Editor settings: %s", settings.to_dict())
    return settings
