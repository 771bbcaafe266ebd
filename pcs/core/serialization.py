# File: pcs/core/serialization.py
# Project: PolyCurveStudio (PCS)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-18
# Purpose: Carga/guardado del documento de capas (JSON legible).
# Notes:
# - Formato actual: {"schema_version": N, "app": ..., "layers": [...]}.
# - Se acepta también el formato viejo (array JSON de capas en la raíz).
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Sequence

from pcs.core.models import Layer
from pcs.core.version import APP_NAME, APP_VERSION, SCHEMA_VERSION
from pcs.utils.errors import PcsIOError, PcsValidationError

log = logging.getLogger(__name__)


def layers_to_dict(layers: Sequence[Layer]) -> dict[str, Any]:
    return {
        "schema_version": SCHEMA_VERSION,
        "app": {"name": APP_NAME, "version": APP_VERSION},
        "layers": [l.to_dict() for l in layers],
    }


def layers_from_data(data: Any) -> list[Layer]:
    """Construye capas desde JSON ya parseado (dict con `layers` o array)."""
    if isinstance(data, list):
        raw_layers = data
    elif isinstance(data, dict):
        ver = data.get("schema_version", SCHEMA_VERSION)
        if not isinstance(ver, int) or ver > SCHEMA_VERSION:
            raise PcsValidationError(f"schema_version no soportado: {ver!r}")
        raw_layers = data.get("layers")
        if not isinstance(raw_layers, list):
            raise PcsValidationError("Estructura inválida: falta lista 'layers'")
    else:
        raise PcsValidationError("Estructura inválida: raíz no es objeto ni array JSON")

    layers = [Layer.from_dict(d) for d in raw_layers]
    seen: set[str] = set()
    for l in layers:
        if l.id in seen:
            raise PcsValidationError(f"Id de capa duplicado: {l.id!r}")
        seen.add(l.id)
    return layers


def dumps_layers(layers: Sequence[Layer]) -> str:
    return json.dumps(layers_to_dict(layers), ensure_ascii=False, indent=2)


def loads_layers(raw: str) -> list[Layer]:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise PcsValidationError(
            "Documento inválido (JSON malformado): línea {}, columna {}".format(e.lineno, e.colno)
        ) from e
    return layers_from_data(data)


def save_layers(layers: Sequence[Layer], path: str | Path) -> Path:
    """Guarda las capas en `path` (.json si no trae extensión).

    Escritura atómica (tmp + replace).
    """
    p = Path(path)
    if not p.suffix:
        p = p.with_suffix(".json")
    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        txt = dumps_layers(layers)
        tmp = p.with_suffix(p.suffix + ".tmp")
        tmp.write_text(txt, encoding="utf-8")
        tmp.replace(p)
    except OSError as e:
        raise PcsIOError(f"No se pudo guardar el documento: {p}") from e
    log.info("Documento guardado: %s (%d capas)", p, len(layers))
    return p


def load_layers(path: str | Path) -> list[Layer]:
    p = Path(path)
    try:
        raw = p.read_text(encoding="utf-8")
    except OSError as e:
        raise PcsIOError(f"No se pudo leer el documento: {p}") from e
    try:
        layers = loads_layers(raw)
    except PcsValidationError as e:
        raise PcsValidationError(f"{p}: {e}") from e
    log.info("Documento cargado: %s (%d capas)", p, len(layers))
    return layers
