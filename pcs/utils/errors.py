# File: pcs/utils/errors.py
# Project: PolyCurveStudio (PCS)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-18
# Purpose: Errores tipados del proyecto.
# Notes: La geometría nunca lanza; estos errores quedan para bordes de E/S y esquema.
from __future__ import annotations


class PcsError(Exception):
    """Error base del proyecto."""


class PcsValidationError(PcsError):
    """Error de validación (input/archivo/estructura)."""


class PcsIOError(PcsError):
    """Error de E/S (lectura/escritura)."""


class PcsSchemaError(PcsValidationError):
    """Error de esquema (.json de capas) o incompatibilidad de versión."""
