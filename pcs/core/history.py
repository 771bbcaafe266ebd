# File: pcs/core/history.py
# Project: PolyCurveStudio (PCS)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-18
# Purpose: Historial undo/redo por snapshots, con edición "live" + commit.
# Notes:
# - Un drag arbitrariamente largo = exactamente 1 paso de undo.
# - Los snapshots son copias profundas: nadie puede mutarlos desde afuera.
# - Toda edición live termina en commit() o revert(); abrir otra comitea la anterior.
from __future__ import annotations

import copy
import logging
from typing import Callable, Generic, Optional, TypeVar, Union

from pcs.core.version import HISTORY_LIMIT

log = logging.getLogger(__name__)

T = TypeVar("T")
Action = Union[T, Callable[[T], T]]


class History(Generic[T]):
    def __init__(
        self,
        initial: T,
        *,
        limit: int = HISTORY_LIMIT,
        copier: Callable[[T], T] = copy.deepcopy,
    ) -> None:
        self._copy = copier
        self._present: T = initial
        self._past: list[T] = []
        self._future: list[T] = []
        self._limit = max(1, int(limit))
        self._live_base: Optional[T] = None

    # ----------------------------
    # Estado
    # ----------------------------
    @property
    def present(self) -> T:
        return self._present

    @property
    def can_undo(self) -> bool:
        return bool(self._past) or (self._live_base is not None and self._present != self._live_base)

    @property
    def can_redo(self) -> bool:
        return bool(self._future)

    @property
    def is_live(self) -> bool:
        return self._live_base is not None

    @property
    def depth(self) -> tuple[int, int]:
        """(len(past), len(future)), para debug y tests."""
        return (len(self._past), len(self._future))

    def _resolve(self, action: Action) -> T:
        return action(self._present) if callable(action) else action

    def _push_past(self, snapshot: T) -> None:
        self._past.append(snapshot)
        self._future.clear()
        if len(self._past) > self._limit:
            # Se descarta el más viejo.
            del self._past[0]

    # ----------------------------
    # Commit directo (1 acción = 1 undo)
    # ----------------------------
    def set_state(self, action: Action) -> bool:
        """Aplica `action` y registra el estado previo. Devuelve False si no cambió."""
        if self.is_live:
            self.commit()
        new_state = self._resolve(action)
        if new_state is self._present or new_state == self._present:
            return False
        self._push_past(self._copy(self._present))
        self._present = new_state
        return True

    # ----------------------------
    # Edición live (drag)
    # ----------------------------
    def begin_live_edit(self) -> None:
        if self.is_live:
            log.debug("begin_live_edit con una edición abierta: se comitea la anterior")
            self.commit()
        self._live_base = self._copy(self._present)

    def update_live_edit(self, action: Action) -> None:
        """Actualiza el estado sin registrar historial (abre la edición si hace falta)."""
        if not self.is_live:
            self.begin_live_edit()
        self._present = self._resolve(action)

    def commit(self) -> bool:
        """Cierra la edición live registrando el snapshot previo al drag (si cambió algo)."""
        base = self._live_base
        if base is None:
            return False
        self._live_base = None
        if self._present == base:
            return False
        self._push_past(base)
        return True

    def revert(self) -> bool:
        """Cancela la edición live restaurando el estado previo al drag."""
        base = self._live_base
        if base is None:
            return False
        self._live_base = None
        self._present = base
        return True

    # ----------------------------
    # Undo / redo
    # ----------------------------
    def undo(self) -> bool:
        if self.is_live:
            self.commit()
        if not self._past:
            return False
        self._future.append(self._present)
        self._present = self._past.pop()
        return True

    def redo(self) -> bool:
        if self.is_live:
            self.commit()
        if not self._future:
            return False
        self._past.append(self._present)
        self._present = self._future.pop()
        return True

    def reset(self, state: T) -> None:
        """Reemplaza el estado y vacía el historial (p.ej. al abrir un archivo)."""
        self._present = state
        self._past.clear()
        self._future.clear()
        self._live_base = None
