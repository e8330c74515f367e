"""
Snapshot-based undo history for the annotation layer.

A snapshot is pushed right before a mutation; undoing restores it.
Built on QUndoStack so redo comes for free: the first undo of a command
remembers the layer it replaced and redo puts that back.
"""

from typing import Optional

from PySide6.QtCore import QObject
from PySide6.QtGui import QImage, QUndoCommand, QUndoStack

from screenme.editor.layers import AnnotationLayer
from screenme.services.logging_service import get_logger


class LayerSnapshotCommand(QUndoCommand):
    """Undo command holding the layer state from before a mutation."""

    def __init__(self, layer: AnnotationLayer, before: QImage, text: str) -> None:
        super().__init__(text)
        self._layer = layer
        self._before = before
        self._after: Optional[QImage] = None

    def redo(self) -> None:
        # QUndoStack.push() calls redo() immediately; the mutation has not
        # happened yet at that point, so there is nothing to apply.
        if self._after is not None:
            self._layer.restore(self._after)

    def undo(self) -> None:
        self._after = self._layer.snapshot()
        self._layer.restore(self._before)


class UndoStack(QObject):
    """LIFO history of annotation layer snapshots."""

    def __init__(self, layer: AnnotationLayer, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._logger = get_logger(__name__)
        self._layer = layer
        self._stack = QUndoStack(self)

    def push(self, label: str = "Annotate") -> None:
        """Snapshot the current layer; call right before mutating it."""
        self._stack.push(LayerSnapshotCommand(self._layer, self._layer.snapshot(), label))
        self._logger.debug(f"Undo snapshot pushed ({label}), depth={self.depth}")

    def undo(self) -> bool:
        """Restore the latest snapshot. Returns False on empty history."""
        if not self._stack.canUndo():
            return False
        self._stack.undo()
        self._logger.debug(f"Undo applied, depth={self.depth}")
        return True

    def redo(self) -> bool:
        if not self._stack.canRedo():
            return False
        self._stack.redo()
        return True

    def clear(self) -> None:
        self._stack.clear()

    @property
    def depth(self) -> int:
        """Number of snapshots that can currently be undone."""
        return self._stack.index()

    @property
    def can_undo(self) -> bool:
        return self._stack.canUndo()

    @property
    def can_redo(self) -> bool:
        return self._stack.canRedo()
