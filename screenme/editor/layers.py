"""
Raster buffers behind the screenshot display.

The display owns exactly two buffers:
- CapturedImage: the grabbed screen, never modified after construction
- AnnotationLayer: a transparent ARGB layer of the same size that holds
  every committed stroke, shape and text

All writes to the annotation layer go through AnnotationLayer.commit()
or AnnotationLayer.restore(), which emit `changed` so the owner can
request a repaint.
"""

from typing import Callable, Optional

from PySide6.QtCore import QObject, QPoint, QRect, QSize, Qt, Signal
from PySide6.QtGui import QImage, QPainter

from screenme.services.logging_service import get_logger

LAYER_FORMAT = QImage.Format.Format_ARGB32_Premultiplied


class CapturedImage:
    """Read-only wrapper around the grabbed screen image."""

    def __init__(self, image: QImage) -> None:
        # QImage is implicitly shared; the copy detaches us from the caller
        self._image = image.copy()

    @property
    def image(self) -> QImage:
        return self._image

    @property
    def size(self) -> QSize:
        return self._image.size()

    def rect(self) -> QRect:
        return self._image.rect()

    def crop(self, rect: QRect) -> QImage:
        return self._image.copy(rect)

    def save(self, path: str) -> bool:
        return self._image.save(path)


class AnnotationLayer(QObject):
    """
    Mutable transparent layer composited over the captured image.

    Signals:
        changed: Emitted after every commit, restore or clear.
    """

    changed = Signal()

    def __init__(self, size: QSize, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._logger = get_logger(__name__)
        self._image = QImage(size, LAYER_FORMAT)
        self._image.fill(Qt.GlobalColor.transparent)

    @property
    def image(self) -> QImage:
        return self._image

    @property
    def size(self) -> QSize:
        return self._image.size()

    def commit(self, paint: Callable[[QPainter], None]) -> None:
        """
        Paint into the layer.

        Args:
            paint: Callback receiving an antialiased QPainter bound to the
                layer. The painter is ended when the callback returns.
        """
        painter = QPainter(self._image)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        try:
            paint(painter)
        finally:
            painter.end()
        self.changed.emit()

    def snapshot(self) -> QImage:
        """Return a detached copy of the current layer pixels."""
        return self._image.copy()

    def restore(self, snapshot: QImage) -> None:
        """Replace the layer pixels with a previously taken snapshot."""
        if snapshot.size() != self._image.size():
            raise ValueError(
                f"Snapshot size {snapshot.width()}x{snapshot.height()} does not "
                f"match layer size {self._image.width()}x{self._image.height()}"
            )
        self._image = snapshot.convertToFormat(LAYER_FORMAT)
        self.changed.emit()

    def clear(self) -> None:
        self._image.fill(Qt.GlobalColor.transparent)
        self.changed.emit()

    def is_blank(self) -> bool:
        """True if no pixel of the layer has been painted."""
        blank = QImage(self._image.size(), LAYER_FORMAT)
        blank.fill(Qt.GlobalColor.transparent)
        return self._image == blank


def composite(captured: CapturedImage, layer: AnnotationLayer,
              region: Optional[QRect] = None) -> QImage:
    """
    Flatten the annotation layer onto the captured image.

    Args:
        captured: The base screenshot.
        layer: The annotation layer drawn on top.
        region: Optional crop rectangle; invalid rectangles are ignored.

    Returns:
        A new QImage; neither buffer is modified.
    """
    result = captured.image.convertToFormat(LAYER_FORMAT)
    painter = QPainter(result)
    painter.drawImage(QPoint(0, 0), layer.image)
    painter.end()

    if region is not None and region.isValid():
        return result.copy(region)
    return result
