"""
Selection rectangle model for the screenshot display.

The selection is an axis-aligned QRect built from two corner points with
exclusive far edges, so a drag from (10, 10) to (60, 40) selects exactly
50x30 pixels. A zero-size rectangle means "no selection yet".

Interaction:
- Press on one of the 8 handles: resize from that handle
- Press inside the rectangle: move it
- Press anywhere else: start a new selection
"""

from enum import Enum, auto
from typing import Dict, Optional

from PySide6.QtCore import QObject, QPoint, QRect, QSize, Signal

from screenme.services.logging_service import get_logger


class HandlePosition(Enum):
    """Result of hit-testing a point against the selection."""
    NONE = auto()
    TOP_LEFT = auto()
    TOP_RIGHT = auto()
    BOTTOM_LEFT = auto()
    BOTTOM_RIGHT = auto()
    TOP = auto()
    BOTTOM = auto()
    LEFT = auto()
    RIGHT = auto()
    MOVE = auto()


# Hit-test priority: corners first, then edges
HANDLE_ORDER = (
    HandlePosition.TOP_LEFT,
    HandlePosition.TOP_RIGHT,
    HandlePosition.BOTTOM_LEFT,
    HandlePosition.BOTTOM_RIGHT,
    HandlePosition.TOP,
    HandlePosition.BOTTOM,
    HandlePosition.LEFT,
    HandlePosition.RIGHT,
)

# Side of the square hit area centered on each handle
HANDLE_HIT_SIZE = 20

_MIRROR_HORIZONTAL = {
    HandlePosition.TOP_LEFT: HandlePosition.TOP_RIGHT,
    HandlePosition.TOP_RIGHT: HandlePosition.TOP_LEFT,
    HandlePosition.BOTTOM_LEFT: HandlePosition.BOTTOM_RIGHT,
    HandlePosition.BOTTOM_RIGHT: HandlePosition.BOTTOM_LEFT,
    HandlePosition.LEFT: HandlePosition.RIGHT,
    HandlePosition.RIGHT: HandlePosition.LEFT,
}

_MIRROR_VERTICAL = {
    HandlePosition.TOP_LEFT: HandlePosition.BOTTOM_LEFT,
    HandlePosition.BOTTOM_LEFT: HandlePosition.TOP_LEFT,
    HandlePosition.TOP_RIGHT: HandlePosition.BOTTOM_RIGHT,
    HandlePosition.BOTTOM_RIGHT: HandlePosition.TOP_RIGHT,
    HandlePosition.TOP: HandlePosition.BOTTOM,
    HandlePosition.BOTTOM: HandlePosition.TOP,
}


def rect_from_points(a: QPoint, b: QPoint) -> QRect:
    """Normalized rectangle spanning two points, far edges exclusive."""
    return QRect(
        min(a.x(), b.x()),
        min(a.y(), b.y()),
        abs(b.x() - a.x()),
        abs(b.y() - a.y()),
    )


def handle_points(rect: QRect) -> Dict[HandlePosition, QPoint]:
    """Positions of the 8 handles of rect, in hit-test order."""
    left = rect.x()
    top = rect.y()
    right = left + rect.width()
    bottom = top + rect.height()
    mid_x = left + rect.width() // 2
    mid_y = top + rect.height() // 2

    return {
        HandlePosition.TOP_LEFT: QPoint(left, top),
        HandlePosition.TOP_RIGHT: QPoint(right, top),
        HandlePosition.BOTTOM_LEFT: QPoint(left, bottom),
        HandlePosition.BOTTOM_RIGHT: QPoint(right, bottom),
        HandlePosition.TOP: QPoint(mid_x, top),
        HandlePosition.BOTTOM: QPoint(mid_x, bottom),
        HandlePosition.LEFT: QPoint(left, mid_y),
        HandlePosition.RIGHT: QPoint(right, mid_y),
    }


def handle_hit_area(center: QPoint) -> QRect:
    half = HANDLE_HIT_SIZE // 2
    return QRect(center.x() - half, center.y() - half, HANDLE_HIT_SIZE, HANDLE_HIT_SIZE)


class SelectionEngine(QObject):
    """
    Owns the selection rectangle and the select/move/resize gesture.

    Signals:
        selection_changed: Emitted with the new rectangle after every
            geometry change.
    """

    selection_changed = Signal(QRect)

    LABEL_OFFSET = QPoint(10, -20)

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._logger = get_logger(__name__)

        self._rect = QRect()
        self._origin = QPoint()

        # Gesture state, only meaningful between press() and release()
        self._gesture = HandlePosition.NONE
        self._selecting = False
        self._last_point: Optional[QPoint] = None

        self._size_label = ""
        self._label_position = QPoint()

    # ─── State ────────────────────────────────────────────────────────────

    @property
    def rect(self) -> QRect:
        return QRect(self._rect)

    @property
    def is_valid(self) -> bool:
        return self._rect.isValid()

    @property
    def is_dragging(self) -> bool:
        return self._selecting or self._gesture != HandlePosition.NONE

    @property
    def size_label(self) -> str:
        """Human readable "WxH" of the current selection, empty if invalid."""
        return self._size_label

    @property
    def label_position(self) -> QPoint:
        return QPoint(self._label_position)

    def set_rect(self, rect: QRect) -> None:
        self._apply(rect)

    def clear(self) -> None:
        self._apply(QRect())

    # ─── Operations ───────────────────────────────────────────────────────

    def begin_selection(self, point: QPoint) -> None:
        self._origin = QPoint(point)
        self._apply(QRect(point, QSize(0, 0)))

    def update_selection(self, point: QPoint) -> None:
        self._apply(rect_from_points(self._origin, point))

    def hit_test(self, point: QPoint) -> HandlePosition:
        """Classify point as a handle, MOVE (inside) or NONE."""
        if not self.is_valid:
            return HandlePosition.NONE

        points = handle_points(self._rect)
        for handle in HANDLE_ORDER:
            if handle_hit_area(points[handle]).contains(point):
                return handle

        if self._rect.contains(point):
            return HandlePosition.MOVE
        return HandlePosition.NONE

    def move_selection(self, delta: QPoint) -> None:
        self._apply(self._rect.translated(delta))

    def resize_selection(self, handle: HandlePosition, point: QPoint) -> HandlePosition:
        """
        Move one handle of the selection to point.

        Returns:
            The handle that ends up under point. It differs from `handle`
            when the drag crossed the opposite edge and the rectangle flipped.
        """
        left = self._rect.x()
        top = self._rect.y()
        right = left + self._rect.width()
        bottom = top + self._rect.height()

        if handle in (HandlePosition.TOP_LEFT, HandlePosition.BOTTOM_LEFT, HandlePosition.LEFT):
            left = point.x()
        if handle in (HandlePosition.TOP_RIGHT, HandlePosition.BOTTOM_RIGHT, HandlePosition.RIGHT):
            right = point.x()
        if handle in (HandlePosition.TOP_LEFT, HandlePosition.TOP_RIGHT, HandlePosition.TOP):
            top = point.y()
        if handle in (HandlePosition.BOTTOM_LEFT, HandlePosition.BOTTOM_RIGHT, HandlePosition.BOTTOM):
            bottom = point.y()

        if left > right:
            handle = _MIRROR_HORIZONTAL.get(handle, handle)
        if top > bottom:
            handle = _MIRROR_VERTICAL.get(handle, handle)

        self._apply(rect_from_points(QPoint(left, top), QPoint(right, bottom)))
        return handle

    # ─── Gesture ──────────────────────────────────────────────────────────

    def press(self, point: QPoint) -> HandlePosition:
        """Start a select, move or resize gesture at point."""
        hit = self.hit_test(point)
        self._last_point = QPoint(point)

        if hit == HandlePosition.NONE:
            self._selecting = True
            self._gesture = HandlePosition.NONE
            self.begin_selection(point)
        else:
            self._selecting = False
            self._gesture = hit

        self._logger.debug(f"Selection gesture {hit.name} at ({point.x()}, {point.y()})")
        return hit

    def drag(self, point: QPoint) -> bool:
        """Continue the current gesture. Returns True if geometry changed."""
        if self._selecting:
            self.update_selection(point)
        elif self._gesture == HandlePosition.MOVE and self._last_point is not None:
            self.move_selection(point - self._last_point)
        elif self._gesture != HandlePosition.NONE:
            self._gesture = self.resize_selection(self._gesture, point)
        else:
            return False

        self._last_point = QPoint(point)
        return True

    def release(self) -> None:
        self._selecting = False
        self._gesture = HandlePosition.NONE
        self._last_point = None

    # ─── Internals ────────────────────────────────────────────────────────

    def _apply(self, rect: QRect) -> None:
        self._rect = rect.normalized()

        if self._rect.isValid():
            self._size_label = f"{self._rect.width()}x{self._rect.height()}"
            top_right = QPoint(self._rect.x() + self._rect.width(), self._rect.y())
            self._label_position = top_right + self.LABEL_OFFSET
        else:
            self._size_label = ""
            self._label_position = QPoint()

        self.selection_changed.emit(QRect(self._rect))
