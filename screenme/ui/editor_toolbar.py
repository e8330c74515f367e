"""
Floating editor toolbar for the screenshot display.

The toolbar only emits events; the display decides what they mean:
- tool_changed(ToolType): a tool was picked, or ToolType.NONE when the
  active tool button is clicked again
- color_changed(QColor)
- save_requested, copy_requested, publish_requested, close_requested
"""

from typing import Dict, Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QColor
from PySide6.QtWidgets import (
    QColorDialog,
    QFrame,
    QHBoxLayout,
    QPushButton,
    QToolButton,
    QWidget,
)

from screenme.editor.drawing import ToolType
from screenme.services.logging_service import get_logger


class ColorButton(QPushButton):
    """Button that shows a color and opens color picker on click."""

    color_changed = Signal(QColor)

    def __init__(self, color: QColor = QColor(0, 0, 0), parent=None):
        super().__init__(parent)
        self._color = QColor(color)
        self.setFixedSize(28, 28)
        self.setToolTip("Color")
        self.clicked.connect(self._on_click)
        self._update_style()

    def _update_style(self) -> None:
        self.setStyleSheet(f"""
            QPushButton {{
                background-color: {self._color.name()};
                border: 2px solid #555;
                border-radius: 4px;
            }}
            QPushButton:hover {{
                border-color: #888;
            }}
        """)

    def _on_click(self) -> None:
        color = QColorDialog.getColor(self._color, self, "Select Color")
        if color.isValid():
            self._color = color
            self._update_style()
            self.color_changed.emit(color)


class EditorToolbar(QFrame):
    """
    Row of tool buttons, a color picker and the save/copy/publish/close actions.

    Tool buttons behave like radio buttons that can also be switched off,
    so no QButtonGroup is used.
    """

    tool_changed = Signal(object)  # ToolType
    color_changed = Signal(QColor)
    save_requested = Signal()
    copy_requested = Signal()
    publish_requested = Signal()
    close_requested = Signal()

    # (tool, label, tooltip)
    TOOLS = [
        (ToolType.PEN, "Pen", "Freehand pen"),
        (ToolType.RECTANGLE, "Rect", "Rectangle"),
        (ToolType.ELLIPSE, "Ellipse", "Ellipse"),
        (ToolType.LINE, "Line", "Straight line"),
        (ToolType.ARROW, "Arrow", "Arrow"),
        (ToolType.TEXT, "Text", "Text"),
    ]

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._logger = get_logger(__name__)
        self._current_tool = ToolType.NONE
        self._tool_buttons: Dict[ToolType, QToolButton] = {}

        self._setup_ui()

    def _setup_ui(self) -> None:
        self.setFrameStyle(QFrame.Shape.StyledPanel)
        self.setStyleSheet("""
            QFrame {
                background-color: #2d2d2d;
                border: 1px solid #3a3a3a;
                border-radius: 4px;
            }
            QToolButton, QPushButton#action {
                background-color: transparent;
                color: #ddd;
                border: none;
                padding: 4px 8px;
            }
            QToolButton:hover, QPushButton#action:hover {
                background-color: #4a4a4a;
            }
            QToolButton:checked {
                background-color: #4a6a9a;
            }
        """)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(6, 4, 6, 4)
        layout.setSpacing(4)

        for tool, label, tooltip in self.TOOLS:
            button = QToolButton()
            button.setText(label)
            button.setToolTip(tooltip)
            button.setCheckable(True)
            # clicked(bool) carries the new checked state
            button.clicked.connect(lambda checked=False, t=tool: self._on_tool_clicked(t, checked))
            layout.addWidget(button)
            self._tool_buttons[tool] = button

        self._color_button = ColorButton(QColor(Qt.GlobalColor.black))
        self._color_button.color_changed.connect(self.color_changed)
        layout.addWidget(self._color_button)

        for label, signal in (
            ("Save", self.save_requested),
            ("Copy", self.copy_requested),
            ("Publish", self.publish_requested),
            ("Close", self.close_requested),
        ):
            button = QPushButton(label)
            button.setObjectName("action")
            button.clicked.connect(lambda checked=False, s=signal: s.emit())
            layout.addWidget(button)

        self.adjustSize()

    # ─── Public API ───────────────────────────────────────────────────────

    @property
    def current_tool(self) -> ToolType:
        return self._current_tool

    def select_tool(self, tool: ToolType) -> None:
        """Make tool the active one and emit tool_changed if it changed."""
        for button_tool, button in self._tool_buttons.items():
            button.setChecked(button_tool == tool)

        if tool == self._current_tool:
            return

        self._current_tool = tool
        self._logger.debug(f"Toolbar tool: {tool.name}")
        self.tool_changed.emit(tool)

    def deselect_tools(self) -> None:
        self.select_tool(ToolType.NONE)

    def _on_tool_clicked(self, tool: ToolType, checked: bool) -> None:
        self.select_tool(tool if checked else ToolType.NONE)
