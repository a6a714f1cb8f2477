from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from PyQt6.QtWidgets import QWidget
from PyQt6.QtCore import pyqtSignal, QSize, Qt, QPointF, QRectF
from PyQt6.QtGui import QPainter, QColor, QBrush, QPainterPath, QPen, QPaintEvent, QMouseEvent

from tripane.core.models import DiffRegion


LineTop = Callable[[int], float]


@dataclass
class GutterColors:
    """Colors used to paint a gutter."""
    connector_fill: QColor
    connector_border: QColor
    arrow: QColor


class ConnectorGutter(QWidget):
    """
    Gutter between two panes.

    Draws a curved connector from each region's lines in the pane on its
    left to the matching lines in the pane on its right, plus a copy arrow
    for regions the user may copy across.
    """
    copy_requested = pyqtSignal(int)  # region index

    ARROW_SIZE = 12

    def __init__(self, arrow_on_left: bool, parent=None):
        super().__init__(parent)
        self.setFixedWidth(60)
        self.setMouseTracking(True)

        # Arrow sits next to the pane the copy comes from
        self._arrow_on_left = arrow_on_left
        self._regions: list[DiffRegion] = []
        self._left_top: Optional[LineTop] = None
        self._right_top: Optional[LineTop] = None
        self._show_connectors = True
        self._copy_enabled = True
        self._y_offset = 0
        self._arrow_rects: list[tuple[QRectF, int]] = []
        self._colors = GutterColors(
            QColor(255, 245, 196), QColor(212, 160, 23), QColor(85, 85, 85)
        )

    def set_line_geometry(self, left_top: LineTop, right_top: LineTop) -> None:
        """
        Set the functions mapping a line to its top y in this gutter's coordinates.

        Line numbers one past the last line map to the bottom of the text.
        """
        self._left_top = left_top
        self._right_top = right_top

    def set_regions(self, regions: list[DiffRegion]) -> None:
        self._regions = list(regions)
        self.update()

    def set_options(
        self,
        show_connectors: bool,
        copy_enabled: bool,
        y_offset: int = 0
    ) -> None:
        self._show_connectors = show_connectors
        self._copy_enabled = copy_enabled
        self._y_offset = y_offset
        self.update()

    def set_colors(self, colors: GutterColors) -> None:
        self._colors = colors
        self.update()

    def paintEvent(self, event: QPaintEvent):
        """Paint connectors and copy arrows."""
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        self._arrow_rects = []

        if self._left_top is None or self._right_top is None:
            return

        for index, region in enumerate(self._regions):
            if self._show_connectors:
                path = self._connector_path(region)
                painter.fillPath(path, QBrush(self._colors.connector_fill))
                painter.setPen(QPen(self._colors.connector_border, 1))
                painter.drawPath(path)

            if self._copy_enabled and self._has_source_lines(region):
                self._paint_arrow(painter, region, index)

        painter.end()

    def _connector_path(self, region: DiffRegion) -> QPainterPath:
        #  p1   p2
        #
        #  p3   p4
        width = self.width()
        mid = width / 2
        p1 = QPointF(-1, self._left_top(region.left_start_line) + 0.5)
        p2 = QPointF(width + 1, self._right_top(region.right_start_line) + 0.5)
        p3 = QPointF(-1, self._left_top(region.left_end_line) + self._y_offset + 0.5)
        p4 = QPointF(width + 1, self._right_top(region.right_end_line) + self._y_offset + 0.5)

        path = QPainterPath(p1)
        path.cubicTo(QPointF(mid, p1.y()), QPointF(mid, p2.y()), p2)
        path.lineTo(p4)
        path.cubicTo(QPointF(mid, p4.y()), QPointF(mid, p3.y()), p3)
        path.closeSubpath()
        return path

    def _has_source_lines(self, region: DiffRegion) -> bool:
        if self._arrow_on_left:
            return region.left_extent > 0
        return region.right_extent > 0

    def _paint_arrow(self, painter: QPainter, region: DiffRegion, index: int) -> None:
        size = self.ARROW_SIZE
        if self._arrow_on_left:
            top = self._left_top(region.left_start_line)
            rect = QRectF(2, top, size, size)
            text = "→"
        else:
            top = self._right_top(region.right_start_line)
            rect = QRectF(self.width() - size - 2, top, size, size)
            text = "←"

        painter.setPen(self._colors.arrow)
        painter.drawText(rect, Qt.AlignmentFlag.AlignCenter, text)
        self._arrow_rects.append((rect, index))

    def mousePressEvent(self, event: QMouseEvent):
        """Handle clicks on copy arrows."""
        if event.button() == Qt.MouseButton.LeftButton:
            pos = event.position()
            for rect, index in self._arrow_rects:
                if rect.contains(pos):
                    self.copy_requested.emit(index)
                    return
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event: QMouseEvent):
        pos = event.position()
        over_arrow = any(rect.contains(pos) for rect, _ in self._arrow_rects)
        if over_arrow:
            self.setCursor(Qt.CursorShape.PointingHandCursor)
            self.setToolTip("Copy to common")
        else:
            self.unsetCursor()
            self.setToolTip("")
        super().mouseMoveEvent(event)

    def sizeHint(self):
        return QSize(60, 0)
