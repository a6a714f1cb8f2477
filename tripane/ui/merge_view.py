"""
Three-pane diff view.

Provides the UI for:
- Showing the left, common and right texts side by side
- Highlighting the regions that differ from the common pane
- Drawing connectors between matching regions
- Copying regions from the left or right pane into the common pane
- Saving the edited common text
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from PyQt6.QtCore import Qt, QTimer, pyqtSignal, QSize, QRect, QPoint
from PyQt6.QtGui import QFont, QColor, QPainter, QPalette, QKeySequence
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QPlainTextEdit, QLabel,
    QToolBar, QComboBox, QMessageBox, QMainWindow, QApplication,
)

from tripane.core.diff.engine import AlignmentEngine
from tripane.core.exceptions import TripaneError
from tripane.core.merge.session import MergeSession
from tripane.core.models import BufferRole, CopyDirection, Granularity, PassResult
from tripane.services.file_io import FileContent, FileIOService, LineEnding
from tripane.services.settings import (
    ApplicationSettings, ColorSettings, SettingsManager, Theme,
)
from tripane.ui.qt_buffer import QtTextBuffer
from tripane.ui.widgets import ConnectorGutter, GutterColors


logger = logging.getLogger(__name__)


DIFF_DELAY_MS = 250
RESIZE_DELAY_MS = 250
SCROLL_REPAINT_MS = 16


@dataclass
class PaneColors:
    """Colors for one text pane."""
    base: QColor
    text: QColor
    diff_background: QColor
    diff_marker: QColor
    line_number_background: QColor
    line_number_text: QColor
    line_number_diff_text: QColor


class MergeViewColors:
    """Color schemes for the diff view."""

    @staticmethod
    def is_dark(theme: Theme) -> bool:
        if theme is Theme.DARK:
            return True
        if theme is Theme.SYSTEM:
            window = QApplication.palette().color(QPalette.ColorRole.Window)
            return window.lightness() < 128
        return False

    @classmethod
    def load(cls, colors: ColorSettings, theme: Theme) -> PaneColors:
        """Load pane colors based on theme."""
        if cls.is_dark(theme):
            return PaneColors(
                base=QColor(30, 30, 30),
                text=QColor(212, 212, 212),
                diff_background=QColor(colors.dark_diff_background),
                diff_marker=QColor(colors.dark_diff_marker),
                line_number_background=QColor(40, 40, 40),
                line_number_text=QColor(120, 120, 120),
                line_number_diff_text=QColor(colors.dark_diff_marker),
            )
        return PaneColors(
            base=QColor(255, 255, 255),
            text=QColor(0, 0, 0),
            diff_background=QColor(colors.diff_background),
            diff_marker=QColor(colors.diff_marker),
            line_number_background=QColor(245, 245, 245),
            line_number_text=QColor(128, 128, 128),
            line_number_diff_text=QColor(colors.diff_marker),
        )

    @classmethod
    def load_gutter(cls, colors: ColorSettings, theme: Theme) -> GutterColors:
        """Load connector gutter colors based on theme."""
        if cls.is_dark(theme):
            return GutterColors(
                connector_fill=QColor(colors.dark_connector_fill),
                connector_border=QColor(colors.dark_connector_border),
                arrow=QColor(colors.dark_arrow_color),
            )
        return GutterColors(
            connector_fill=QColor(colors.connector_fill),
            connector_border=QColor(colors.connector_border),
            arrow=QColor(colors.arrow_color),
        )


class LineNumberArea(QWidget):
    """Line number display for a diff pane."""

    def __init__(self, editor: 'DiffPaneEdit'):
        super().__init__(editor)
        self.editor = editor
        self._width = 50

    def sizeHint(self) -> QSize:
        return QSize(self._width, 0)

    def paintEvent(self, event) -> None:
        self.editor.line_number_area_paint_event(event)

    def update_width(self, width: int) -> None:
        self._width = width
        self.setFixedWidth(width)


class DiffPaneEdit(QPlainTextEdit):
    """
    Text editor for one of the three panes.

    Features:
    - Line numbers
    - Diff region highlighting (full lines, or a 1px marker for
      zero-height regions)
    - Synchronized scrolling support
    """

    # Signal when the vertical scroll position changes
    scroll_changed = pyqtSignal(int)

    def __init__(
        self,
        role: BufferRole,
        parent: Optional[QWidget] = None,
        show_line_numbers: bool = True,
        editable: bool = True,
        font_family: str = "Consolas",
        font_size: int = 10
    ):
        super().__init__(parent)

        self.role = role
        self._regions: list[tuple[int, int]] = []
        self._show_diffs = True
        self._colors: Optional[PaneColors] = None

        self.setReadOnly(not editable)
        self.setLineWrapMode(QPlainTextEdit.LineWrapMode.NoWrap)

        font = QFont(font_family, font_size)
        font.setStyleHint(QFont.StyleHint.Monospace)
        self.setFont(font)

        if show_line_numbers:
            self.line_number_area = LineNumberArea(self)
            self.blockCountChanged.connect(self._update_line_number_width)
            self.updateRequest.connect(self._update_line_number_area)
            self._update_line_number_width()
        else:
            self.line_number_area = None

        self.verticalScrollBar().valueChanged.connect(self.scroll_changed.emit)

    def set_regions(self, regions: list[tuple[int, int]]) -> None:
        """Set the [start, end) line ranges to highlight."""
        self._regions = list(regions)
        self.viewport().update()
        if self.line_number_area:
            self.line_number_area.update()

    def set_show_diffs(self, show: bool) -> None:
        self._show_diffs = show
        self.viewport().update()

    def apply_colors(self, colors: PaneColors) -> None:
        self._colors = colors
        palette = self.palette()
        palette.setColor(QPalette.ColorRole.Base, colors.base)
        palette.setColor(QPalette.ColorRole.Text, colors.text)
        self.setPalette(palette)
        self.viewport().update()

    def line_top(self, line: int) -> float:
        """
        Top y of a line in viewport coordinates.

        A line past the last one maps to the bottom of the last line.
        """
        block = self.document().findBlockByNumber(line)
        if block.isValid():
            return self.blockBoundingGeometry(block).translated(self.contentOffset()).top()
        last = self.document().lastBlock()
        return self.blockBoundingGeometry(last).translated(self.contentOffset()).bottom()

    def set_synchronized_scroll(self, value: int) -> None:
        """Set scroll position (for sync with other editors)."""
        self.verticalScrollBar().setValue(value)

    def _update_line_number_width(self) -> None:
        if not self.line_number_area:
            return

        digits = len(str(max(1, self.blockCount())))
        width = 10 + self.fontMetrics().horizontalAdvance('9') * digits

        self.line_number_area.update_width(width)
        self.setViewportMargins(width, 0, 0, 0)

    def _update_line_number_area(self, rect: QRect, dy: int) -> None:
        if not self.line_number_area:
            return

        if dy:
            self.line_number_area.scroll(0, dy)
        else:
            self.line_number_area.update(
                0, rect.y(),
                self.line_number_area.width(), rect.height()
            )

    def _in_region(self, line: int) -> bool:
        return any(start <= line < end for start, end in self._regions)

    def line_number_area_paint_event(self, event) -> None:
        """Paint line numbers."""
        if not self.line_number_area:
            return

        colors = self._colors
        painter = QPainter(self.line_number_area)
        painter.fillRect(
            event.rect(),
            colors.line_number_background if colors else QColor(245, 245, 245)
        )

        block = self.firstVisibleBlock()
        block_number = block.blockNumber()
        top = int(self.blockBoundingGeometry(block).translated(self.contentOffset()).top())
        bottom = top + int(self.blockBoundingRect(block).height())

        while block.isValid() and top <= event.rect().bottom():
            if block.isVisible() and bottom >= event.rect().top():
                if colors is None:
                    painter.setPen(QColor(128, 128, 128))
                elif self._show_diffs and self._in_region(block_number):
                    painter.setPen(colors.line_number_diff_text)
                else:
                    painter.setPen(colors.line_number_text)

                painter.drawText(
                    0, top,
                    self.line_number_area.width() - 5,
                    self.fontMetrics().height(),
                    Qt.AlignmentFlag.AlignRight,
                    str(block_number + 1)
                )

            block = block.next()
            top = bottom
            bottom = top + int(self.blockBoundingRect(block).height())
            block_number += 1

        painter.end()

    def paintEvent(self, event) -> None:
        """Paint region highlights under the text."""
        if self._show_diffs and self._colors is not None:
            painter = QPainter(self.viewport())
            width = self.viewport().width()
            for start, end in self._regions:
                top = int(self.line_top(start))
                if end > start:
                    height = int(self.line_top(end)) - top
                    painter.fillRect(QRect(0, top, width, height), self._colors.diff_background)
                else:
                    painter.fillRect(QRect(0, top, width, 1), self._colors.diff_marker)
            painter.end()

        super().paintEvent(event)

    def resizeEvent(self, event) -> None:
        super().resizeEvent(event)

        if self.line_number_area:
            cr = self.contentsRect()
            self.line_number_area.setGeometry(
                QRect(cr.left(), cr.top(), self.line_number_area.width(), cr.height())
            )


class ThreeWayDiffView(QWidget):
    """
    Left, common and right panes with connector gutters between them.

    Edits re-run the diff after a short delay; scrolling only repaints.
    """

    # Signal with the region count of each published pass
    diffs_updated = pyqtSignal(int)

    # Signal with the ceiling when a pass had too many regions to show
    diffs_skipped = pyqtSignal(int)

    def __init__(
        self,
        settings: ApplicationSettings,
        engine: Optional[AlignmentEngine] = None,
        parent: Optional[QWidget] = None
    ):
        super().__init__(parent)

        self.settings = settings
        self._syncing_scroll = False

        self.editors: dict[BufferRole, DiffPaneEdit] = {}
        for role in BufferRole:
            self.editors[role] = DiffPaneEdit(
                role,
                show_line_numbers=settings.ui.show_line_numbers,
                editable=settings.pane(role).editable,
                font_family=settings.ui.font_family,
                font_size=settings.ui.font_size,
            )

        self.left_gutter = ConnectorGutter(arrow_on_left=True)
        self.right_gutter = ConnectorGutter(arrow_on_left=False)

        self.session = MergeSession(
            {role: QtTextBuffer(editor) for role, editor in self.editors.items()},
            engine=engine or AlignmentEngine(options=settings.diff.engine_options()),
            copy_link_enabled={
                BufferRole.LEFT: settings.left.copy_link_enabled,
                BufferRole.RIGHT: settings.right.copy_link_enabled,
            },
        )
        self.session.add_listener(self._on_pass)

        self._diff_timer = QTimer(self)
        self._diff_timer.setSingleShot(True)
        self._diff_timer.setInterval(DIFF_DELAY_MS)
        self._diff_timer.timeout.connect(self.refresh)

        self._resize_timer = QTimer(self)
        self._resize_timer.setSingleShot(True)
        self._resize_timer.setInterval(RESIZE_DELAY_MS)
        self._resize_timer.timeout.connect(self.refresh)

        self._repaint_timer = QTimer(self)
        self._repaint_timer.setSingleShot(True)
        self._repaint_timer.setInterval(SCROLL_REPAINT_MS)
        self._repaint_timer.timeout.connect(self._repaint_gutters)

        self._setup_ui()
        self.apply_settings(settings)

    def _setup_ui(self) -> None:
        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        left = self.editors[BufferRole.LEFT]
        common = self.editors[BufferRole.COMMON]
        right = self.editors[BufferRole.RIGHT]

        layout.addWidget(left, 1)
        layout.addWidget(self.left_gutter)
        layout.addWidget(common, 1)
        layout.addWidget(self.right_gutter)
        layout.addWidget(right, 1)

        self.left_gutter.set_line_geometry(
            self._gutter_top(left, self.left_gutter),
            self._gutter_top(common, self.left_gutter),
        )
        self.right_gutter.set_line_geometry(
            self._gutter_top(common, self.right_gutter),
            self._gutter_top(right, self.right_gutter),
        )

        self.left_gutter.copy_requested.connect(
            lambda index: self.copy(CopyDirection.LEFT_TO_COMMON, index)
        )
        self.right_gutter.copy_requested.connect(
            lambda index: self.copy(CopyDirection.RIGHT_TO_COMMON, index)
        )

        for editor in self.editors.values():
            editor.textChanged.connect(self._diff_timer.start)
            editor.scroll_changed.connect(
                lambda value, e=editor: self._sync_editor_scroll(e, value)
            )

    def _gutter_top(self, editor: DiffPaneEdit, gutter: ConnectorGutter) -> Callable[[int], float]:
        """Map an editor's line tops into a gutter's coordinates."""
        def top(line: int) -> float:
            y = editor.line_top(line)
            offset = editor.viewport().mapTo(self, QPoint(0, 0)).y() - gutter.y()
            return y + offset
        return top

    # -------------------------------------------------------------------------
    # Content
    # -------------------------------------------------------------------------

    def set_contents(self, left: str, common: str, right: str) -> None:
        """Replace all three texts and diff them."""
        for role, text in (
            (BufferRole.LEFT, left),
            (BufferRole.COMMON, common),
            (BufferRole.RIGHT, right),
        ):
            self.editors[role].setPlainText(text)
        self.refresh()

    def get_editors(self) -> dict[BufferRole, DiffPaneEdit]:
        return dict(self.editors)

    def common_text(self) -> str:
        return self.editors[BufferRole.COMMON].toPlainText()

    # -------------------------------------------------------------------------
    # Diff passes
    # -------------------------------------------------------------------------

    def refresh(self) -> Optional[PassResult]:
        """Run a diff pass now."""
        self._diff_timer.stop()
        result = self.session.refresh()
        if result is None:
            self.diffs_skipped.emit(self.session.engine.options.max_diffs)
        return result

    def _on_pass(self, result: PassResult) -> None:
        left_common = result.left_common
        common_right = result.common_right

        self.editors[BufferRole.LEFT].set_regions(
            [(r.left_start_line, r.left_end_line) for r in left_common]
        )
        self.editors[BufferRole.COMMON].set_regions(
            [(r.right_start_line, r.right_end_line) for r in left_common]
            + [(r.left_start_line, r.left_end_line) for r in common_right]
        )
        self.editors[BufferRole.RIGHT].set_regions(
            [(r.right_start_line, r.right_end_line) for r in common_right]
        )

        self.left_gutter.set_regions(left_common)
        self.right_gutter.set_regions(common_right)
        self.diffs_updated.emit(result.total)

    def apply_settings(self, settings: ApplicationSettings) -> None:
        """Apply display, pane and diff settings, then re-diff."""
        self.settings = settings
        diff = settings.diff

        for role, editor in self.editors.items():
            editor.setReadOnly(not settings.pane(role).editable)
            editor.set_show_diffs(diff.show_diffs)
            editor.apply_colors(
                MergeViewColors.load(settings.colors, settings.resolve_theme(role))
            )

        gutter_colors = MergeViewColors.load_gutter(settings.colors, settings.ui.theme)
        self.left_gutter.set_colors(gutter_colors)
        self.left_gutter.set_options(
            diff.show_connectors, settings.left.copy_link_enabled, diff.connector_y_offset
        )
        self.right_gutter.set_colors(gutter_colors)
        self.right_gutter.set_options(
            diff.show_connectors, settings.right.copy_link_enabled, diff.connector_y_offset
        )

        self.session.copy_link_enabled.update({
            BufferRole.LEFT: settings.left.copy_link_enabled,
            BufferRole.RIGHT: settings.right.copy_link_enabled,
        })
        self.session.engine.options = diff.engine_options()
        self.refresh()

    def set_granularity(self, granularity: Granularity) -> None:
        self.settings.diff.granularity = granularity
        if self.session.set_options(granularity=granularity) is None:
            self.diffs_skipped.emit(self.session.engine.options.max_diffs)

    # -------------------------------------------------------------------------
    # Copy
    # -------------------------------------------------------------------------

    def copy(self, direction: CopyDirection, index: int) -> None:
        """Copy a region into the common pane, keeping its scroll position."""
        common = self.editors[BufferRole.COMMON]
        scroll = common.verticalScrollBar().value()
        try:
            result = self.session.copy(direction, index)
        except TripaneError as e:
            logger.warning(f"ThreeWayDiffView - copy failed: {e}")
            return
        finally:
            self._diff_timer.stop()
            common.set_synchronized_scroll(scroll)

        if result is None:
            self.diffs_skipped.emit(self.session.engine.options.max_diffs)

    # -------------------------------------------------------------------------
    # Scrolling
    # -------------------------------------------------------------------------

    def _sync_editor_scroll(self, source: DiffPaneEdit, value: int) -> None:
        """Synchronize vertical scroll from source to the other editors."""
        if self._syncing_scroll:
            return

        self._syncing_scroll = True
        try:
            for editor in self.editors.values():
                if editor is not source:
                    editor.set_synchronized_scroll(value)
        finally:
            self._syncing_scroll = False

        if not self._repaint_timer.isActive():
            self._repaint_timer.start()

    def _repaint_gutters(self) -> None:
        self.left_gutter.update()
        self.right_gutter.update()

    def resizeEvent(self, event) -> None:
        super().resizeEvent(event)
        self._resize_timer.start()


class MergeWindow(QMainWindow):
    """
    Main window holding a ThreeWayDiffView.

    The common pane is the one being edited; Save writes it back to the
    output path (the common file unless another was given).
    """

    def __init__(
        self,
        settings_manager: SettingsManager,
        file_io: Optional[FileIOService] = None,
        output_path: Optional[str | Path] = None,
        parent: Optional[QWidget] = None
    ):
        super().__init__(parent)

        self.settings_manager = settings_manager
        self.file_io = file_io or FileIOService()
        self._output_path = Path(output_path) if output_path else None
        self._common_encoding = 'utf-8'
        self._common_line_ending = LineEnding.LF

        settings = settings_manager.settings
        self.setWindowTitle("Tripane")
        self.resize(settings.ui.window_width, settings.ui.window_height)

        central = QWidget()
        layout = QVBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)

        self.view = ThreeWayDiffView(settings)
        self.view.diffs_updated.connect(self._on_diffs_updated)
        self.view.diffs_skipped.connect(self._on_diffs_skipped)

        self.addToolBar(self._create_toolbar())
        layout.addWidget(self._create_headers())
        layout.addWidget(self.view)
        self.setCentralWidget(central)

        self.statusBar().showMessage("Ready")

    def _create_toolbar(self) -> QToolBar:
        toolbar = QToolBar()
        toolbar.setMovable(False)

        self.save_action = toolbar.addAction("Save")
        self.save_action.setShortcut(QKeySequence.StandardKey.Save)
        self.save_action.triggered.connect(self._save_common)

        toolbar.addSeparator()

        toolbar.addWidget(QLabel(" Granularity: "))
        self.granularity_combo = QComboBox()
        for granularity in Granularity:
            self.granularity_combo.addItem(granularity.name.capitalize(), granularity)
        self.granularity_combo.setCurrentIndex(
            self.granularity_combo.findData(self.settings_manager.settings.diff.granularity)
        )
        self.granularity_combo.currentIndexChanged.connect(self._on_granularity_changed)
        toolbar.addWidget(self.granularity_combo)

        toolbar.addSeparator()

        self.connectors_action = toolbar.addAction("Connectors")
        self.connectors_action.setCheckable(True)
        self.connectors_action.setChecked(self.settings_manager.settings.diff.show_connectors)
        self.connectors_action.triggered.connect(self._toggle_connectors)

        self.highlight_action = toolbar.addAction("Highlight")
        self.highlight_action.setCheckable(True)
        self.highlight_action.setChecked(self.settings_manager.settings.diff.show_diffs)
        self.highlight_action.triggered.connect(self._toggle_highlight)

        return toolbar

    def _create_headers(self) -> QWidget:
        headers = QWidget()
        layout = QHBoxLayout(headers)
        layout.setContentsMargins(4, 4, 4, 4)

        self.header_labels: dict[BufferRole, QLabel] = {}
        for role in BufferRole:
            label = QLabel(role.value.capitalize())
            label.setStyleSheet("font-weight: bold; padding: 4px;")
            self.header_labels[role] = label
            layout.addWidget(label, 1)
        return headers

    def load_files(
        self,
        left_path: str | Path,
        common_path: str | Path,
        right_path: str | Path
    ) -> bool:
        """Read the three files into the panes."""
        paths = {
            BufferRole.LEFT: Path(left_path),
            BufferRole.COMMON: Path(common_path),
            BufferRole.RIGHT: Path(right_path),
        }
        contents = {}
        for role, path in paths.items():
            result = self.file_io.read_text(path)
            if not result.success:
                QMessageBox.critical(self, "Open Failed", f"Failed to open file:\n{result.error}")
                return False
            contents[role] = result.content
            self.header_labels[role].setText(f"{role.value.capitalize()}: {path.name}")

        self.set_common_format(contents[BufferRole.COMMON])
        if self._output_path is None:
            self._output_path = paths[BufferRole.COMMON]

        self.set_contents(
            contents[BufferRole.LEFT].content,
            contents[BufferRole.COMMON].content,
            contents[BufferRole.RIGHT].content,
        )
        return True

    def set_common_format(self, content: FileContent) -> None:
        """Save the common pane with the encoding and line endings it was read with."""
        self._common_encoding = content.encoding
        self._common_line_ending = content.line_ending

    def set_contents(self, left: str, common: str, right: str) -> None:
        self.view.set_contents(left, common, right)

    def _save_common(self) -> None:
        if self._output_path is None:
            self.statusBar().showMessage("No output file", 3000)
            return

        line_ending = self._common_line_ending
        if line_ending in (LineEnding.MIXED, LineEnding.NONE):
            line_ending = LineEnding.LF

        result = self.file_io.write_text(
            self._output_path,
            self.view.common_text(),
            encoding=self._common_encoding,
            line_ending=line_ending,
        )
        if result.success:
            logger.info(f"Saved common pane to {self._output_path}")
            self.statusBar().showMessage(f"Saved to {self._output_path}", 3000)
        else:
            QMessageBox.critical(self, "Save Failed", f"Failed to save file:\n{result.error}")

    def _on_granularity_changed(self, index: int) -> None:
        granularity = self.granularity_combo.itemData(index)
        if granularity is not None:
            self.view.set_granularity(granularity)

    def _toggle_connectors(self, checked: bool) -> None:
        self.settings_manager.settings.diff.show_connectors = checked
        self.view.apply_settings(self.settings_manager.settings)

    def _toggle_highlight(self, checked: bool) -> None:
        self.settings_manager.settings.diff.show_diffs = checked
        self.view.apply_settings(self.settings_manager.settings)

    def _on_diffs_updated(self, count: int) -> None:
        self.statusBar().showMessage(f"{count} difference(s)")

    def _on_diffs_skipped(self, limit: int) -> None:
        self.statusBar().showMessage(f"Too many differences to display (limit {limit})")

    def closeEvent(self, event) -> None:
        self.settings_manager.save_window_size(self.width(), self.height())
        super().closeEvent(event)
