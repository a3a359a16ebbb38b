import logging
from pathlib import Path
from typing import Callable, Optional

from PIL import Image
from PyQt5.QtCore import QPointF, QRectF, Qt
from PyQt5.QtGui import QColor, QImage, QPainter, QPen
from PyQt5.QtWidgets import (
    QApplication,
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from MR_Libs.RasterLib.coordinate_mapper import fit_rect, transformed_rect
from MR_Libs.RasterLib.raster_io import load_image_file
from MR_Libs.RasterLib.raster_models import Rect
from MR_Libs.SelectionLib.selection_painter import marker_color
from MR_Libs.SessionLib.background_removal import RembgRemover
from MR_Libs.SessionLib.editing_session import EditingSession
from MR_Libs.SessionLib.input_controller import (
    BUTTON_LEFT,
    BUTTON_MIDDLE,
    BUTTON_RIGHT,
    InputController,
    KeyEvent,
    PointerEvent,
    WheelEvent,
)
from MR_Libs.constants import (
    BRUSH_MODE_ERASE,
    BRUSH_MODE_RESTORE,
    CHECKERBOARD_DARK_COLOR,
    CHECKERBOARD_LIGHT_COLOR,
    CHECKERBOARD_TILE_SIZE,
    CURSOR_CROSSHAIR_HALF,
    CURSOR_LINE_WIDTH,
    DEFAULT_EXPORT_FILENAME,
    DEFAULT_WINDOW_HEIGHT,
    DEFAULT_WINDOW_WIDTH,
    UPLOAD_FILE_FILTER,
    ZOOM_BUTTON_STEP,
)

logger = logging.getLogger(__name__)

_QT_BUTTONS = {
    Qt.LeftButton: BUTTON_LEFT,
    Qt.MiddleButton: BUTTON_MIDDLE,
    Qt.RightButton: BUTTON_RIGHT,
}


def pil_to_qimage(image: Image.Image) -> QImage:
    rgba = image.convert("RGBA")
    data = rgba.tobytes("raw", "RGBA")
    qimage = QImage(data, rgba.width, rgba.height, rgba.width * 4, QImage.Format_RGBA8888)
    return qimage.copy()


class MaskCanvas(QWidget):
    """Canvas widget: draws the composited frame and forwards input to the controller."""

    def __init__(self, session: EditingSession, parent=None) -> None:
        super().__init__(parent)
        self.session = session
        self.controller = InputController(session, self.display_rect, on_change=self.refresh)
        self._frame: Optional[QImage] = None
        self.on_state_change: Optional[Callable[[], None]] = None

        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.StrongFocus)
        self.setCursor(Qt.BlankCursor)
        self.setMinimumSize(480, 360)

    def display_rect(self) -> Optional[Rect]:
        """Canvas rectangle on screen after zoom and pan."""
        size = self.session.raster_size
        if size is None:
            return None

        base = fit_rect(size, (self.width(), self.height()))
        origin = (self.width() / 2.0, self.height() / 2.0)
        return transformed_rect(base, origin, self.session.view)

    def refresh(self) -> None:
        frame = self.session.render()
        self._frame = pil_to_qimage(frame) if frame is not None else None
        self.update()
        if self.on_state_change is not None:
            self.on_state_change()

    # ---- Painting ----
    def paintEvent(self, event) -> None:
        painter = QPainter(self)
        self._draw_checkerboard(painter)

        rect = self.display_rect()
        if self._frame is not None and rect is not None:
            painter.setRenderHint(QPainter.SmoothPixmapTransform, self.session.view.zoom < 1.0)
            painter.drawImage(QRectF(rect.left, rect.top, rect.width, rect.height), self._frame)
            self._draw_brush_cursor(painter, rect)

        painter.end()

    def _draw_checkerboard(self, painter: QPainter) -> None:
        dark = QColor(CHECKERBOARD_DARK_COLOR)
        light = QColor(CHECKERBOARD_LIGHT_COLOR)
        tile = CHECKERBOARD_TILE_SIZE
        for row, y in enumerate(range(0, self.height(), tile)):
            for col, x in enumerate(range(0, self.width(), tile)):
                painter.fillRect(x, y, tile, tile, dark if (row + col) % 2 == 0 else light)

    def _draw_brush_cursor(self, painter: QPainter, rect: Rect) -> None:
        position = self.controller.cursor_position
        size = self.session.raster_size
        if position is None or size is None:
            return

        radius = self.session.brush.size / 2.0 * rect.width / size[0]
        pen = QPen(QColor(marker_color(self.session.brush.mode)))
        pen.setWidthF(CURSOR_LINE_WIDTH)
        painter.setPen(pen)
        painter.setBrush(Qt.NoBrush)

        center = QPointF(position[0], position[1])
        painter.drawEllipse(center, radius, radius)
        half = CURSOR_CROSSHAIR_HALF
        painter.drawLine(QPointF(position[0] - half, position[1]), QPointF(position[0] + half, position[1]))
        painter.drawLine(QPointF(position[0], position[1] - half), QPointF(position[0], position[1] + half))

    # ---- Input ----
    def _pointer_event(self, event) -> PointerEvent:
        return PointerEvent(
            x=event.x(),
            y=event.y(),
            button=_QT_BUTTONS.get(event.button(), BUTTON_RIGHT),
            alt=bool(event.modifiers() & Qt.AltModifier),
        )

    def mousePressEvent(self, event) -> None:
        self.setFocus()
        self.controller.press(self._pointer_event(event))
        event.accept()

    def mouseMoveEvent(self, event) -> None:
        self.controller.move(self._pointer_event(event))
        self.update()

    def mouseReleaseEvent(self, event) -> None:
        self.controller.release(_QT_BUTTONS.get(event.button(), BUTTON_RIGHT))
        event.accept()

    def leaveEvent(self, event) -> None:
        self.controller.leave()
        self.update()
        super().leaveEvent(event)

    def wheelEvent(self, event) -> None:
        modifiers = event.modifiers()
        handled = self.controller.wheel(
            WheelEvent(
                delta_y=-event.angleDelta().y(),
                ctrl=bool(modifiers & Qt.ControlModifier),
                meta=bool(modifiers & Qt.MetaModifier),
            )
        )
        if handled:
            event.accept()
            return
        super().wheelEvent(event)

    def keyPressEvent(self, event) -> None:
        modifiers = event.modifiers()
        key = "z" if event.key() == Qt.Key_Z else event.text()
        handled = self.controller.key(
            KeyEvent(
                key=key,
                ctrl=bool(modifiers & Qt.ControlModifier),
                meta=bool(modifiers & Qt.MetaModifier),
                shift=bool(modifiers & Qt.ShiftModifier),
            )
        )
        if handled:
            event.accept()
            return
        super().keyPressEvent(event)


class MaskEditorWindow(QMainWindow):
    def __init__(self, session: Optional[EditingSession] = None) -> None:
        super().__init__()
        self.session = session if session is not None else EditingSession()
        self.remover = RembgRemover()
        self.setWindowTitle("Mask Refiner")
        self.resize(DEFAULT_WINDOW_WIDTH, DEFAULT_WINDOW_HEIGHT)

        self._build_ui()
        self._connect_signals()
        self.sync_toolbar()

    def _build_ui(self) -> None:
        central = QWidget(self)
        self.setCentralWidget(central)

        root = QVBoxLayout(central)
        toolbar = QHBoxLayout()
        bottom = QHBoxLayout()

        self.btn_open = QPushButton("Open Image")
        self.btn_remove_bg = QPushButton("Remove Background")
        self.btn_shrink = QPushButton("-")
        self.btn_grow = QPushButton("+")
        self.label_brush_size = QLabel()
        self.btn_erase = QPushButton("Erase (E)")
        self.btn_restore = QPushButton("Restore (R)")
        self.btn_undo = QPushButton("Undo")
        self.btn_redo = QPushButton("Redo")
        self.btn_zoom_out = QPushButton("Zoom -")
        self.label_zoom = QLabel()
        self.btn_zoom_in = QPushButton("Zoom +")
        self.btn_start_over = QPushButton("Start Over")
        self.btn_download = QPushButton("Download Image")

        self.btn_shrink.setToolTip("Decrease size ([)")
        self.btn_grow.setToolTip("Increase size (])")
        self.btn_undo.setToolTip("Undo (Ctrl+Z)")
        self.btn_redo.setToolTip("Redo (Ctrl+Shift+Z)")
        self.btn_erase.setCheckable(True)
        self.btn_restore.setCheckable(True)

        self.canvas = MaskCanvas(self.session, self)
        self.canvas.on_state_change = self.sync_toolbar
        self.label_status = QLabel("Open an image to start")

        toolbar.addWidget(self.btn_open)
        toolbar.addWidget(self.btn_remove_bg)
        toolbar.addWidget(QLabel("Brush Size"))
        toolbar.addWidget(self.btn_shrink)
        toolbar.addWidget(self.label_brush_size)
        toolbar.addWidget(self.btn_grow)
        toolbar.addWidget(self.btn_erase)
        toolbar.addWidget(self.btn_restore)
        toolbar.addStretch(1)
        toolbar.addWidget(self.btn_undo)
        toolbar.addWidget(self.btn_redo)
        toolbar.addWidget(self.btn_zoom_out)
        toolbar.addWidget(self.label_zoom)
        toolbar.addWidget(self.btn_zoom_in)

        bottom.addWidget(self.btn_start_over)
        bottom.addWidget(self.label_status, stretch=1)
        bottom.addWidget(self.btn_download)

        root.addLayout(toolbar)
        root.addWidget(self.canvas, stretch=1)
        root.addLayout(bottom)

    def _connect_signals(self) -> None:
        self.btn_open.clicked.connect(self.open_image)
        self.btn_remove_bg.clicked.connect(self.remove_background)
        self.btn_shrink.clicked.connect(lambda: self._update(self.session.shrink_brush))
        self.btn_grow.clicked.connect(lambda: self._update(self.session.grow_brush))
        self.btn_erase.clicked.connect(lambda: self._update(self.session.set_brush_mode, BRUSH_MODE_ERASE))
        self.btn_restore.clicked.connect(lambda: self._update(self.session.set_brush_mode, BRUSH_MODE_RESTORE))
        self.btn_undo.clicked.connect(lambda: self._update(self.session.undo))
        self.btn_redo.clicked.connect(lambda: self._update(self.session.redo))
        self.btn_zoom_out.clicked.connect(lambda: self._update(self.session.step_zoom, -ZOOM_BUTTON_STEP))
        self.btn_zoom_in.clicked.connect(lambda: self._update(self.session.step_zoom, ZOOM_BUTTON_STEP))
        self.btn_start_over.clicked.connect(self.start_over)
        self.btn_download.clicked.connect(self.download)

    def _update(self, action, *args) -> None:
        action(*args)
        self.canvas.refresh()
        self.sync_toolbar()

    def sync_toolbar(self) -> None:
        brush = self.session.brush
        self.label_brush_size.setText(str(brush.size))
        self.btn_erase.setChecked(brush.mode == BRUSH_MODE_ERASE)
        self.btn_restore.setChecked(brush.mode == BRUSH_MODE_RESTORE)
        self.btn_undo.setEnabled(self.session.can_undo)
        self.btn_redo.setEnabled(self.session.can_redo)
        self.label_zoom.setText(f"{round(self.session.view.zoom * 100)}%")

        has_image = self.session.has_image
        self.btn_remove_bg.setEnabled(has_image and not self.session.is_processing)
        self.btn_download.setEnabled(has_image)

    def open_image(self) -> None:
        file_path, _ = QFileDialog.getOpenFileName(self, "Select Image", "", UPLOAD_FILE_FILTER)
        if not file_path:
            return

        try:
            image = load_image_file(file_path)
        except (OSError, ValueError) as exc:
            QMessageBox.warning(self, "Cannot Open Image", str(exc))
            return

        if self.session.load_original(image):
            self.label_status.setText(Path(file_path).name)
            self.remove_background()

    def remove_background(self) -> None:
        self.label_status.setText("Removing background...")
        QApplication.setOverrideCursor(Qt.WaitCursor)
        QApplication.processEvents()
        try:
            removed = self.session.remove_background(self.remover)
        finally:
            QApplication.restoreOverrideCursor()

        if removed:
            self.label_status.setText("Paint to erase or restore")
        else:
            self.label_status.setText(self.session.error or "Background removal skipped")
        self.canvas.refresh()
        self.sync_toolbar()

    def start_over(self) -> None:
        self.session.reset()
        self.label_status.setText("Open an image to start")
        self.canvas.refresh()
        self.sync_toolbar()

    def download(self) -> None:
        save_path, _ = QFileDialog.getSaveFileName(
            self,
            "Save Image",
            DEFAULT_EXPORT_FILENAME,
            "PNG Images (*.png)",
        )
        if not save_path:
            return

        try:
            self.session.save(save_path)
        except (OSError, ValueError) as exc:
            QMessageBox.warning(self, "Save Failed", str(exc))
            return

        logger.info(f"Saved edited image to {save_path}")
        self._show_info("Success", "Image saved successfully.")

    def _show_info(self, title: str, message: str) -> None:
        QMessageBox.information(self, title, message)
