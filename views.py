"""Qt widgets for each workflow step."""

from __future__ import annotations

from typing import Iterable, Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QDragEnterEvent, QDropEvent, QPixmap
from PySide6.QtWidgets import (
    QFileDialog,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QScrollArea,
    QVBoxLayout,
    QWidget,
)

from emoji_catalog import emoji_name, search
from errors import ErrorKind
from image_source import decode_image_data
from models import ErrorDescriptor, WorkflowStep

ERROR_ICONS = {
    ErrorKind.RATE_LIMIT_EXCEEDED: "⏰",
    ErrorKind.INVALID_IMAGE_FORMAT: "📷",
    ErrorKind.UNSUPPORTED_IMAGE_TYPE: "📷",
    ErrorKind.IMAGE_TOO_LARGE: "📷",
    ErrorKind.GEMINI_API_ERROR: "🤖",
    ErrorKind.GEMINI_QUOTA_EXCEEDED: "🤖",
    ErrorKind.CONTENT_FILTERED: "🚫",
    ErrorKind.NO_FACES_DETECTED: "👤",
    ErrorKind.TRANSFORMATION_FAILED: "🎭",
    ErrorKind.AI_TIMEOUT: "⏳",
    ErrorKind.UNCLASSIFIED: "😕",
}

ERROR_TITLES = {
    ErrorKind.RATE_LIMIT_EXCEEDED: "Rate Limit Reached",
    ErrorKind.INVALID_IMAGE_FORMAT: "Invalid Image Format",
    ErrorKind.UNSUPPORTED_IMAGE_TYPE: "Unsupported Image Type",
    ErrorKind.IMAGE_TOO_LARGE: "Image Too Large",
    ErrorKind.GEMINI_API_ERROR: "AI Service Unavailable",
    ErrorKind.GEMINI_QUOTA_EXCEEDED: "AI Service Busy",
    ErrorKind.CONTENT_FILTERED: "Content Filtered",
    ErrorKind.NO_FACES_DETECTED: "No Faces Detected",
    ErrorKind.TRANSFORMATION_FAILED: "Transformation Failed",
    ErrorKind.AI_TIMEOUT: "Request Timeout",
    ErrorKind.UNCLASSIFIED: "Something Went Wrong",
}

IMAGE_FILTER = "Images (*.jpg *.jpeg *.png *.gif *.webp);;All files (*)"
QUOTA_BANNER_TEXT = "You've reached the daily limit of 5 transformations. Try again tomorrow!"

_ERROR_STYLE = "color: #DC2626; font-size: 13px; padding: 8px;"


def pixmap_from_bytes(data: bytes, max_height: int = 320) -> QPixmap:
    pixmap = QPixmap()
    pixmap.loadFromData(data)
    if not pixmap.isNull() and pixmap.height() > max_height:
        pixmap = pixmap.scaledToHeight(max_height, Qt.SmoothTransformation)
    return pixmap


def pixmap_from_data_uri(data_uri: str, max_height: int = 320) -> QPixmap:
    try:
        return pixmap_from_bytes(decode_image_data(data_uri), max_height)
    except ValueError:
        return QPixmap()


class StepIndicator(QWidget):
    _STEPS = (
        ("1", "Upload Image", WorkflowStep.SELECTING_IMAGE),
        ("2", "Select Emoji", WorkflowStep.SELECTING_EMOJI),
        ("3", "Get Result", WorkflowStep.RESULT),
    )

    def __init__(self) -> None:
        super().__init__()
        layout = QHBoxLayout()
        self._labels: list[tuple[QLabel, WorkflowStep]] = []
        for number, title, step in self._STEPS:
            label = QLabel(f"{number}  {title}")
            layout.addWidget(label)
            self._labels.append((label, step))
        self.setLayout(layout)

    def set_step(self, step: WorkflowStep) -> None:
        for label, label_step in self._labels:
            active = label_step == step
            label.setStyleSheet(
                "font-weight: bold; color: #FB923C;" if active else "color: #94A3B8;"
            )


class QuotaBanner(QLabel):
    def __init__(self) -> None:
        super().__init__(QUOTA_BANNER_TEXT)
        self.setAlignment(Qt.AlignCenter)
        self.setStyleSheet(
            "color: #854D0E; background: #FEFCE8; border: 1px solid #FEF08A;"
            "border-radius: 12px; padding: 12px;"
        )
        self.hide()


class UploadPanel(QWidget):
    """Drop zone plus file dialog; validation errors show underneath."""

    file_selected = Signal(str)

    def __init__(self) -> None:
        super().__init__()
        self.setAcceptDrops(True)

        self._zone = QLabel(
            "📸\n\nDrop your image here\nor click Browse\n\nSupports JPG, PNG, GIF, WebP (max 10MB)"
        )
        self._zone.setAlignment(Qt.AlignCenter)
        self._zone.setStyleSheet("border: 2px dashed #CBD5E1; border-radius: 16px; padding: 48px;")

        browse = QPushButton("Browse…")
        browse.clicked.connect(self._browse)

        self._error = QLabel("")
        self._error.setStyleSheet(_ERROR_STYLE)
        self._error.hide()

        layout = QVBoxLayout()
        layout.addWidget(self._zone)
        layout.addWidget(browse, alignment=Qt.AlignCenter)
        layout.addWidget(self._error)
        self.setLayout(layout)

    def show_error(self, text: str) -> None:
        self._error.setText(text)
        self._error.show()

    def clear_error(self) -> None:
        self._error.clear()
        self._error.hide()

    def _browse(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Choose an image", "", IMAGE_FILTER)
        if path:
            self.clear_error()
            self.file_selected.emit(path)

    def dragEnterEvent(self, event: QDragEnterEvent) -> None:  # noqa: N802
        if event.mimeData().hasUrls():
            event.acceptProposedAction()

    def dropEvent(self, event: QDropEvent) -> None:  # noqa: N802
        urls = event.mimeData().urls()
        if urls and urls[0].isLocalFile():
            self.clear_error()
            self.file_selected.emit(urls[0].toLocalFile())
            event.acceptProposedAction()


class EmojiPanel(QWidget):
    """Preview of the chosen image, emoji search, recent row and grid."""

    emoji_selected = Signal(str)

    def __init__(self, columns: int = 10) -> None:
        super().__init__()
        self._columns = columns

        self._preview = QLabel()
        self._preview.setAlignment(Qt.AlignCenter)

        heading = QLabel("Choose an emoji expression")
        heading.setAlignment(Qt.AlignCenter)
        heading.setStyleSheet("font-size: 20px; font-weight: 600;")

        self._search = QLineEdit()
        self._search.setPlaceholderText("Search emojis...")
        self._search.textChanged.connect(self._rebuild_grid)

        self._recent_title = QLabel("Recently Used")
        self._recent_row = QHBoxLayout()

        self._grid = QGridLayout()
        grid_host = QWidget()
        grid_host.setLayout(self._grid)
        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setWidget(grid_host)

        self._empty = QLabel("")
        self._empty.setAlignment(Qt.AlignCenter)
        self._empty.hide()

        layout = QVBoxLayout()
        layout.addWidget(self._preview)
        layout.addWidget(heading)
        layout.addWidget(self._search)
        layout.addWidget(self._recent_title)
        layout.addLayout(self._recent_row)
        layout.addWidget(scroll)
        layout.addWidget(self._empty)
        self.setLayout(layout)

        self._recent: tuple[str, ...] = ()
        self._rebuild_grid()

    def set_image(self, data_uri: str) -> None:
        self._preview.setPixmap(pixmap_from_data_uri(data_uri, max_height=256))

    def set_recent(self, emojis: Iterable[str]) -> None:
        self._recent = tuple(emojis)
        self._rebuild_recent()

    def _button(self, char: str) -> QPushButton:
        button = QPushButton(char)
        button.setToolTip(emoji_name(char))
        button.setAccessibleName(f"Select {emoji_name(char)}")
        button.setStyleSheet("font-size: 28px; padding: 6px;")
        button.clicked.connect(lambda _checked=False, c=char: self.emoji_selected.emit(c))
        return button

    def _rebuild_recent(self) -> None:
        _clear_layout(self._recent_row)
        searching = bool(self._search.text().strip())
        visible = bool(self._recent) and not searching
        self._recent_title.setVisible(visible)
        if not visible:
            return
        for char in self._recent:
            self._recent_row.addWidget(self._button(char))
        self._recent_row.addStretch(1)

    def _rebuild_grid(self, *_args: object) -> None:
        _clear_layout(self._grid)
        query = self._search.text()
        count = 0
        for index, symbol in enumerate(search(query)):
            self._grid.addWidget(self._button(symbol.char), index // self._columns, index % self._columns)
            count += 1
        if count == 0:
            self._empty.setText(f'No emojis found matching "{query.strip()}"')
            self._empty.show()
        else:
            self._empty.hide()
        self._rebuild_recent()


class ProcessingPanel(QWidget):
    def __init__(self) -> None:
        super().__init__()
        self._emoji = QLabel("")
        self._emoji.setAlignment(Qt.AlignCenter)
        self._emoji.setStyleSheet("font-size: 64px;")
        caption = QLabel("Transforming your image...")
        caption.setAlignment(Qt.AlignCenter)

        layout = QVBoxLayout()
        layout.addStretch(1)
        layout.addWidget(self._emoji)
        layout.addWidget(caption)
        layout.addStretch(1)
        self.setLayout(layout)

    def set_emoji(self, emoji: str) -> None:
        self._emoji.setText(emoji)


class ResultPanel(QWidget):
    download_requested = Signal()
    reset_requested = Signal()

    def __init__(self) -> None:
        super().__init__()
        self._original = QLabel()
        self._transformed = QLabel()
        for label in (self._original, self._transformed):
            label.setAlignment(Qt.AlignCenter)

        images = QHBoxLayout()
        images.addLayout(_captioned("Original", self._original))
        images.addLayout(_captioned("Transformed", self._transformed))

        self._time = QLabel("")
        self._time.setAlignment(Qt.AlignCenter)

        download = QPushButton("Download Result")
        download.clicked.connect(self.download_requested)
        again = QPushButton("Transform Another")
        again.clicked.connect(self.reset_requested)
        buttons = QHBoxLayout()
        buttons.addStretch(1)
        buttons.addWidget(download)
        buttons.addWidget(again)
        buttons.addStretch(1)

        layout = QVBoxLayout()
        layout.addLayout(images)
        layout.addWidget(self._time)
        layout.addLayout(buttons)
        self.setLayout(layout)

    def show_result(self, original_uri: str, transformed: bytes, processing_time_ms: int) -> None:
        self._original.setPixmap(pixmap_from_data_uri(original_uri))
        self._transformed.setPixmap(pixmap_from_bytes(transformed))
        if processing_time_ms:
            self._time.setText(f"Processed in {processing_time_ms / 1000:.1f} seconds")
        else:
            self._time.clear()


class ErrorPanel(QWidget):
    retry_requested = Signal()
    reset_requested = Signal()

    def __init__(self) -> None:
        super().__init__()
        self._icon = QLabel("")
        self._icon.setAlignment(Qt.AlignCenter)
        self._icon.setStyleSheet("font-size: 56px;")
        self._title = QLabel("")
        self._title.setAlignment(Qt.AlignCenter)
        self._title.setStyleSheet("font-size: 18px; font-weight: 600;")
        self._message = QLabel("")
        self._message.setWordWrap(True)
        self._message.setAlignment(Qt.AlignCenter)
        self._suggestion = QLabel("")
        self._suggestion.setWordWrap(True)
        self._suggestion.setStyleSheet(
            "color: #1D4ED8; background: #EFF6FF; border: 1px solid #BFDBFE;"
            "border-radius: 12px; padding: 12px;"
        )
        self._note = QLabel("Rate limits reset daily at midnight UTC")
        self._note.setAlignment(Qt.AlignCenter)
        self._note.setStyleSheet("color: #94A3B8; font-size: 11px;")

        self._retry = QPushButton("Try Again")
        self._retry.clicked.connect(self.retry_requested)
        self._reset = QPushButton("Start Over")
        self._reset.clicked.connect(self.reset_requested)
        buttons = QHBoxLayout()
        buttons.addStretch(1)
        buttons.addWidget(self._retry)
        buttons.addWidget(self._reset)
        buttons.addStretch(1)

        layout = QVBoxLayout()
        for widget in (self._icon, self._title, self._message, self._suggestion):
            layout.addWidget(widget)
        layout.addLayout(buttons)
        layout.addWidget(self._note)
        self.setLayout(layout)

    def show_error(self, error: ErrorDescriptor) -> None:
        rate_limited = error.kind is ErrorKind.RATE_LIMIT_EXCEEDED
        self._icon.setText(ERROR_ICONS[error.kind])
        self._title.setText(ERROR_TITLES[error.kind])
        self._message.setText(error.message)
        self._suggestion.setText(f"💡 {error.suggestion}" if error.suggestion else "")
        self._suggestion.setVisible(bool(error.suggestion))
        self._retry.setVisible(error.retryable)
        self._reset.setText("Try Tomorrow" if rate_limited else "Start Over")
        self._note.setVisible(rate_limited)


def _captioned(caption: str, widget: QWidget) -> QVBoxLayout:
    layout = QVBoxLayout()
    title = QLabel(caption)
    title.setAlignment(Qt.AlignCenter)
    layout.addWidget(title)
    layout.addWidget(widget)
    return layout


def _clear_layout(layout: Optional[QHBoxLayout | QGridLayout]) -> None:
    if layout is None:
        return
    while layout.count():
        item = layout.takeAt(0)
        widget = item.widget()
        if widget is not None:
            widget.deleteLater()
