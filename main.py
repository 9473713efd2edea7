"""Application entrypoint."""

from __future__ import annotations

import asyncio
import logging
import sys
import time
import traceback
from pathlib import Path

from config import JsonConfigStore
from emoji_catalog import RecencyList
from errors import ImageValidationError
from image_source import describe_file, save_image
from models import (
    ErrorDescriptor,
    Failed,
    Processing,
    Result,
    SelectingEmoji,
    WorkflowStep,
)
from transform_client import HttpTransformClient
from workflow_controller import WorkflowController

try:
    import qasync
    from PySide6.QtWidgets import (
        QApplication,
        QFileDialog,
        QInputDialog,
        QLabel,
        QMainWindow,
        QMessageBox,
        QStackedWidget,
        QVBoxLayout,
        QWidget,
    )
except Exception as exc:  # pragma: no cover
    raise SystemExit(f"PySide6 and qasync are required to run the desktop app: {exc}")

from views import (
    EmojiPanel,
    ErrorPanel,
    ProcessingPanel,
    QuotaBanner,
    ResultPanel,
    StepIndicator,
    UploadPanel,
)

logger = logging.getLogger(__name__)


def _exception_hook(exctype, value, tb) -> None:  # noqa: ANN001
    """Log uncaught exceptions instead of letting Qt abort the process."""
    if issubclass(exctype, asyncio.CancelledError):
        return
    details = "".join(traceback.format_exception(exctype, value, tb))
    logger.error("Unhandled exception: %s\n%s", value, details)


class MainWindow(QMainWindow):
    def __init__(self) -> None:
        super().__init__()
        self.setWindowTitle("EmoBanana")
        self.resize(960, 760)

        title = QLabel("EmoBanana")
        title.setStyleSheet("font-size: 40px; font-weight: bold; color: #FB923C;")
        subtitle = QLabel("Transform facial expressions with emoji magic ✨")

        self.steps = StepIndicator()
        self.banner = QuotaBanner()
        self.upload = UploadPanel()
        self.emoji = EmojiPanel()
        self.processing = ProcessingPanel()
        self.result = ResultPanel()
        self.error = ErrorPanel()

        self.stack = QStackedWidget()
        self._pages = {
            WorkflowStep.SELECTING_IMAGE: self.upload,
            WorkflowStep.SELECTING_EMOJI: self.emoji,
            WorkflowStep.PROCESSING: self.processing,
            WorkflowStep.RESULT: self.result,
            WorkflowStep.FAILED: self.error,
        }
        for page in self._pages.values():
            self.stack.addWidget(page)

        footer = QLabel("Powered by Gemini 2.5 Flash • 5 transformations per day")

        layout = QVBoxLayout()
        for widget in (title, subtitle, self.steps, self.banner, self.stack, footer):
            layout.addWidget(widget)
        central = QWidget()
        central.setLayout(layout)
        self.setCentralWidget(central)

    def show_step(self, step: WorkflowStep) -> None:
        self.steps.set_step(step)
        self.stack.setCurrentWidget(self._pages[step])


class App:
    def __init__(self) -> None:
        self.app = QApplication(sys.argv)
        self.loop = qasync.QEventLoop(self.app)
        asyncio.set_event_loop(self.loop)

        self.config_store = JsonConfigStore()
        self.recent = RecencyList(self.config_store)
        self.window = MainWindow()

        self.controller = WorkflowController(
            client=HttpTransformClient(self.config_store.get_api_url()),
            on_state_change=self._on_state_change,
            on_error=self._on_error,
            on_validation_error=self._on_validation_error,
        )

        self.window.upload.file_selected.connect(self._on_file_selected)
        self.window.emoji.emoji_selected.connect(self._on_emoji_selected)
        self.window.result.download_requested.connect(self._download)
        self.window.result.reset_requested.connect(self.controller.reset)
        self.window.error.retry_requested.connect(self.controller.retry)
        self.window.error.reset_requested.connect(self.controller.reset)
        self._setup_menu()

        self.window.emoji.set_recent(self.recent.items)
        self.window.show_step(self.controller.step)
        self.window.show()

    def _setup_menu(self) -> None:
        menu = self.window.menuBar().addMenu("Settings")
        api_action = menu.addAction("Set API URL")
        api_action.triggered.connect(self._set_api_url)
        menu.addSeparator()
        quit_action = menu.addAction("Quit")
        quit_action.triggered.connect(self.quit)

    def _set_api_url(self) -> None:
        value, ok = QInputDialog.getText(
            self.window, "API URL", "Transform service base URL", text=self.config_store.get_api_url()
        )
        if not ok or not value.strip():
            return
        self.config_store.set_api_url(value)
        QMessageBox.information(self.window, "Saved", "API URL saved. Restart app to apply.")

    # ------------------------------------------------------------------
    # Widget handlers
    # ------------------------------------------------------------------

    def _on_file_selected(self, path: str) -> None:
        try:
            raw = describe_file(path)
        except ImageValidationError as exc:
            self._on_validation_error(exc)
            return
        self.controller.select_image(raw)

    def _on_emoji_selected(self, emoji: str) -> None:
        if self.controller.choose_emoji(emoji) is None:
            return
        self.window.emoji.set_recent(self.recent.record_use(emoji))

    def _download(self) -> None:
        state = self.controller.state
        if not isinstance(state, Result):
            return
        default_name = f"emobanana-{int(time.time() * 1000)}.jpg"
        path, _ = QFileDialog.getSaveFileName(self.window, "Save result", default_name)
        if not path:
            return
        try:
            save_image(state.transformed_image, Path(path))
        except OSError as exc:
            QMessageBox.warning(self.window, "Save failed", str(exc))

    # ------------------------------------------------------------------
    # Controller callbacks
    # ------------------------------------------------------------------

    def _on_state_change(self, from_step: WorkflowStep, to_step: WorkflowStep) -> None:
        state = self.controller.state
        if isinstance(state, SelectingEmoji):
            self.window.upload.clear_error()
            self.window.emoji.set_image(state.image.data_uri)
        elif isinstance(state, Processing):
            self.window.processing.set_emoji(state.emoji)
        elif isinstance(state, Result):
            self.window.result.show_result(
                state.image.data_uri, state.transformed_image, state.processing_time_ms
            )
        elif isinstance(state, Failed):
            self.window.error.show_error(state.error)
        self.window.banner.setVisible(self.controller.quota_exhausted)
        self.window.show_step(to_step)

    def _on_error(self, error: ErrorDescriptor) -> None:
        self.window.banner.setVisible(self.controller.quota_exhausted)

    def _on_validation_error(self, error: ImageValidationError) -> None:
        self.window.upload.show_error(error.message)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def run(self) -> int:
        with self.loop:
            self.app.aboutToQuit.connect(self.controller.reset)
            self.app.lastWindowClosed.connect(self.app.quit)
            return self.loop.run_forever() or 0

    def quit(self) -> None:
        self.controller.reset()
        self.app.quit()


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    sys.excepthook = _exception_hook
    app = App()
    return app.run()


if __name__ == "__main__":
    raise SystemExit(main())
