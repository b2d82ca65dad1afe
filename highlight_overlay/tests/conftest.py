import logging
import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture
def qt_app(monkeypatch):
    from PyQt6.QtWidgets import QApplication

    monkeypatch.setenv("QT_QPA_PLATFORM", os.getenv("QT_QPA_PLATFORM", "offscreen"))
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


@pytest.fixture
def propagate_logs(monkeypatch):
    """Let caplog see overlay records, which stay out of the root logger by default."""
    monkeypatch.setenv("HIGHLIGHT_OVERLAY_PROPAGATE_LOGS", "1")
    logging.getLogger("HighlightOverlay").propagate = True
    yield
    logging.getLogger("HighlightOverlay").propagate = False
