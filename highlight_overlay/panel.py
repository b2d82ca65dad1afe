from __future__ import annotations

from typing import Optional, Protocol

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QPixmap
from PyQt6.QtWidgets import QLabel, QWidget

from highlight_overlay.overlay_config import RGBA
from highlight_overlay.png_encoder import EncodedImage

PANEL_OBJECT_NAME = "highlightPanel"


class DisplaySurface(Protocol):
    @property
    def is_attached(self) -> bool: ...

    def attach(self) -> None: ...

    def detach(self) -> None: ...

    def show_image(self, image: EncodedImage) -> bool: ...

    def show_color(self, color: RGBA) -> None: ...


class HighlightPanel(QLabel):
    """Label stretched over the host widget that presents the overlay image."""

    def __init__(self, host: QWidget) -> None:
        super().__init__(None)
        self._host = host
        self._attached = False
        self.setObjectName(PANEL_OBJECT_NAME)
        self.setAlignment(Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignTop)
        self.setScaledContents(False)
        self.hide()

    @property
    def is_attached(self) -> bool:
        return self._attached

    def attach(self) -> None:
        if self._attached:
            return
        self.setParent(self._host)
        self._fit_to_host()
        self.show()
        self.raise_()
        self._attached = True

    def detach(self) -> None:
        if not self._attached:
            return
        self.hide()
        self.setParent(None)
        self._attached = False

    def show_image(self, image: EncodedImage) -> bool:
        pixmap = QPixmap()
        if not pixmap.loadFromData(image.data, "PNG"):
            return False
        self.setStyleSheet("")
        self.setPixmap(pixmap)
        self._fit_to_host()
        return True

    def show_color(self, color: RGBA) -> None:
        self.clear()
        self.setStyleSheet(f"#{PANEL_OBJECT_NAME} {{ background-color: {color.css()}; }}")
        self._fit_to_host()

    def current_pixmap(self) -> Optional[QPixmap]:
        pixmap = self.pixmap()
        if pixmap is None or pixmap.isNull():
            return None
        return pixmap

    def _fit_to_host(self) -> None:
        if self.parent() is self._host:
            self.setGeometry(self._host.rect())
