"""Indexed-colour PNG encoding backed by QImage."""
from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Protocol, Sequence

from PyQt6.QtCore import QBuffer, QByteArray, QIODevice
from PyQt6.QtGui import QColor, QImage

from highlight_overlay.overlay_config import RGBA

PALETTE_SIZE_BOUND = 256


class EncodingError(RuntimeError):
    """Raised when a pixel buffer cannot be turned into an image."""


@dataclass(frozen=True)
class EncodedImage:
    data: bytes
    mime_type: str = "image/png"

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    def data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.to_base64()}"


class ImageEncoder(Protocol):
    def encode(
        self,
        width: int,
        height: int,
        palette: Sequence[RGBA],
        indices: bytes,
        *,
        palette_bound: int = PALETTE_SIZE_BOUND,
    ) -> EncodedImage: ...


class QtPngEncoder:
    """Encode palette indices as an 8-bit indexed PNG."""

    def encode(
        self,
        width: int,
        height: int,
        palette: Sequence[RGBA],
        indices: bytes,
        *,
        palette_bound: int = PALETTE_SIZE_BOUND,
    ) -> EncodedImage:
        if width <= 0 or height <= 0:
            raise EncodingError(f"invalid image size {width}x{height}")
        if not palette or len(palette) > min(palette_bound, PALETTE_SIZE_BOUND):
            raise EncodingError(f"palette size {len(palette)} outside 1..{palette_bound}")
        if len(indices) != width * height:
            raise EncodingError(f"expected {width * height} pixel indices, got {len(indices)}")

        # QImage scanlines are 32-bit aligned.
        stride = (width + 3) & ~3
        if stride == width:
            padded = bytes(indices)
        else:
            pad = bytes(stride - width)
            padded = b"".join(indices[row * width:(row + 1) * width] + pad for row in range(height))
        image = QImage(padded, width, height, stride, QImage.Format.Format_Indexed8)
        image.setColorTable([QColor(c.r, c.g, c.b, c.a).rgba() for c in palette])
        # Detach from the Python-owned buffer before it goes out of scope.
        image = image.copy()

        payload = QByteArray()
        buffer = QBuffer(payload)
        if not buffer.open(QIODevice.OpenModeFlag.WriteOnly):
            raise EncodingError("unable to open in-memory buffer")
        try:
            if not image.save(buffer, "PNG"):
                raise EncodingError("QImage refused to write PNG data")
        finally:
            buffer.close()
        return EncodedImage(bytes(payload.data()))
