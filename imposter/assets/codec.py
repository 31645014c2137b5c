# imposter/assets/codec.py
import io
from abc import ABC, abstractmethod

from PIL import Image, UnidentifiedImageError

from imposter.assets.types import TextureData
from imposter.errors import MalformedBlobError

_MODES = {3: "RGB", 4: "RGBA"}


class ImageCodec(ABC):
    """Lossless raster codec used for atlas payloads."""

    @abstractmethod
    def encode(self, pixels: TextureData) -> bytes:
        pass

    @abstractmethod
    def decode(self, payload: bytes) -> TextureData:
        """
        Raises:
            MalformedBlobError: if the payload is not a valid image.
        """
        pass


class PngCodec(ImageCodec):
    def encode(self, pixels: TextureData) -> bytes:
        mode = _MODES.get(pixels.components)
        if mode is None:
            raise ValueError(f"Unsupported component count: {pixels.components}")

        img = Image.frombytes(mode, (pixels.width, pixels.height), pixels.data)
        buf = io.BytesIO()
        img.save(buf, format="PNG")
        return buf.getvalue()

    def decode(self, payload: bytes) -> TextureData:
        try:
            with Image.open(io.BytesIO(payload)) as img:
                img.load()
                # RGB stays RGB; every other mode is widened to RGBA
                mode = img.mode if img.mode in ("RGB", "RGBA") else "RGBA"
                converted = img.convert(mode)
        except (UnidentifiedImageError, OSError) as e:
            raise MalformedBlobError(f"Payload is not a valid image: {e}") from e

        width, height = converted.size
        return TextureData(
            data=converted.tobytes(),
            width=width,
            height=height,
            components=len(mode),
        )
