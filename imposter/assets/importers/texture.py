# imposter/assets/importers/texture.py
import dataclasses
import logging
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from imposter.assets.importers.base import AssetImporter, TextureImportCapability
from imposter.assets.store import FileSystemStore
from imposter.assets.types import Texture, TextureData
from imposter.errors import HostOperationFailedError
from imposter.settings import ImportSettings

logger = logging.getLogger(__name__)

IMPORT_SUFFIX = ".import.json"


class TextureImporter(AssetImporter, TextureImportCapability):
    """
    Imports PNG atlases stored in a FileSystemStore.

    Import settings are recorded in a sidecar document next to the image so
    that later loads see the same metadata.
    """

    def __init__(self, store: FileSystemStore) -> None:
        self.store = store

    def import_file(self, path: Path) -> TextureData:
        with Image.open(path) as img:
            converted = img.convert("RGBA")

            width, height = converted.size
            data = converted.tobytes()

        return TextureData(data=data, width=width, height=height, components=4)

    def import_texture(self, path: str, settings: ImportSettings) -> Texture:
        if not self.store.exists(path):
            raise HostOperationFailedError(f"No texture at {path}")

        self.store.create_or_replace(
            path + IMPORT_SUFFIX,
            {
                "texture": path,
                "settings": {
                    k: (v.value if hasattr(v, "value") else v)
                    for k, v in dataclasses.asdict(settings).items()
                },
            },
            kind="import_settings",
        )

        try:
            data = self.import_file(self.store.resolve(path))
        except (UnidentifiedImageError, OSError) as e:
            raise HostOperationFailedError(f"Failed to import {path}: {e}") from e

        if max(data.width, data.height) > settings.max_size:
            data = _downscale(data, settings.max_size)

        logger.info(
            "Imported %s (%dx%d, srgb=%s, aniso=%d)",
            path,
            data.width,
            data.height,
            settings.srgb,
            settings.aniso_level,
        )
        return Texture(
            name=Path(path).stem,
            data=data,
            path=path,
            import_settings=settings,
            aniso_level=settings.aniso_level,
        )


def _downscale(data: TextureData, max_size: int) -> TextureData:
    img = Image.frombytes("RGBA", (data.width, data.height), data.data)
    img.thumbnail((max_size, max_size), Image.Resampling.LANCZOS)
    width, height = img.size
    return TextureData(data=img.tobytes(), width=width, height=height, components=4)
