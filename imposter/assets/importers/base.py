# imposter/assets/importers/base.py
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from imposter.assets.types import Texture
from imposter.settings import ImportSettings


class AssetImporter(ABC):
    @abstractmethod
    def import_file(self, path: Path) -> Any:
        """
        Read file from disk and returns CPU-friendly data object.
        """
        pass


class TextureImportCapability(ABC):
    @abstractmethod
    def import_texture(self, path: str, settings: ImportSettings) -> Texture:
        """
        Configure color-space/size/anisotropy metadata for the texture stored
        at `path`, reimport it and return the processed texture.
        """
        pass
