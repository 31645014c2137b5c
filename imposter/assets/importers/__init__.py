# imposter/assets/importers/__init__.py
from imposter.assets.importers.base import AssetImporter, TextureImportCapability
from imposter.assets.importers.texture import TextureImporter

__all__ = [
    "AssetImporter",
    "TextureImportCapability",
    "TextureImporter",
]
