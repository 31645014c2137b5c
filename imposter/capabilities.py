# imposter/capabilities.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from imposter.assets.codec import ImageCodec, PngCodec
from imposter.assets.importers.base import TextureImportCapability
from imposter.assets.importers.texture import TextureImporter
from imposter.assets.store import DurableStore, FileSystemStore
from imposter.errors import MissingCapabilityError
from imposter.graphics.materials import ShaderLibrary, ShaderLookup, ShaderProgram
from imposter.settings import CapabilityProfile, ImposterSettings, ShaderNames


def default_shader_library() -> ShaderLibrary:
    """Library holding the imposter surface and billboard programs."""
    library = ShaderLibrary()
    for name in ShaderNames:
        library.register(ShaderProgram(name.value))
    return library


@dataclass
class Capabilities:
    """
    Host capabilities the core depends on.

    The runtime profile carries no store or importer; persistence and
    template rebuilds are only possible with the authoring profile.
    """

    shaders: ShaderLookup
    codec: ImageCodec = field(default_factory=PngCodec)
    importer: Optional[TextureImportCapability] = None
    store: Optional[DurableStore] = None
    settings: ImposterSettings = field(default_factory=ImposterSettings)

    @classmethod
    def authoring(
        cls,
        root: Path,
        shaders: Optional[ShaderLookup] = None,
        settings: Optional[ImposterSettings] = None,
    ) -> Capabilities:
        if shaders is None:
            shaders = default_shader_library()
        if settings is None:
            settings = ImposterSettings(profile=CapabilityProfile.AUTHORING)

        store = FileSystemStore(root)
        return cls(
            shaders=shaders,
            importer=TextureImporter(store),
            store=store,
            settings=settings,
        )

    @classmethod
    def runtime(
        cls,
        shaders: Optional[ShaderLookup] = None,
        settings: Optional[ImposterSettings] = None,
    ) -> Capabilities:
        if shaders is None:
            shaders = default_shader_library()
        if settings is None:
            settings = ImposterSettings(profile=CapabilityProfile.RUNTIME)

        return cls(shaders=shaders, settings=settings)

    @property
    def profile(self) -> CapabilityProfile:
        return self.settings.profile

    @property
    def can_persist(self) -> bool:
        return (
            self.profile is CapabilityProfile.AUTHORING
            and self.store is not None
            and self.importer is not None
        )

    def require_store(self) -> DurableStore:
        if self.profile is not CapabilityProfile.AUTHORING or self.store is None:
            raise MissingCapabilityError(
                f"No durable store available in the {self.profile.value} profile"
            )
        return self.store

    def require_importer(self) -> TextureImportCapability:
        if self.profile is not CapabilityProfile.AUTHORING or self.importer is None:
            raise MissingCapabilityError(
                f"No texture importer available in the {self.profile.value} profile"
            )
        return self.importer
