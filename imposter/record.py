# imposter/record.py
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from imposter.assets.codec import ImageCodec
from imposter.assets.types import Texture
from imposter.errors import InvalidStateError
from imposter.graphics.geometry import ImposterQuad, generate_quad
from imposter.graphics.materials import (
    MaterialBinding,
    ShaderLookup,
    build_material_binding,
)
from imposter.instancing.template import Template, generate_template
from imposter.settings import AtlasNames, ShaderNames
from imposter.types import Vector3

if TYPE_CHECKING:
    from imposter.graphics.billboard import BillboardAsset

logger = logging.getLogger(__name__)


def effective_name(base_name: str, prefab_suffix: str) -> str:
    if prefab_suffix:
        return f"{base_name}_{prefab_suffix}"
    return base_name


@dataclass(frozen=True, slots=True)
class CaptureParameters:
    """Settings the atlases were baked with. Immutable once baked."""

    atlas_resolution: int
    frames: int
    is_half: bool
    radius: float
    offset: Vector3 = field(default_factory=Vector3.zero)
    prefab_suffix: str = ""

    def __post_init__(self) -> None:
        if self.atlas_resolution <= 0:
            raise InvalidStateError(
                f"atlas_resolution must be positive, got {self.atlas_resolution}"
            )
        if self.frames <= 0:
            raise InvalidStateError(f"frames must be positive, got {self.frames}")
        if not (self.radius > 0 and math.isfinite(self.radius)):
            raise InvalidStateError(
                f"radius must be positive and finite, got {self.radius}"
            )
        if not all(math.isfinite(c) for c in self.offset):
            raise InvalidStateError(f"offset must be finite, got {self.offset}")

    def effective_name(self, base_name: str) -> str:
        return effective_name(base_name, self.prefab_suffix)


@dataclass(frozen=True, slots=True)
class AtlasPair:
    base: Optional[Texture] = None
    pack: Optional[Texture] = None

    @property
    def complete(self) -> bool:
        return self.base is not None and self.pack is not None

    def validate(self, resolution: int) -> None:
        """
        Raises:
            InvalidStateError: if an atlas is missing or not resolution x resolution.
        """
        for label, tex in (("base", self.base), ("pack", self.pack)):
            if tex is None:
                raise InvalidStateError(f"The {label} atlas is missing")
            if tex.width != resolution or tex.height != resolution:
                raise InvalidStateError(
                    f"The {label} atlas is {tex.width}x{tex.height}, "
                    f"expected {resolution}x{resolution}"
                )


class AssetRecord:
    """
    In-memory imposter asset: capture parameters, atlases and the
    geometry/material derived from them.

    Not thread-safe; confine each record to one thread.
    """

    def __init__(
        self,
        name: str,
        parameters: Optional[CaptureParameters] = None,
        atlases: Optional[AtlasPair] = None,
    ) -> None:
        self.name = name
        self._parameters = parameters
        self._atlases = atlases or AtlasPair()

        self._quad: Optional[ImposterQuad] = None
        self.material: Optional[MaterialBinding] = None
        self.template: Optional[Template] = None
        self.billboard: Optional[BillboardAsset] = None

        # Durable location of this record, known once persisted.
        self.asset_path: Optional[str] = None
        self.dirty = False

    @classmethod
    def from_blob(
        cls,
        name: str,
        blob: bytes,
        codec: ImageCodec,
        shaders: ShaderLookup,
    ) -> AssetRecord:
        record = cls(name)
        record.load_blob(blob, codec, shaders)
        return record

    # -- Accessors --
    @property
    def parameters(self) -> CaptureParameters:
        if self._parameters is None:
            raise InvalidStateError(f"Imposter '{self.name}' has no capture parameters")
        return self._parameters

    @property
    def has_parameters(self) -> bool:
        return self._parameters is not None

    @property
    def atlases(self) -> AtlasPair:
        return self._atlases

    @property
    def quad(self) -> ImposterQuad:
        if self._quad is None:
            return self.rebuild_geometry()
        return self._quad

    def effective_name(self, base_name: Optional[str] = None) -> str:
        return self.parameters.effective_name(base_name or self.name)

    # -- Mutation --
    def set_parameters(self, parameters: CaptureParameters) -> None:
        self._parameters = parameters
        self._invalidate()

    def set_atlases(self, base: Optional[Texture], pack: Optional[Texture]) -> None:
        self._atlases = AtlasPair(base, pack)
        self._invalidate()

    def mark_clean(self) -> None:
        self.dirty = False

    def rebuild_geometry(self) -> ImposterQuad:
        params = self.parameters
        self._quad = generate_quad(params.radius, params.offset)
        return self._quad

    def rebuild_material(
        self,
        shaders: ShaderLookup,
        shader_name: str = ShaderNames.STANDARD,
        *,
        material_name: Optional[str] = None,
    ) -> MaterialBinding:
        """
        Build a fresh binding and swap it in.

        Raises:
            MissingCapabilityError: if the shader cannot be resolved.
            InvalidStateError: if either atlas is absent.
        """
        params = self.parameters
        shader = shaders.find_shader_program(shader_name)

        binding = build_material_binding(
            material_name or self.name,
            shader,
            base=self._atlases.base,
            pack=self._atlases.pack,
            frames=params.frames,
            radius=params.radius,
            offset=params.offset,
            is_half=params.is_half,
        )
        self.material = binding
        self.dirty = True
        return binding

    # -- Blob loading --
    def load_blob(
        self,
        blob: bytes,
        codec: ImageCodec,
        shaders: ShaderLookup,
        *,
        aniso_level: int = 16,
        compress: bool = True,
    ) -> None:
        """
        Replace parameters and atlas pixels from a portable blob, then rebuild
        the derived geometry and material and bind a transient template if
        none is bound yet.
        """
        from imposter.serializer import Serializer

        result = Serializer.deserialize(blob, codec)
        params = result.parameters

        # New texture objects; bindings and templates built earlier keep the old ones
        base = Texture(
            AtlasNames.BASE.value,
            result.base,
            aniso_level=aniso_level,
            compressed=compress,
        )
        pack = Texture(
            AtlasNames.PACK.value,
            result.pack,
            aniso_level=aniso_level,
            compressed=compress,
        )

        self._parameters = params
        self._atlases = AtlasPair(base, pack)
        self.rebuild_geometry()
        self.rebuild_material(shaders)

        if self.template is None:
            self.template = generate_template(
                self.effective_name(), self.quad, self.material
            )
        logger.debug("Loaded imposter '%s' from blob", self.name)

    def _invalidate(self) -> None:
        self._quad = None
        self.material = None
        self.dirty = True
