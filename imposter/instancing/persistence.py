# imposter/instancing/persistence.py
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from enum import StrEnum
from typing import Iterator, Optional

from imposter.assets.handle import AssetHandle
from imposter.assets.store import folder_of, join_path
from imposter.assets.types import Texture
from imposter.capabilities import Capabilities
from imposter.errors import (
    HostOperationFailedError,
    ImposterError,
    InvalidStateError,
    PersistError,
)
from imposter.graphics.billboard import BillboardAsset, build_billboard
from imposter.graphics.geometry import ImposterQuad
from imposter.instancing.template import Template, generate_template, with_handle
from imposter.record import AssetRecord
from imposter.serializer import Serializer
from imposter.settings import AtlasNames

logger = logging.getLogger(__name__)


class PersistStep(StrEnum):
    ENCODE = "encode"
    IMPORT = "import"
    MATERIAL = "material rebuild"
    MATERIAL_SAVE = "material save"
    GEOMETRY = "geometry attach"
    BILLBOARD = "billboard"
    TEMPLATE = "template bind"
    INDEX = "index save"


@dataclass(frozen=True)
class PersistResult:
    base_texture: Texture
    pack_texture: Texture
    material_path: str
    mesh: AssetHandle[ImposterQuad]
    template: Template
    billboard: Optional[BillboardAsset] = None


@contextmanager
def step_guard(step: PersistStep) -> Iterator[None]:
    """Tag any failure inside the block with the step that was running."""
    try:
        yield
    except PersistError:
        raise
    except HostOperationFailedError as e:
        raise PersistError(str(e), step=step.value) from e
    except ImposterError as e:
        e.step = step.value
        raise
    except (OSError, ValueError) as e:
        raise PersistError(str(e), step=step.value) from e


class PersistenceWorkflow:
    """
    Writes an imposter's atlases, material, geometry and template into
    durable storage.

    Steps run in order and stop at the first failure. Artifacts written by
    earlier steps stay on storage; there is no rollback. Callers must not
    persist the same asset name concurrently.
    """

    def __init__(self, record: AssetRecord, capabilities: Capabilities) -> None:
        self.record = record
        self.caps = capabilities

    def persist(
        self,
        storage_location: str,
        asset_name: str,
        create_secondary: bool = False,
    ) -> PersistResult:
        store = self.caps.require_store()
        importer = self.caps.require_importer()
        record = self.record
        params = record.parameters
        folder = folder_of(storage_location)

        with step_guard(PersistStep.ENCODE):
            record.atlases.validate(params.atlas_resolution)
            base_path = self._write_atlas(
                record.atlases.base, AtlasNames.BASE, folder, asset_name
            )
            pack_path = self._write_atlas(
                record.atlases.pack, AtlasNames.PACK, folder, asset_name
            )
            store.refresh()

        record.asset_path = storage_location
        record.dirty = True

        with step_guard(PersistStep.IMPORT):
            settings = self.caps.settings.import_settings(params.atlas_resolution)
            base = importer.import_texture(base_path, settings)
            pack = importer.import_texture(pack_path, settings)
            record.set_atlases(base, pack)

        with step_guard(PersistStep.MATERIAL):
            material = record.rebuild_material(self.caps.shaders)

        material_path = join_path(folder, f"{asset_name}_Imposter_Mat.json")
        with step_guard(PersistStep.MATERIAL_SAVE):
            store.create_or_replace(
                material_path, material.to_document(), kind="material"
            )

        with step_guard(PersistStep.GEOMETRY):
            quad = record.rebuild_geometry()
            mesh = store.add_sub_object(
                storage_location, quad.name, quad.to_document(), kind="mesh"
            )

        billboard = None
        if create_secondary:
            billboard = self._build_billboard(storage_location, folder, asset_name)

        with step_guard(PersistStep.TEMPLATE):
            template = self.create_template(asset_name)

        with step_guard(PersistStep.INDEX):
            store.save_index()
        record.mark_clean()

        logger.info("Persisted imposter '%s' to %s", asset_name, storage_location)
        return PersistResult(
            base_texture=base,
            pack_texture=pack,
            material_path=material_path,
            mesh=mesh,
            template=template,
            billboard=billboard,
        )

    def create_template(self, template_name: str = "") -> Template:
        """
        Create, or replace in place, the template for this imposter.

        Replacing keeps the template's storage identity so scenes that
        reference it stay valid. A blob of the imposter is written next to it.
        """
        store = self.caps.require_store()
        record = self.record
        if record.asset_path is None:
            raise InvalidStateError(
                f"Imposter '{record.name}' must be persisted before a template is bound"
            )

        folder = folder_of(record.asset_path)
        name = record.effective_name(template_name or record.name)
        material = record.material or record.rebuild_material(self.caps.shaders)

        template = generate_template(name, record.quad, material)
        path = join_path(folder, f"{name}.prefab.json")
        handle = store.create_or_replace(
            path, template.to_document(), kind="template"
        )
        template = with_handle(template, handle)

        record.template = template
        record.dirty = True

        blob = Serializer.serialize(record, self.caps.codec, store=store)
        store.write_bytes(join_path(folder, f"{name}.json"), blob)
        store.save_index()

        logger.info("Bound template '%s' (id %d)", name, handle.id)
        return template

    def _write_atlas(
        self,
        texture: Optional[Texture],
        logical_name: AtlasNames,
        folder: str,
        asset_name: str,
    ) -> str:
        if texture is None:
            raise InvalidStateError(f"The {logical_name} atlas is missing")

        path = join_path(folder, f"{asset_name}_{logical_name.value}.png")
        payload = self.caps.codec.encode(texture.data)
        self.caps.require_store().write_bytes(path, payload)
        logger.info("Wrote atlas %s", path)
        return path

    def _build_billboard(
        self, storage_location: str, folder: str, asset_name: str
    ) -> Optional[BillboardAsset]:
        """Best-effort: a failure here is logged and persistence carries on."""
        store = self.caps.require_store()
        record = self.record
        params = record.parameters

        try:
            with step_guard(PersistStep.BILLBOARD):
                billboard = build_billboard(
                    asset_name,
                    self.caps.shaders,
                    base=record.atlases.base,
                    pack=record.atlases.pack,
                    frames=params.frames,
                    radius=params.radius,
                    offset=params.offset,
                    is_half=params.is_half,
                )
                store.create_or_replace(
                    join_path(folder, f"{asset_name}_Imposter_BillboardMat.json"),
                    billboard.material.to_document(),
                    kind="material",
                )
                store.add_sub_object(
                    storage_location,
                    billboard.name,
                    billboard.to_document(),
                    kind="billboard",
                )
        except ImposterError as e:
            logger.warning("Skipping billboard for '%s': %s", asset_name, e)
            return None

        record.billboard = billboard
        return billboard
