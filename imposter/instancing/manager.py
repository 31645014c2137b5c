# imposter/instancing/manager.py
from __future__ import annotations

import logging
from typing import Optional

from imposter.capabilities import Capabilities
from imposter.errors import InvalidStateError, MissingCapabilityError
from imposter.instancing.persistence import (
    PersistenceWorkflow,
    PersistResult,
    PersistStep,
    step_guard,
)
from imposter.instancing.template import Instance, instantiate
from imposter.record import AssetRecord
from imposter.types import Vector3

logger = logging.getLogger(__name__)


class InstanceManager:
    """
    Spawns renderable instances of one imposter.

    Instances share the record's quad and material read-only; spawning never
    modifies them. In the runtime profile only an already-bound template can
    be used.
    """

    def __init__(self, record: AssetRecord, capabilities: Capabilities) -> None:
        self.record = record
        self.caps = capabilities
        self.workflow = PersistenceWorkflow(record, capabilities)

    def spawn(
        self,
        position: Optional[Vector3] = None,
        force_new_template: bool = False,
        template_name: str = "",
    ) -> Instance:
        if self.record.template is None or force_new_template:
            self._rebuild_template(force_new_template, template_name)

        if position is None:
            position = Vector3.zero()

        instance = instantiate(self.record.template, position)
        logger.debug(
            "Spawned '%s' at (%.3f, %.3f, %.3f)", instance.name, *instance.position
        )
        return instance

    def load_blob(self, blob: bytes) -> None:
        """Initialise the record from a portable blob using these capabilities."""
        settings = self.caps.settings
        self.record.load_blob(
            blob,
            self.caps.codec,
            self.caps.shaders,
            aniso_level=settings.aniso_level,
            compress=settings.compress_on_load,
        )

    def persist(
        self,
        storage_location: str,
        asset_name: str,
        create_secondary: bool = False,
    ) -> PersistResult:
        return self.workflow.persist(storage_location, asset_name, create_secondary)

    def _rebuild_template(self, forced: bool, template_name: str) -> None:
        if not self.caps.can_persist:
            if forced:
                raise MissingCapabilityError(
                    f"Cannot rebuild templates in the {self.caps.profile.value} profile"
                )
            raise InvalidStateError(
                f"Imposter '{self.record.name}' has no template bound"
            )

        with step_guard(PersistStep.TEMPLATE):
            self.workflow.create_template(template_name)
