# imposter/instancing/template.py
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

from imposter.assets.handle import AssetHandle
from imposter.graphics.geometry import ImposterQuad
from imposter.graphics.materials import MaterialBinding
from imposter.types import Vector3


@dataclass(frozen=True)
class Template:
    """
    Inert instance prototype bound to an imposter's quad and material.

    Templates never cast or receive shadows and stay inactive until an
    instance is spawned from them.
    """

    name: str
    quad: ImposterQuad
    material: MaterialBinding
    cast_shadows: bool = False
    receive_shadows: bool = False
    active: bool = False
    # Set once the template has been written to durable storage.
    handle: Optional[AssetHandle[Template]] = None

    @property
    def persisted(self) -> bool:
        return self.handle is not None

    def to_document(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "mesh": self.quad.name,
            "material": self.material.name,
            "cast_shadows": self.cast_shadows,
            "receive_shadows": self.receive_shadows,
            "active": self.active,
        }


@dataclass
class Instance:
    """A concrete renderable placed in a scene."""

    name: str
    template: Template
    position: Vector3 = field(default_factory=Vector3.zero)
    active: bool = True

    @property
    def quad(self) -> ImposterQuad:
        return self.template.quad

    @property
    def material(self) -> MaterialBinding:
        return self.template.material

    @property
    def cast_shadows(self) -> bool:
        return self.template.cast_shadows

    @property
    def receive_shadows(self) -> bool:
        return self.template.receive_shadows


def generate_template(
    name: str, quad: ImposterQuad, material: MaterialBinding
) -> Template:
    return Template(name=name, quad=quad, material=material)


def with_handle(template: Template, handle: AssetHandle[Template]) -> Template:
    return replace(template, handle=handle)


def instantiate(template: Template, position: Vector3) -> Instance:
    """Place an active copy of the template. The template itself is untouched."""
    return Instance(
        name=template.name, template=template, position=position, active=True
    )
