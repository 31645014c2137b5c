# imposter/__init__.py
from imposter.assets import PngCodec, Texture, TextureData
from imposter.capabilities import Capabilities, default_shader_library
from imposter.errors import (
    HostOperationFailedError,
    ImposterError,
    InvalidStateError,
    MalformedBlobError,
    MissingCapabilityError,
    PersistError,
)
from imposter.graphics import ImposterQuad, MaterialBinding, generate_quad
from imposter.instancing import Instance, Template
from imposter.instancing.manager import InstanceManager
from imposter.instancing.persistence import PersistenceWorkflow, PersistStep
from imposter.record import AssetRecord, AtlasPair, CaptureParameters
from imposter.serializer import Serializer
from imposter.settings import CapabilityProfile, ImposterSettings
from imposter.types import Bounds, Vector3

__all__ = [
    "AssetRecord",
    "AtlasPair",
    "Bounds",
    "CapabilityProfile",
    "Capabilities",
    "CaptureParameters",
    "HostOperationFailedError",
    "ImposterError",
    "ImposterQuad",
    "ImposterSettings",
    "Instance",
    "InstanceManager",
    "InvalidStateError",
    "MalformedBlobError",
    "MaterialBinding",
    "MissingCapabilityError",
    "PersistError",
    "PersistStep",
    "PersistenceWorkflow",
    "PngCodec",
    "Serializer",
    "Template",
    "Texture",
    "TextureData",
    "Vector3",
    "default_shader_library",
    "generate_quad",
]
