# imposter/serializer.py
from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from imposter.assets.codec import ImageCodec
from imposter.assets.store import DurableStore
from imposter.assets.types import Texture, TextureData
from imposter.errors import InvalidStateError, MalformedBlobError
from imposter.record import AssetRecord, CaptureParameters
from imposter.types import Vector3

logger = logging.getLogger(__name__)

ATLAS_RESOLUTION = "atlasResolution"
FRAMES = "frames"
IS_HALF = "isHalf"
RADIUS = "radius"
OFFSET = "offset"
PREFAB_SUFFIX = "prefabSuffix"
BASE_PNG = "baseAtlasPngBytes"
PACK_PNG = "packAtlasPngBytes"

# Key spellings written by the original authoring tool.
LEGACY_KEYS = {
    ATLAS_RESOLUTION: "AtlasResolution",
    FRAMES: "Frames",
    IS_HALF: "IsHalf",
    RADIUS: "Radius",
    OFFSET: "Offset",
    PREFAB_SUFFIX: "PrefabSuffix",
    BASE_PNG: "baseTexturePngData",
    PACK_PNG: "packTexturePngData",
}


@dataclass(frozen=True)
class DeserializedImposter:
    parameters: CaptureParameters
    base: TextureData
    pack: TextureData


class Serializer:
    """
    Converts an imposter to and from the portable blob: a UTF-8 JSON
    document with named fields and two base64 PNG payloads.

    Fields are matched by name, never by position; unknown fields are ignored.
    """

    @classmethod
    def serialize(
        cls,
        record: AssetRecord,
        codec: ImageCodec,
        *,
        store: Optional[DurableStore] = None,
    ) -> bytes:
        """
        When `store` is given and an atlas has been persisted, the stored PNG
        file is embedded as-is instead of re-encoding the pixels.
        """
        params = record.parameters
        atlases = record.atlases
        if not atlases.complete:
            raise InvalidStateError(
                f"Imposter '{record.name}' needs both atlases to be serialized"
            )

        document: Dict[str, Any] = {
            ATLAS_RESOLUTION: params.atlas_resolution,
            FRAMES: params.frames,
            IS_HALF: params.is_half,
            OFFSET: {"x": params.offset.x, "y": params.offset.y, "z": params.offset.z},
            PREFAB_SUFFIX: params.prefab_suffix,
            RADIUS: params.radius,
            BASE_PNG: cls._encode_payload(atlases.base, codec, store),
            PACK_PNG: cls._encode_payload(atlases.pack, codec, store),
        }
        return json.dumps(document, indent=2).encode("utf-8")

    @classmethod
    def deserialize(cls, blob: bytes | str, codec: ImageCodec) -> DeserializedImposter:
        """
        Raises:
            MalformedBlobError: on invalid JSON, missing or mistyped fields,
            undecodable payloads, or payloads whose size disagrees with
            atlasResolution.
        """
        try:
            document = json.loads(blob)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedBlobError(f"Blob is not valid JSON: {e}") from e

        if not isinstance(document, dict):
            raise MalformedBlobError("Blob must be a JSON object")

        resolution = cls._field(document, ATLAS_RESOLUTION, int)
        offset = cls._offset(cls._field(document, OFFSET, dict))

        try:
            params = CaptureParameters(
                atlas_resolution=resolution,
                frames=cls._field(document, FRAMES, int),
                is_half=cls._field(document, IS_HALF, bool),
                radius=float(cls._field(document, RADIUS, (int, float))),
                offset=offset,
                prefab_suffix=cls._optional(document, PREFAB_SUFFIX, str, ""),
            )
        except InvalidStateError as e:
            raise MalformedBlobError(str(e)) from e

        base = cls._decode_payload(document, BASE_PNG, codec, resolution)
        pack = cls._decode_payload(document, PACK_PNG, codec, resolution)

        logger.debug(
            "Deserialized imposter blob (%dx%d, %d frames)",
            resolution,
            resolution,
            params.frames,
        )
        return DeserializedImposter(parameters=params, base=base, pack=pack)

    # -- Helpers --
    @staticmethod
    def _lookup(document: Dict[str, Any], key: str) -> Any:
        if key in document:
            return document[key]
        return document.get(LEGACY_KEYS[key])

    @classmethod
    def _field(cls, document: Dict[str, Any], key: str, kind: Any) -> Any:
        value = cls._lookup(document, key)
        if value is None:
            raise MalformedBlobError(f"Missing required field '{key}'")
        # bool is an int subclass; keep the two apart
        if isinstance(value, bool) and kind is not bool:
            raise MalformedBlobError(f"Field '{key}' has wrong type bool")
        if not isinstance(value, kind):
            raise MalformedBlobError(
                f"Field '{key}' has wrong type {type(value).__name__}"
            )
        return value

    @classmethod
    def _optional(
        cls, document: Dict[str, Any], key: str, kind: Any, default: Any
    ) -> Any:
        if cls._lookup(document, key) is None:
            return default
        return cls._field(document, key, kind)

    @staticmethod
    def _offset(raw: Dict[str, Any]) -> Vector3:
        try:
            x, y, z = (raw[axis] for axis in ("x", "y", "z"))
        except KeyError as e:
            raise MalformedBlobError(f"Offset is missing component {e}") from e

        for component in (x, y, z):
            if isinstance(component, bool) or not isinstance(component, (int, float)):
                raise MalformedBlobError(f"Offset component {component!r} is not a number")
        return Vector3(float(x), float(y), float(z))

    @staticmethod
    def _encode_payload(
        texture: Texture, codec: ImageCodec, store: Optional[DurableStore]
    ) -> str:
        # Only textures that came out of the importer still match their stored file
        imported = texture.path is not None and texture.import_settings is not None
        if store is not None and imported and store.exists(texture.path):
            payload = store.read_bytes(texture.path)
        else:
            payload = codec.encode(texture.data)
        return base64.b64encode(payload).decode("ascii")

    @classmethod
    def _decode_payload(
        cls,
        document: Dict[str, Any],
        key: str,
        codec: ImageCodec,
        resolution: int,
    ) -> TextureData:
        raw = cls._lookup(document, key)
        if raw is None:
            raise MalformedBlobError(f"Missing required field '{key}'")

        payload = _payload_bytes(key, raw)
        pixels = codec.decode(payload)

        if pixels.width != resolution or pixels.height != resolution:
            raise MalformedBlobError(
                f"'{key}' is {pixels.width}x{pixels.height}, "
                f"but atlasResolution is {resolution}"
            )
        return pixels


def _payload_bytes(key: str, raw: Any) -> bytes:
    """Accept base64 text or a JSON array of byte values."""
    if isinstance(raw, str):
        try:
            return base64.b64decode(raw, validate=True)
        except binascii.Error as e:
            raise MalformedBlobError(f"'{key}' is not valid base64: {e}") from e

    if isinstance(raw, list):
        return _bytes_from_list(key, raw)

    raise MalformedBlobError(f"'{key}' has wrong type {type(raw).__name__}")


def _bytes_from_list(key: str, values: Sequence[Any]) -> bytes:
    try:
        return bytes(values)
    except (TypeError, ValueError) as e:
        raise MalformedBlobError(f"'{key}' is not a byte array: {e}") from e
