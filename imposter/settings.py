# imposter/settings.py
from dataclasses import dataclass
from enum import Enum, StrEnum


class CapabilityProfile(str, Enum):
    """Which host capabilities are available to the core."""

    AUTHORING = "authoring"  # persistence + import + read-only spawn
    RUNTIME = "runtime"  # read-only spawn only


class ShaderNames(StrEnum):
    STANDARD = "XRA/IMP/Standard (Surface)"
    BILLBOARD = "XRA/IMP/UnityBillboard"


class MaterialParams(StrEnum):
    BASE_TEX = "_ImposterBaseTex"
    PACK_TEX = "_ImposterWorldNormalDepthTex"
    FRAMES = "_ImposterFrames"
    SIZE = "_ImposterSize"
    OFFSET = "_ImposterOffset"
    FULL_SPHERE = "_ImposterFullSphere"


class AtlasNames(StrEnum):
    BASE = "ImposterBase"
    PACK = "ImposterPack"


class TextureType(str, Enum):
    DEFAULT = "default"
    NORMAL_MAP = "normal_map"


class AlphaSource(str, Enum):
    NONE = "none"
    FROM_INPUT = "from_input"
    FROM_GRAYSCALE = "from_grayscale"


@dataclass(frozen=True, slots=True)
class ImportSettings:
    """
    Metadata handed to the texture-import capability.

    Atlases hold packed data, so they are imported linear (no sRGB) and
    with alpha taken verbatim from the file.
    """

    max_size: int
    texture_type: TextureType = TextureType.DEFAULT
    alpha_source: AlphaSource = AlphaSource.FROM_INPUT
    alpha_is_transparency: bool = False
    srgb: bool = False
    aniso_level: int = 16


@dataclass(slots=True)
class ImposterSettings:
    """
    Resource: top-level configuration for an imposter toolchain.
    """

    profile: CapabilityProfile = CapabilityProfile.AUTHORING
    aniso_level: int = 16
    compress_on_load: bool = True

    def import_settings(self, atlas_resolution: int) -> ImportSettings:
        return ImportSettings(
            max_size=atlas_resolution, aniso_level=self.aniso_level
        )
