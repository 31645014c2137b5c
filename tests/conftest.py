import numpy as np
import pytest

from imposter.assets.codec import PngCodec
from imposter.assets.types import Texture, TextureData
from imposter.capabilities import Capabilities, default_shader_library
from imposter.record import AssetRecord, AtlasPair, CaptureParameters
from imposter.types import Vector3


def make_atlas(resolution: int, seed: int = 0, name: str = "atlas") -> Texture:
    """Synthetic RGBA atlas with random pixels, alpha included."""
    rng = np.random.default_rng(seed)
    pixels = rng.integers(0, 256, size=(resolution, resolution, 4), dtype=np.uint8)
    return Texture(name=name, data=TextureData.from_array(pixels))


def make_record(
    name: str = "Tree",
    *,
    atlas_resolution: int = 16,
    frames: int = 4,
    is_half: bool = False,
    radius: float = 1.5,
    offset: Vector3 = Vector3(0.0, 0.75, 0.0),
    prefab_suffix: str = "",
) -> AssetRecord:
    params = CaptureParameters(
        atlas_resolution=atlas_resolution,
        frames=frames,
        is_half=is_half,
        radius=radius,
        offset=offset,
        prefab_suffix=prefab_suffix,
    )
    atlases = AtlasPair(
        make_atlas(atlas_resolution, seed=1, name="base"),
        make_atlas(atlas_resolution, seed=2, name="pack"),
    )
    return AssetRecord(name, params, atlases)


@pytest.fixture
def codec():
    return PngCodec()


@pytest.fixture
def shaders():
    return default_shader_library()


@pytest.fixture
def record():
    """A small, fully populated imposter."""
    return make_record()


@pytest.fixture
def authoring(tmp_path):
    """Authoring capabilities backed by a fresh store directory."""
    return Capabilities.authoring(tmp_path / "project")


@pytest.fixture
def runtime():
    return Capabilities.runtime()
