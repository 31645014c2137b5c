import pytest

from imposter.errors import InvalidStateError, MissingCapabilityError
from imposter.graphics.materials import (
    ShaderLibrary,
    ShaderProgram,
    build_material_binding,
)
from imposter.settings import MaterialParams, ShaderNames
from imposter.types import Vector3
from tests.conftest import make_atlas


def test_shader_library_lookup(shaders):
    shader = shaders.find_shader_program(ShaderNames.STANDARD)

    assert shader.name == "XRA/IMP/Standard (Surface)"
    assert ShaderNames.BILLBOARD in shaders


def test_shader_library_missing():
    with pytest.raises(MissingCapabilityError, match="not found"):
        ShaderLibrary().find_shader_program("XRA/IMP/Standard (Surface)")


@pytest.mark.parametrize("is_half, expected", [(True, 0.0), (False, 1.0)])
def test_binding_parameters(is_half, expected):
    base, pack = make_atlas(4, seed=1), make_atlas(4, seed=2)

    binding = build_material_binding(
        "Tree",
        ShaderProgram("s"),
        base=base,
        pack=pack,
        frames=8,
        radius=2.0,
        offset=Vector3(0.0, 1.0, 0.0),
        is_half=is_half,
    )

    assert binding.get_texture(MaterialParams.BASE_TEX) is base
    assert binding.get_texture("_ImposterWorldNormalDepthTex") is pack
    assert binding.get_float("_ImposterFrames") == 8.0
    assert isinstance(binding.get_float("_ImposterFrames"), float)
    assert binding.get_float("_ImposterSize") == 2.0
    assert binding.get_float("_ImposterFullSphere") == expected
    assert binding.get_vector("_ImposterOffset") == Vector3(0.0, 1.0, 0.0)


def test_binding_is_read_only():
    binding = build_material_binding(
        "Tree",
        ShaderProgram("s"),
        base=make_atlas(4),
        pack=make_atlas(4),
        frames=4,
        radius=1.0,
        offset=Vector3.zero(),
        is_half=False,
    )

    with pytest.raises(TypeError):
        binding.floats["_ImposterSize"] = 5.0


def test_binding_requires_both_atlases():
    with pytest.raises(InvalidStateError, match="both atlases"):
        build_material_binding(
            "Tree",
            ShaderProgram("s"),
            base=make_atlas(4),
            pack=None,
            frames=4,
            radius=1.0,
            offset=Vector3.zero(),
            is_half=False,
        )


def test_binding_document_references_textures():
    base, pack = make_atlas(4), make_atlas(4)
    base.path = "Assets/Tree_ImposterBase.png"

    doc = build_material_binding(
        "Tree",
        ShaderProgram("s"),
        base=base,
        pack=pack,
        frames=4,
        radius=1.0,
        offset=Vector3(1.0, 2.0, 3.0),
        is_half=True,
    ).to_document()

    assert doc["shader"] == "s"
    assert doc["textures"]["_ImposterBaseTex"] == "Assets/Tree_ImposterBase.png"
    assert doc["textures"]["_ImposterWorldNormalDepthTex"] == pack.name
    assert doc["vectors"]["_ImposterOffset"] == [1.0, 2.0, 3.0]
    assert doc["floats"]["_ImposterFullSphere"] == 0.0
