import json

import numpy as np
import pytest
from PIL import Image

from imposter.assets.store import FileSystemStore
from imposter.capabilities import Capabilities
from imposter.errors import InvalidStateError, MissingCapabilityError, PersistError
from imposter.graphics.materials import ShaderLibrary, ShaderProgram
from imposter.instancing.persistence import PersistenceWorkflow, PersistStep
from imposter.serializer import Serializer
from imposter.settings import ShaderNames
from imposter.types import Vector3
from tests.conftest import make_atlas, make_record

LOCATION = "Assets/Imposters/Tree.asset"


@pytest.fixture
def scenario_record():
    return make_record(
        atlas_resolution=256,
        frames=4,
        is_half=False,
        radius=1.5,
        offset=Vector3(0.0, 0.75, 0.0),
    )


def test_persist_scenario(scenario_record, authoring):
    root = authoring.store.root

    result = PersistenceWorkflow(scenario_record, authoring).persist(LOCATION, "Tree")

    for logical in ("ImposterBase", "ImposterPack"):
        with Image.open(root / f"Assets/Imposters/Tree_{logical}.png") as img:
            assert img.size == (256, 256)

    material = json.loads((root / "Assets/Imposters/Tree_Imposter_Mat.json").read_text())
    assert material["shader"] == ShaderNames.STANDARD
    assert material["textures"]["_ImposterBaseTex"] == "Assets/Imposters/Tree_ImposterBase.png"
    assert material["floats"]["_ImposterFullSphere"] == 1.0

    asset = json.loads((root / LOCATION).read_text())
    mesh = asset["sub_objects"]["ImposterQuad_1.5"]
    assert mesh["bounds"] == {"center": [0.0, 0.75, 0.0], "size": [3.0, 3.0, 3.0]}
    assert result.mesh.path == LOCATION + "#ImposterQuad_1.5"

    assert result.template.name == "Tree"
    assert (root / "Assets/Imposters/Tree.prefab.json").is_file()
    assert (root / "Assets/Imposters/Tree.json").is_file()
    assert not scenario_record.dirty


def test_persist_reimports_textures(scenario_record, authoring):
    original = scenario_record.atlases.base.data

    result = PersistenceWorkflow(scenario_record, authoring).persist(LOCATION, "Tree")

    base = scenario_record.atlases.base
    assert base is result.base_texture
    assert base.path == "Assets/Imposters/Tree_ImposterBase.png"
    assert base.import_settings.max_size == 256
    assert base.import_settings.srgb is False
    assert base.aniso_level == 16
    assert np.array_equal(base.data.as_array(), original.as_array())
    assert scenario_record.material.get_texture("_ImposterBaseTex") is base


def test_persist_twice_replaces_template(record, authoring):
    workflow = PersistenceWorkflow(record, authoring)

    first = workflow.persist(LOCATION, "Tree").template
    second = workflow.persist(LOCATION, "Tree").template

    assert first.handle == second.handle
    assert authoring.store.identity("Assets/Imposters/Tree.prefab.json").revision == 2
    prefabs = list((authoring.store.root / "Assets/Imposters").glob("*.prefab.json"))
    assert len(prefabs) == 1


def test_persist_uses_prefab_suffix(authoring):
    record = make_record(prefab_suffix="LOD0")

    result = PersistenceWorkflow(record, authoring).persist(LOCATION, "Tree")

    assert result.template.name == "Tree_LOD0"
    assert (authoring.store.root / "Assets/Imposters/Tree_LOD0.prefab.json").is_file()


def test_template_blob_sidecar_round_trips(record, authoring, codec):
    PersistenceWorkflow(record, authoring).persist(LOCATION, "Tree")

    blob = authoring.store.read_bytes("Assets/Imposters/Tree.json")
    result = Serializer.deserialize(blob, codec)

    assert result.parameters == record.parameters
    assert result.base.data == record.atlases.base.data.data


def test_secondary_representation(record, authoring):
    result = PersistenceWorkflow(record, authoring).persist(
        LOCATION, "Tree", create_secondary=True
    )

    billboard = result.billboard
    assert billboard is record.billboard
    assert billboard.width == billboard.height == 1.5
    assert billboard.bottom == 0.75
    assert billboard.material.name == "Tree_BR"
    assert billboard.material.shader.name == ShaderNames.BILLBOARD
    asset = json.loads((authoring.store.root / LOCATION).read_text())
    assert "BillboardAsset" in asset["sub_objects"]
    assert (authoring.store.root / "Assets/Imposters/Tree_Imposter_BillboardMat.json").is_file()


def test_secondary_representation_is_best_effort(record, tmp_path, caplog):
    shaders = ShaderLibrary()
    shaders.register(ShaderProgram(ShaderNames.STANDARD.value))
    caps = Capabilities.authoring(tmp_path, shaders=shaders)

    result = PersistenceWorkflow(record, caps).persist(LOCATION, "Tree", create_secondary=True)

    assert result.billboard is None
    assert result.template.name == "Tree"
    assert "Skipping billboard" in caplog.text


def test_missing_shader_stops_at_material_step(record, tmp_path):
    caps = Capabilities.authoring(tmp_path, shaders=ShaderLibrary())

    with pytest.raises(MissingCapabilityError) as exc:
        PersistenceWorkflow(record, caps).persist(LOCATION, "Tree")

    assert exc.value.step == PersistStep.MATERIAL
    # no rollback: atlases from the earlier steps stay on storage
    assert (tmp_path / "Assets/Imposters/Tree_ImposterBase.png").is_file()
    assert not (tmp_path / "Assets/Imposters/Tree_Imposter_Mat.json").exists()


def test_wrong_atlas_size_stops_at_encode(authoring):
    record = make_record(atlas_resolution=16)
    record.set_atlases(make_atlas(8), make_atlas(16))

    with pytest.raises(InvalidStateError) as exc:
        PersistenceWorkflow(record, authoring).persist(LOCATION, "Tree")

    assert exc.value.step == "encode"
    assert record.asset_path is None


def test_storage_failure_is_tagged(record, tmp_path):
    blocker = tmp_path / "Assets"
    blocker.write_text("a file where a folder should be")
    caps = Capabilities.authoring(tmp_path)

    with pytest.raises(PersistError) as exc:
        PersistenceWorkflow(record, caps).persist(LOCATION, "Tree")

    assert exc.value.step == "encode"
    assert "[encode]" in str(exc.value)


def test_runtime_profile_cannot_persist(record, runtime):
    with pytest.raises(MissingCapabilityError, match="runtime"):
        PersistenceWorkflow(record, runtime).persist(LOCATION, "Tree")


def test_index_lists_persisted_artifacts(record, authoring):
    PersistenceWorkflow(record, authoring).persist(LOCATION, "Tree")

    reopened = FileSystemStore(authoring.store.root)
    assert reopened.identity("Assets/Imposters/Tree.prefab.json").kind == "template"
    assert reopened.identity("Assets/Imposters/Tree_Imposter_Mat.json").kind == "material"
    assert reopened.identity("Assets/Imposters/Tree_ImposterBase.png").kind == "texture"
    assert reopened.identity(LOCATION + "#ImposterQuad_1.5").kind == "mesh"


def test_persist_leaves_source_textures_untouched(record, authoring):
    base, pack = record.atlases.base, record.atlases.pack

    result = PersistenceWorkflow(record, authoring).persist(LOCATION, "Tree")

    assert (base.name, pack.name) == ("base", "pack")
    assert base.path is None
    assert result.base_texture is not base
    assert result.base_texture.path == "Assets/Imposters/Tree_ImposterBase.png"
