import json
import os
import shutil
import sys
import tempfile
import unittest

import trimesh

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from core.boolean import BooleanEngine
from core.enclosure import EnclosureSpec
from core.errors import InvalidDimension
from core.geometry import create_box_mesh
from core.io import export_meshes_to_glb, load_scene_from_json, save_scene_to_json
from core.scene import ConeParameters, rebuild

COMPACT_SPEC = EnclosureSpec(width=4.0, length=4.0, height=3.0, thickness=0.5)


class PassthroughEngine(BooleanEngine):
    name = "passthrough"

    def subtract(self, solid, tool):
        return solid


class TestSceneIO(unittest.TestCase):

    def setUp(self):
        self.tmp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmp_dir, ignore_errors=True)

    def test_json_save_and_reload(self):
        params = ConeParameters(radius=0.2, height=0.3, radial_segments=6)
        state = rebuild(COMPACT_SPEC, cone_parameters=params, engine=PassthroughEngine())
        path = save_scene_to_json(state, os.path.join(self.tmp_dir, "scene"))
        self.assertTrue(path.endswith(".json"))

        with open(path) as f:
            data = json.load(f)
        self.assertEqual(data["spec"], COMPACT_SPEC.to_dict())
        self.assertEqual(data["summary"]["cones"], len(state.cones))

        loaded = load_scene_from_json(path, engine=PassthroughEngine())
        self.assertEqual(loaded.spec, COMPACT_SPEC)
        self.assertEqual(loaded.cone_parameters, params)
        self.assertEqual(loaded.cones, state.cones)

    def test_load_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            load_scene_from_json(os.path.join(self.tmp_dir, "nope.json"))

    def test_load_without_spec(self):
        path = os.path.join(self.tmp_dir, "empty.json")
        with open(path, "w") as f:
            json.dump({"cones": {}}, f)
        with self.assertRaises(InvalidDimension):
            load_scene_from_json(path, engine=PassthroughEngine())

    def test_export_empty_list(self):
        with self.assertRaises(ValueError):
            export_meshes_to_glb([], os.path.join(self.tmp_dir, "out.glb"))

    def test_export_glb(self):
        path = export_meshes_to_glb(
            [create_box_mesh(), create_box_mesh(position=[3.0, 0.0, 0.0])],
            os.path.join(self.tmp_dir, "nested", "scene"),
        )
        self.assertTrue(path.endswith(".glb"))
        self.assertTrue(os.path.exists(path))
        reloaded = trimesh.load(path)
        self.assertEqual(len(reloaded.geometry), 2)


if __name__ == '__main__':
    unittest.main()
