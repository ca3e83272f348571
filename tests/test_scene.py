import math
import unittest
import numpy as np

import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from core.boolean import BooleanEngine
from core.enclosure import EnclosureSpec, Orientation
from core.errors import CSGFailure, DoorDoesNotFit, InvalidDimension
from core.scene import (
    ConeParameters,
    SceneSession,
    dispose,
    label_anchor,
    model_anchor,
    rebuild,
    scene_bounds,
)
from core.tiling import grid_counts

DEFAULT_SPEC = EnclosureSpec(width=25.0, length=10.0, height=5.0, thickness=0.5)
COMPACT_SPEC = EnclosureSpec(width=4.0, length=4.0, height=3.0, thickness=0.5)


class PassthroughEngine(BooleanEngine):
    name = "passthrough"

    def subtract(self, solid, tool):
        return solid


class FailingEngine(BooleanEngine):
    name = "failing"

    def subtract(self, solid, tool):
        raise CSGFailure("backend exploded")


class TestRebuild(unittest.TestCase):
    """Tests for the full scene rebuild sequence."""

    def test_rebuild_produces_full_scene(self):
        state = rebuild(COMPACT_SPEC, engine=PassthroughEngine())
        self.assertEqual(len(state.segments), 6)
        self.assertTrue(state.segment(Orientation.FRONT).has_cutout)
        self.assertIsNotNone(state.floor)
        self.assertGreater(len(state.cones), 0)
        self.assertEqual(state.warnings, [])
        self.assertFalse(state.disposed)

    def test_every_surface_is_tiled(self):
        state = rebuild(COMPACT_SPEC, engine=PassthroughEngine())
        for orientation in Orientation:
            with self.subTest(orientation=orientation):
                self.assertGreater(len(state.cones_on(orientation)), 0)

    def test_front_wall_skips_door_cells(self):
        state = rebuild(COMPACT_SPEC, engine=PassthroughEngine())
        columns, rows = grid_counts(Orientation.FRONT, COMPACT_SPEC)
        self.assertLess(len(state.cones_on(Orientation.FRONT)), columns * rows)
        columns, rows = grid_counts(Orientation.BACK, COMPACT_SPEC)
        self.assertEqual(len(state.cones_on(Orientation.BACK)), columns * rows)

    def test_csg_failure_keeps_uncut_wall(self):
        """A failed door cut records a warning and the rest of the scene is built."""
        state = rebuild(COMPACT_SPEC, engine=FailingEngine())
        front = state.segment(Orientation.FRONT)
        self.assertFalse(front.has_cutout)
        self.assertAlmostEqual(front.volume, 4.0 * 3.0 * 0.5)
        self.assertEqual(len(state.warnings), 1)
        self.assertIn("Door cut failed", state.warnings[0])
        self.assertEqual(len(state.segments), 6)
        columns, rows = grid_counts(Orientation.FRONT, COMPACT_SPEC)
        self.assertEqual(len(state.cones_on(Orientation.FRONT)), columns * rows)

    def test_door_does_not_fit_propagates(self):
        with self.assertRaises(DoorDoesNotFit):
            rebuild(EnclosureSpec(width=2.0, length=4.0, height=3.0, thickness=0.5),
                    engine=PassthroughEngine())

    def test_invalid_spec_propagates(self):
        with self.assertRaises(InvalidDimension):
            rebuild(EnclosureSpec(width=4.0, length=4.0, height=math.nan, thickness=0.5),
                    engine=PassthroughEngine())

    def test_invalid_cone_parameters_rejected_before_build(self):
        for params in (ConeParameters(radial_segments=2), ConeParameters(radius=0.0),
                       ConeParameters(height=-0.5)):
            with self.assertRaises(InvalidDimension):
                rebuild(COMPACT_SPEC, cone_parameters=params, engine=PassthroughEngine())

    def test_rebuild_is_idempotent(self):
        first = rebuild(COMPACT_SPEC, engine=PassthroughEngine())
        second = rebuild(COMPACT_SPEC, engine=PassthroughEngine())
        self.assertEqual(first.segments, second.segments)
        self.assertEqual(first.cones, second.cones)
        self.assertEqual(first.floor, second.floor)

    def test_cones_disabled(self):
        params = ConeParameters(enabled=False)
        state = rebuild(COMPACT_SPEC, cone_parameters=params, engine=PassthroughEngine())
        self.assertEqual(state.cones, ())
        self.assertEqual(state.cone_meshes(), [])

    def test_get_all_meshes(self):
        state = rebuild(COMPACT_SPEC, engine=PassthroughEngine())
        meshes = state.get_all_meshes()
        # Six segments, standard and flattened batches per orientation, floor plane
        self.assertGreaterEqual(len(meshes), 6 + 6 + 1)
        self.assertEqual(len(state.get_all_meshes(include_floor=False)), len(meshes) - 1)

    def test_summary_and_to_dict(self):
        state = rebuild(COMPACT_SPEC, engine=PassthroughEngine())
        summary = state.summary()
        self.assertEqual(summary["segments"], 6)
        self.assertEqual(summary["cones"], len(state.cones))
        self.assertTrue(summary["front_wall_cut"])
        data = state.to_dict()
        self.assertEqual(data["spec"], COMPACT_SPEC.to_dict())
        self.assertEqual(len(data["segments"]), 6)

    def test_scene_bounds(self):
        state = rebuild(DEFAULT_SPEC, cone_parameters=ConeParameters(enabled=False),
                        engine=PassthroughEngine())
        low, high = scene_bounds(state)
        np.testing.assert_allclose(low, [-12.5, -0.25, -5.0])
        np.testing.assert_allclose(high, [12.5, 5.5, 5.0])


class TestAnchors(unittest.TestCase):

    def test_model_anchor(self):
        anchor = model_anchor(DEFAULT_SPEC)
        np.testing.assert_allclose(anchor.position, (11.875, 5.0, 4.375))
        self.assertEqual(anchor.rotation_hints(), {"x": math.pi, "y": -math.pi / 4})

    def test_label_anchor(self):
        anchor = label_anchor(DEFAULT_SPEC)
        np.testing.assert_allclose(anchor.position, (12.0, 5.0, -5.0))
        self.assertEqual(anchor.rotation_hints(), {"y": math.pi})


class TestDispose(unittest.TestCase):

    def test_dispose_releases_everything(self):
        state = rebuild(COMPACT_SPEC, engine=PassthroughEngine())
        state.cone_meshes()
        dispose(state)
        self.assertTrue(state.disposed)
        self.assertEqual(state.segments, ())
        self.assertEqual(state.cones, ())
        self.assertIsNone(state.floor)
        self.assertEqual(state.get_all_meshes(), [])

    def test_dispose_twice_is_noop(self):
        state = rebuild(COMPACT_SPEC, engine=PassthroughEngine())
        dispose(state)
        dispose(state)
        dispose(None)
        self.assertTrue(state.disposed)


class TestSceneSession(unittest.TestCase):

    def setUp(self):
        self.session = SceneSession(engine=PassthroughEngine())

    def test_rebuild_disposes_previous_state(self):
        first = self.session.rebuild(COMPACT_SPEC)
        second = self.session.rebuild(COMPACT_SPEC)
        self.assertTrue(first.disposed)
        self.assertFalse(second.disposed)
        self.assertIs(self.session.state, second)

    def test_rejected_spec_keeps_current_state(self):
        current = self.session.rebuild(COMPACT_SPEC)
        with self.assertRaises(DoorDoesNotFit):
            self.session.rebuild(EnclosureSpec(width=2.0, length=4.0, height=3.0, thickness=0.5))
        with self.assertRaises(InvalidDimension):
            self.session.rebuild(EnclosureSpec(width=-4.0, length=4.0, height=3.0, thickness=0.5))
        self.assertIs(self.session.state, current)
        self.assertFalse(current.disposed)

    def test_rejected_cone_parameters_keep_current_state(self):
        current = self.session.rebuild(COMPACT_SPEC)
        self.session.cone_parameters = ConeParameters(radial_segments=2)
        with self.assertRaises(InvalidDimension):
            self.session.rebuild(COMPACT_SPEC)
        self.assertIs(self.session.state, current)
        self.assertFalse(current.disposed)

    def test_adopt(self):
        first = self.session.rebuild(COMPACT_SPEC)
        built_elsewhere = rebuild(COMPACT_SPEC, engine=PassthroughEngine())
        self.assertIs(self.session.adopt(built_elsewhere), built_elsewhere)
        self.assertTrue(first.disposed)
        self.session.adopt(built_elsewhere)
        self.assertFalse(built_elsewhere.disposed)

    def test_clear(self):
        state = self.session.rebuild(COMPACT_SPEC)
        self.session.clear()
        self.assertIsNone(self.session.state)
        self.assertTrue(state.disposed)
        self.assertEqual(self.session.get_all_meshes(), [])


if __name__ == '__main__':
    unittest.main()
