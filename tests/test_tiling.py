import math
import unittest
import numpy as np

import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from core.constants import FLATTENED_CONE_HEIGHT
from core.door import door_opening
from core.enclosure import EnclosureSpec, Orientation, build_enclosure, find_segment
from core.errors import InvalidDimension
from core.geometry import euler_matrix, slant_height
from core.materials import CONE_COLOR, FLATTENED_CONE_COLOR
from core.tiling import (
    SURFACE_RULES,
    CentralRegionPolicy,
    ConeVariant,
    axis_count,
    cone_meshes,
    count_variants,
    grid_counts,
    tile_cones,
    validate_cone_size,
)

DEFAULT_SPEC = EnclosureSpec(width=25.0, length=10.0, height=5.0, thickness=0.5)
COMPACT_SPEC = EnclosureSpec(width=4.0, length=4.0, height=3.0, thickness=0.5)
RADIUS = 0.125
PITCH = slant_height(RADIUS)


def positions_array(instances):
    return np.array([c.position for c in instances], dtype=float).reshape(-1, 3)


class TestGridCounts(unittest.TestCase):

    def test_floor_columns_default(self):
        """25 wide, 0.5 thick: floor(24 / (sqrt(2) * 0.125)) = 135 columns."""
        columns, rows = grid_counts(Orientation.FLOOR, DEFAULT_SPEC, RADIUS)
        self.assertEqual(columns, 135)
        self.assertEqual(columns, math.floor((25.0 - 1.0) / PITCH))
        self.assertEqual(rows, math.floor((10.0 - 1.0) / PITCH))

    def test_wall_grid_spans_height(self):
        columns, rows = grid_counts(Orientation.FRONT, DEFAULT_SPEC, RADIUS)
        self.assertEqual(columns, 135)
        self.assertEqual(rows, math.floor((5.0 - 1.0) / PITCH))

    def test_side_wall_grid_spans_length(self):
        columns, rows = grid_counts(Orientation.LEFT, DEFAULT_SPEC, RADIUS)
        self.assertEqual(columns, math.floor((10.0 - 1.0) / PITCH))

    def test_axis_count_without_room(self):
        self.assertEqual(axis_count(1.0, 0.5, PITCH), 0)
        self.assertEqual(axis_count(1.0, 0.6, PITCH), 0)

    def test_uncut_surface_fills_grid(self):
        segments = build_enclosure(DEFAULT_SPEC)
        for segment in segments:
            with self.subTest(orientation=segment.orientation):
                columns, rows = grid_counts(segment.orientation, DEFAULT_SPEC, RADIUS)
                self.assertEqual(len(tile_cones(segment, DEFAULT_SPEC, radius=RADIUS)), columns * rows)


class TestConePlacement(unittest.TestCase):

    def test_every_orientation_has_a_rule(self):
        self.assertEqual(set(SURFACE_RULES), set(Orientation))

    def test_apex_points_into_room(self):
        """Rotating +Y by each rule's rotation gives the inward face normal."""
        for orientation, rule in SURFACE_RULES.items():
            with self.subTest(orientation=orientation):
                apex = euler_matrix(rule.rotation)[:3, :3] @ np.array([0.0, 1.0, 0.0])
                expected = np.zeros(3)
                expected[rule.normal_axis] = rule.normal_sign
                np.testing.assert_allclose(apex, expected, atol=1e-12)

    def test_floor_cones_rest_on_floor(self):
        floor = find_segment(build_enclosure(COMPACT_SPEC), Orientation.FLOOR)
        cones = tile_cones(floor, COMPACT_SPEC, radius=RADIUS, height=0.25)
        positions = positions_array(cones)
        np.testing.assert_allclose(positions[:, 1], 0.25 + 0.125)
        self.assertAlmostEqual(positions[0, 0], -2.0 + 0.5 + PITCH / 2.0)
        self.assertAlmostEqual(positions[0, 2], -2.0 + 0.5 + PITCH / 2.0)

    def test_roof_cones_hang_from_roof(self):
        roof = find_segment(build_enclosure(COMPACT_SPEC), Orientation.ROOF)
        cones = tile_cones(roof, COMPACT_SPEC, radius=RADIUS, height=0.25)
        np.testing.assert_allclose(positions_array(cones)[:, 1], 3.0 - 0.125)

    def test_wall_cones_sit_on_inner_face(self):
        segments = build_enclosure(COMPACT_SPEC)
        right = find_segment(segments, Orientation.RIGHT)
        cones = tile_cones(right, COMPACT_SPEC, radius=RADIUS, height=0.25)
        np.testing.assert_allclose(positions_array(cones)[:, 0], 1.5 - 0.125)
        front = find_segment(segments, Orientation.FRONT)
        cones = tile_cones(front, COMPACT_SPEC, radius=RADIUS, height=0.25)
        np.testing.assert_allclose(positions_array(cones)[:, 2], -1.5 + 0.125)

    def test_cones_stay_inside_usable_span(self):
        floor = find_segment(build_enclosure(DEFAULT_SPEC), Orientation.FLOOR)
        positions = positions_array(tile_cones(floor, DEFAULT_SPEC, radius=RADIUS))
        self.assertTrue(np.all(positions[:, 0] + PITCH / 2.0 <= 12.0 + 1e-9))
        self.assertTrue(np.all(positions[:, 2] + PITCH / 2.0 <= 4.5 + 1e-9))

    def test_tiling_is_deterministic(self):
        floor = find_segment(build_enclosure(DEFAULT_SPEC), Orientation.FLOOR)
        policy = CentralRegionPolicy.for_spec(DEFAULT_SPEC, PITCH)
        first = tile_cones(floor, DEFAULT_SPEC, radius=RADIUS, region_policy=policy)
        second = tile_cones(floor, DEFAULT_SPEC, radius=RADIUS, region_policy=policy)
        self.assertEqual(first, second)

    def test_invalid_cone_size(self):
        floor = find_segment(build_enclosure(COMPACT_SPEC), Orientation.FLOOR)
        with self.assertRaises(ValueError):
            tile_cones(floor, COMPACT_SPEC, radius=0.0)

    def test_too_few_radial_segments(self):
        floor = find_segment(build_enclosure(COMPACT_SPEC), Orientation.FLOOR)
        with self.assertRaises(InvalidDimension) as ctx:
            tile_cones(floor, COMPACT_SPEC, radius=RADIUS, radial_segments=2)
        self.assertEqual(ctx.exception.name, "cone_segments")

    def test_validate_cone_size(self):
        validate_cone_size(0.125, 0.25, 3)
        for radius, height, segments, name in [
            (0.0, 0.25, 4, "cone_radius"),
            (float("nan"), 0.25, 4, "cone_radius"),
            (0.125, -1.0, 4, "cone_height"),
            (0.125, 0.25, 2, "cone_segments"),
            (0.125, 0.25, 4.5, "cone_segments"),
            (0.125, 0.25, True, "cone_segments"),
        ]:
            with self.assertRaises(InvalidDimension) as ctx:
                validate_cone_size(radius, height, segments)
            self.assertEqual(ctx.exception.name, name)


class TestCentralRegionPolicy(unittest.TestCase):

    def test_quarter_from_spec(self):
        policy = CentralRegionPolicy.for_spec(
            EnclosureSpec(width=9.0, length=9.0, height=3.0, thickness=0.5), 0.5)
        self.assertAlmostEqual(policy.quarter_w, 1.0)
        self.assertAlmostEqual(policy.quarter_l, 1.0)

    def test_bounds_are_strict(self):
        """With q = 1 and pitch 0.5 the region is 3 < i * 0.5 < 5."""
        policy = CentralRegionPolicy(quarter_w=1.0, quarter_l=1.0, pitch=0.5)
        self.assertEqual(policy.variant_for(6, 8), ConeVariant.STANDARD)
        self.assertEqual(policy.variant_for(7, 8), ConeVariant.FLATTENED)
        self.assertEqual(policy.variant_for(8, 8), ConeVariant.FLATTENED)
        self.assertEqual(policy.variant_for(10, 8), ConeVariant.STANDARD)
        self.assertEqual(policy.variant_for(8, 6), ConeVariant.STANDARD)

    def test_default_floor_region(self):
        """Columns 51..84 and rows 20..31 of the default floor are flattened."""
        floor = find_segment(build_enclosure(DEFAULT_SPEC), Orientation.FLOOR)
        policy = CentralRegionPolicy.for_spec(DEFAULT_SPEC, PITCH)
        cones = tile_cones(floor, DEFAULT_SPEC, radius=RADIUS, region_policy=policy)
        flattened = [c for c in cones if c.variant == ConeVariant.FLATTENED]
        self.assertEqual(len(flattened), 34 * 12)
        self.assertEqual(min(c.cell[0] for c in flattened), 51)
        self.assertEqual(max(c.cell[0] for c in flattened), 84)
        self.assertEqual(min(c.cell[1] for c in flattened), 20)
        self.assertEqual(max(c.cell[1] for c in flattened), 31)
        for cone in flattened:
            self.assertEqual(cone.height, FLATTENED_CONE_HEIGHT)

    def test_policy_ignored_on_walls(self):
        back = find_segment(build_enclosure(DEFAULT_SPEC), Orientation.BACK)
        policy = CentralRegionPolicy.for_spec(DEFAULT_SPEC, PITCH)
        cones = tile_cones(back, DEFAULT_SPEC, radius=RADIUS, region_policy=policy)
        self.assertEqual(count_variants(cones)["Flattened"], 0)


class TestDoorExclusion(unittest.TestCase):

    def test_cut_front_wall_skips_door_cells(self):
        front = find_segment(build_enclosure(COMPACT_SPEC), Orientation.FRONT)
        full = tile_cones(front, COMPACT_SPEC, radius=RADIUS)
        cut_front = front.with_mesh(front.mesh, has_cutout=True)
        cut = tile_cones(cut_front, COMPACT_SPEC, radius=RADIUS)
        self.assertLess(len(cut), len(full))

        (x_min, x_max), (y_min, y_max) = door_opening(cut_front)
        half = PITCH / 2.0
        for cone in cut:
            x, y, _ = cone.position
            overlaps = (x - half < x_max and x + half > x_min
                        and y - half < y_max and y + half > y_min)
            self.assertFalse(overlaps, cone.cell)


class TestConeMeshes(unittest.TestCase):

    def test_batches_by_variant(self):
        floor = find_segment(build_enclosure(DEFAULT_SPEC), Orientation.FLOOR)
        policy = CentralRegionPolicy.for_spec(DEFAULT_SPEC, PITCH)
        cones = tile_cones(floor, DEFAULT_SPEC, radius=RADIUS, region_policy=policy)
        batches = cone_meshes(cones)
        self.assertEqual([variant for variant, _ in batches],
                         [ConeVariant.STANDARD, ConeVariant.FLATTENED])
        standard, flattened = (mesh for _, mesh in batches)
        self.assertEqual(tuple(standard.visual.face_colors[0]), CONE_COLOR)
        self.assertEqual(tuple(flattened.visual.face_colors[0]), FLATTENED_CONE_COLOR)
        # 4-segment cone: four ring vertices plus the apex and base center
        counts = count_variants(cones)
        self.assertEqual(len(standard.vertices), counts["Standard"] * 6)

    def test_no_instances(self):
        self.assertEqual(cone_meshes([]), [])


if __name__ == '__main__':
    unittest.main()
