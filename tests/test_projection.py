from __future__ import annotations

import math
import unittest

import numpy as np

from surfchart.errors import DegenerateBoundsError
from surfchart.projection import Camera, DataBounds, Projector, Viewport, configure


BOUNDS = DataBounds(x=(-3.0, 3.0), y=(-1.0, 1.0), z=(-3.0, 3.0))


class ProjectionTests(unittest.TestCase):
    def test_bounds_center_maps_to_viewport_center(self) -> None:
        viewport = Viewport(10, 20, 101, 81)
        for camera in (Camera(), Camera(yaw=1.2, pitch=-0.4, scale=0.5), Camera(yaw=0.0, pitch=0.0)):
            matrix = configure(camera, BOUNDS, viewport)
            px, py = matrix.project(BOUNDS.center())
            self.assertAlmostEqual(px, 60.0)
            self.assertAlmostEqual(py, 60.0)

    def test_unit_scale_keeps_every_corner_inside_viewport(self) -> None:
        viewport = Viewport(0, 0, 100, 100)
        for yaw in np.linspace(-math.pi, math.pi, 9):
            for pitch in (-1.0, 0.0, 0.15, 0.8):
                matrix = configure(Camera(yaw=float(yaw), pitch=pitch), BOUNDS, viewport)
                screen = matrix.project_many(np.asarray(BOUNDS.corners()))
                self.assertTrue(np.all(screen >= -0.5 - 1e-9))
                self.assertTrue(np.all(screen <= 99.5 + 1e-9))

    def test_axis_directions_without_rotation(self) -> None:
        matrix = configure(Camera(yaw=0.0, pitch=0.0), BOUNDS, Viewport(0, 0, 100, 100))
        cx, cy = matrix.project(BOUNDS.center())
        self.assertGreater(matrix.project((3.0, 0.0, 0.0))[0], cx)
        self.assertLess(matrix.project((0.0, 1.0, 0.0))[1], cy)
        self.assertGreater(matrix.depth((0.0, 0.0, 3.0)), matrix.depth((0.0, 0.0, -3.0)))

    def test_positive_pitch_looks_down(self) -> None:
        matrix = configure(Camera(yaw=0.0, pitch=0.5), BOUNDS, Viewport(0, 0, 100, 100))
        far = matrix.project((0.0, 0.0, 3.0))
        near = matrix.project((0.0, 0.0, -3.0))
        self.assertLess(far[1], near[1])
        self.assertLess(matrix.depth((0.0, 1.0, 0.0)), matrix.depth((0.0, -1.0, 0.0)))

    def test_batch_and_single_projection_agree(self) -> None:
        matrix = configure(Camera(), BOUNDS, Viewport(0, 0, 320, 240))
        pts = np.asarray([[1.0, 0.5, -2.0], [-2.5, -0.25, 0.75]])
        batch = matrix.project_many(pts)
        for p, expected in zip(pts, batch, strict=True):
            px, py = matrix.project(tuple(p))
            self.assertAlmostEqual(px, float(expected[0]))
            self.assertAlmostEqual(py, float(expected[1]))
        np.testing.assert_allclose(matrix.depth_many(pts), [matrix.depth(tuple(p)) for p in pts])

    def test_zero_extent_axis_rejected(self) -> None:
        flat = DataBounds(x=(-3.0, 3.0), y=(0.5, 0.5), z=(-3.0, 3.0))
        with self.assertRaises(DegenerateBoundsError):
            configure(Camera(), flat, Viewport(0, 0, 100, 100))
        with self.assertRaises(DegenerateBoundsError):
            configure(Camera(), DataBounds(x=(0.0, math.nan), y=(0.0, 1.0), z=(0.0, 1.0)), Viewport(0, 0, 10, 10))

    def test_matrix_arrays_are_read_only(self) -> None:
        matrix = configure(Camera(), BOUNDS, Viewport(0, 0, 100, 100))
        with self.assertRaises(ValueError):
            matrix.linear[0, 0] = 1.0
        with self.assertRaises(ValueError):
            matrix.offset[0] = 1.0

    def test_projector_requires_configuration(self) -> None:
        projector = Projector()
        with self.assertRaises(RuntimeError):
            projector.project((0.0, 0.0, 0.0))
        first = projector.configure(Camera(), BOUNDS, Viewport(0, 0, 100, 100))
        second = projector.configure(Camera(yaw=1.0), BOUNDS, Viewport(0, 0, 100, 100))
        self.assertIsNot(first, second)
        self.assertIs(projector.matrix, second)

    def test_camera_and_viewport_validation(self) -> None:
        with self.assertRaises(ValueError):
            Camera(scale=0.0)
        with self.assertRaises(ValueError):
            Camera(yaw=math.inf)
        with self.assertRaises(ValueError):
            Viewport(0, 0, 0, 10)


class DataBoundsTests(unittest.TestCase):
    def test_enclosing_ignores_non_finite_rows(self) -> None:
        pts = np.asarray([[0.0, 1.0, 2.0], [np.nan, 5.0, 5.0], [-1.0, -2.0, 4.0]])
        bounds = DataBounds.enclosing(pts)
        self.assertEqual(bounds, DataBounds(x=(-1.0, 0.0), y=(-2.0, 1.0), z=(2.0, 4.0)))

    def test_enclosing_without_finite_points_is_degenerate(self) -> None:
        with self.assertRaises(DegenerateBoundsError):
            DataBounds.enclosing(np.full((2, 3), np.nan))

    def test_union_and_corners(self) -> None:
        a = DataBounds(x=(0.0, 1.0), y=(0.0, 1.0), z=(0.0, 1.0))
        b = DataBounds(x=(-1.0, 0.5), y=(0.5, 2.0), z=(0.0, 1.0))
        self.assertEqual(a.union(b), DataBounds(x=(-1.0, 1.0), y=(0.0, 2.0), z=(0.0, 1.0)))
        self.assertEqual(len(a.corners()), 8)


if __name__ == "__main__":
    unittest.main()
