from __future__ import annotations

import unittest

import numpy as np

from surfchart.errors import DegenerateBoundsError
from surfchart.scales import (
    AxisRange,
    format_tick,
    format_ticks_for_axis,
    generate_nice_ticks,
    sample_axis,
    ticks_within_range,
)


class AxisRangeTests(unittest.TestCase):
    def test_sixty_samples_for_unit_tenth_step(self) -> None:
        axis = AxisRange(-3.0, 3.0, 0.1)
        samples = sample_axis(axis)
        self.assertEqual(axis.sample_count(), 60)
        self.assertEqual(samples.size, 60)
        self.assertAlmostEqual(float(samples[0]), -3.0)
        self.assertAlmostEqual(float(samples[-1]), 2.9)
        self.assertTrue(np.all(samples < 3.0))

    def test_samples_match_integer_generator(self) -> None:
        expected = np.asarray([f / 10.0 for f in range(-30, 30)])
        np.testing.assert_allclose(AxisRange(-3.0, 3.0, 0.1).samples(), expected, atol=1e-12)

    def test_sample_count_is_ceiling_of_span_over_step(self) -> None:
        self.assertEqual(AxisRange(0.0, 0.3, 0.1).sample_count(), 3)
        self.assertEqual(AxisRange(0.0, 1.0000000001, 1.0).sample_count(), 2)
        self.assertEqual(AxisRange(0.0, 1.0, 0.3).sample_count(), 4)
        self.assertEqual(AxisRange(0.0, 0.5, 1.0).sample_count(), 1)

    def test_zero_extent_is_degenerate(self) -> None:
        with self.assertRaises(DegenerateBoundsError):
            AxisRange(1.0, 1.0, 0.1)

    def test_inverted_range_and_bad_step_rejected(self) -> None:
        with self.assertRaises(ValueError):
            AxisRange(2.0, 1.0)
        with self.assertRaises(ValueError):
            AxisRange(0.0, 1.0, 0.0)
        with self.assertRaises(ValueError):
            AxisRange(0.0, float("inf"))

    def test_sample_count_requires_step(self) -> None:
        with self.assertRaises(ValueError):
            AxisRange(0.0, 1.0).sample_count()
        self.assertEqual(AxisRange(0.0, 1.0).as_limits(), (0.0, 1.0))


class TickTests(unittest.TestCase):
    def test_nice_ticks_cover_range(self) -> None:
        ticks = generate_nice_ticks(0.0, 10.0, 5)
        np.testing.assert_allclose(ticks, [0.0, 2.0, 4.0, 6.0, 8.0, 10.0])

    def test_nice_ticks_normalize_negative_zero(self) -> None:
        ticks = generate_nice_ticks(-0.3, 0.3, 5)
        self.assertIn(0.0, ticks.tolist())
        self.assertFalse(any(np.signbit(t) and t == 0.0 for t in ticks))

    def test_ticks_within_range_drops_outside_values(self) -> None:
        ticks = np.asarray([-1.0, 0.0, 1.0, 2.0, 3.0])
        np.testing.assert_allclose(ticks_within_range(ticks, vmin=0.0, vmax=2.0), [0.0, 1.0, 2.0])

    def test_tick_labels_trim_trailing_zeros(self) -> None:
        labels = format_ticks_for_axis(np.asarray([0.0, 0.5, 1.0, 1.5]))
        self.assertEqual(labels, ["0", "0.5", "1", "1.5"])
        self.assertEqual(format_ticks_for_axis(np.asarray([30.0, 40.0])), ["30", "40"])

    def test_tick_format_uses_scientific_for_extremes(self) -> None:
        self.assertIn("e", format_tick(2.5e7))
        self.assertEqual(format_tick(-1e-12, step=0.1), "0")


if __name__ == "__main__":
    unittest.main()
