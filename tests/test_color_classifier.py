import unittest

from colortrack.color_classifier import (
    _refine_dark,
    _refine_desaturated,
    calculate_confidence,
    classify,
    convert_to_gray,
    relative_luminance,
    rgb_to_hsv,
    simplify,
    validate_rgb,
)
from colortrack.data_types import ClassifyMode, ColorCategory as C
from colortrack.errors import InvalidSample
from tests.utils import ORANGE_RGB


class TestClassify(unittest.TestCase):
    def test_pure_red(self):
        result = classify((255, 0, 0))
        self.assertEqual(result.category, C.RED)
        self.assertEqual(result.detailed, C.PURE_RED)
        self.assertGreaterEqual(result.confidence, 0.8)
        self.assertLess(result.confidence, 1.0)

    def test_default_target_is_orange(self):
        result = classify(ORANGE_RGB)
        self.assertEqual(result.category, C.ORANGE)
        self.assertFalse(result.is_dark)
        self.assertFalse(result.is_desaturated)

    def test_black_in_both_modes(self):
        self.assertEqual(classify((0, 0, 0)).category, C.BLACK)
        self.assertEqual(classify((0, 0, 0), ClassifyMode.GRAY).category, C.BLACK)
        self.assertEqual(classify((0, 0, 0)).confidence, 0.98)

    def test_every_neutral_gray_follows_luminance(self):
        """Each (v, v, v) lands in the band its luminance and brightness pick."""
        for v in range(256):
            lum = relative_luminance(v, v, v)
            if lum < 0.02 or v < 15:
                expected = C.BLACK
            elif lum > 0.95 or v > 245:
                expected = C.WHITE
            else:
                expected = C.GRAY
            with self.subTest(v=v):
                self.assertEqual(classify((v, v, v)).category, expected)

    def test_gray_bands_follow_luminance_table(self):
        bands = [(0.15, C.VERY_DARK_GRAY), (0.30, C.DARK_GRAY), (0.50, C.MEDIUM_DARK_GRAY),
                 (0.65, C.MEDIUM_GRAY), (0.80, C.LIGHT_GRAY), (0.95, C.VERY_LIGHT_GRAY)]
        for v in range(15, 246):
            lum = relative_luminance(v, v, v)
            if lum < 0.02 or lum > 0.95:
                continue
            expected = next(band for limit, band in bands if lum < limit)
            with self.subTest(v=v):
                self.assertEqual(classify((v, v, v)).detailed, expected)

    def test_gray_mode_only_yields_bands(self):
        bands = {C.BLACK, C.DARK_GRAY, C.MEDIUM_GRAY, C.LIGHT_GRAY, C.WHITE}
        for rgb in [(255, 0, 0), ORANGE_RGB, (0, 0, 255), (40, 40, 40), (250, 250, 250)]:
            with self.subTest(rgb=rgb):
                self.assertIn(classify(rgb, "GRAY").category, bands)

    def test_chromatic_in_gray_mode_uses_luminance(self):
        result = classify(ORANGE_RGB, ClassifyMode.GRAY)
        self.assertEqual(result.category, C.MEDIUM_GRAY)
        self.assertEqual(result.confidence, 0.70)

    def test_unknown_mode_is_color(self):
        self.assertEqual(classify((255, 0, 0), "sepia").category, C.RED)

    def test_slightly_desaturated_is_muted(self):
        result = classify((200, 180, 175))
        self.assertTrue(result.is_desaturated)
        self.assertEqual(result.detailed, C.MUTED_RED)
        self.assertEqual(result.category, C.GRAY)

    def test_primary_hues(self):
        cases = {
            (0, 200, 0): C.GREEN,
            (0, 0, 255): C.BLUE,
            (0, 200, 200): C.CYAN,
            (240, 230, 20): C.YELLOW,
            (150, 40, 200): C.PURPLE,
        }
        for rgb, expected in cases.items():
            with self.subTest(rgb=rgb):
                self.assertEqual(classify(rgb).category, expected)

    def test_metrics_are_reported(self):
        metrics = classify((255, 0, 0)).metrics
        self.assertAlmostEqual(metrics.hsv[0], 0.0)
        self.assertAlmostEqual(metrics.luminance, 0.2126, places=4)
        self.assertAlmostEqual(metrics.chromaticness, 1.0)


class TestDetailedNames(unittest.TestCase):
    def test_one_sample_per_sector_rule(self):
        cases = [
            # red 0-15
            ((255, 0, 0), C.PURE_RED, C.RED),
            ((120, 10, 0), C.DARK_RED, C.RED),
            # orange 15-40
            ((230, 140, 100), C.RED_ORANGE, C.ORANGE),
            ((224, 138, 9), C.ORANGE, C.ORANGE),
            ((255, 128, 0), C.BRIGHT_ORANGE, C.ORANGE),
            ((180, 60, 0), C.DARK_ORANGE, C.ORANGE),
            ((100, 75, 40), C.BROWN, C.ORANGE),
            # yellow 40-70
            ((240, 215, 20), C.YELLOW_ORANGE, C.YELLOW),
            ((240, 230, 20), C.YELLOW, C.YELLOW),
            ((150, 150, 30), C.DARK_YELLOW, C.YELLOW),
            ((100, 100, 40), C.OLIVE, C.YELLOW),
            # green 70-150
            ((160, 200, 40), C.YELLOW_GREEN, C.GREEN),
            ((0, 200, 0), C.PURE_GREEN, C.GREEN),
            ((120, 200, 140), C.GREEN, C.GREEN),
            ((0, 90, 0), C.DARK_GREEN, C.GREEN),
            # cyan 150-200
            ((0, 200, 160), C.CYAN_GREEN, C.GREEN),
            ((0, 200, 200), C.CYAN, C.CYAN),
            ((0, 170, 200), C.TEAL, C.CYAN),
            ((0, 130, 130), C.DARK_CYAN, C.CYAN),
            # blue 200-260
            ((40, 170, 240), C.CYAN_BLUE, C.CYAN),
            ((100, 100, 200), C.BLUE, C.BLUE),
            ((100, 100, 255), C.PURE_BLUE, C.BLUE),
            ((0, 0, 255), C.NAVY, C.BLUE),
            ((140, 100, 250), C.BLUE_PURPLE, C.BLUE),
            # purple 260-310
            ((180, 100, 255), C.VIOLET, C.PURPLE),
            ((200, 80, 255), C.PURPLE, C.PURPLE),
            ((250, 100, 255), C.RED_PURPLE, C.PURPLE),
            ((150, 40, 200), C.DARK_PURPLE, C.PURPLE),
            # magenta 310-330
            ((255, 0, 200), C.MAGENTA, C.PURPLE),
            ((120, 0, 90), C.DARK_MAGENTA, C.PURPLE),
            # pink-red 330-360
            ((255, 200, 220), C.LIGHT_PINK, C.PURPLE),
            ((255, 170, 200), C.PINK, C.PURPLE),
            ((255, 20, 120), C.HOT_PINK, C.PURPLE),
        ]
        for rgb, detailed, category in cases:
            with self.subTest(rgb=rgb):
                result = classify(rgb)
                self.assertEqual(result.detailed, detailed)
                self.assertEqual(result.category, category)


class TestRefinements(unittest.TestCase):
    def test_dark_refinement(self):
        cases = [
            # orange sector gives BROWN, low saturation pulls it to gray
            ((90, 80, 70), C.VERY_DARK_GRAY, C.GRAY),
            # ORANGE below 0.15 luminance
            ((180, 50, 0), C.BROWN, C.ORANGE),
        ]
        for rgb, detailed, category in cases:
            with self.subTest(rgb=rgb):
                result = classify(rgb)
                self.assertTrue(result.is_dark)
                self.assertEqual(result.detailed, detailed)
                self.assertEqual(result.category, category)

    def test_dark_yellows(self):
        hsv = (55.0, 0.8, 0.24)
        self.assertEqual(_refine_dark(C.YELLOW, 60, 55, 10, hsv, 0.12), C.BROWN)
        self.assertEqual(_refine_dark(C.DARK_YELLOW, 60, 55, 10, hsv, 0.12), C.BROWN)
        hsv = (55.0, 0.4, 0.24)
        self.assertEqual(_refine_dark(C.YELLOW, 60, 55, 36, hsv, 0.12), C.OLIVE)
        self.assertEqual(_refine_dark(C.YELLOW, 10, 9, 8, hsv, 0.02), C.BLACK)

    def test_barely_saturated_falls_to_gray_band(self):
        cases = [
            ((230, 220, 210), C.LIGHT_GRAY),
            ((175, 165, 158), C.MEDIUM_GRAY),
        ]
        for rgb, detailed in cases:
            with self.subTest(rgb=rgb):
                result = classify(rgb)
                self.assertTrue(result.is_desaturated)
                self.assertEqual(result.detailed, detailed)
                self.assertEqual(result.category, C.GRAY)

    def test_desaturated_gray_bands_by_luminance(self):
        self.assertEqual(_refine_desaturated(C.RED, (0.0, 0.05, 0.2), 0.1), C.DARK_GRAY)
        self.assertEqual(_refine_desaturated(C.RED, (0.0, 0.05, 0.9), 0.8), C.VERY_LIGHT_GRAY)
        self.assertEqual(_refine_desaturated(C.TEAL, (0.0, 0.12, 0.5), 0.3), C.MUTED_CYAN)
        self.assertEqual(_refine_desaturated(C.WHITE, (0.0, 0.12, 0.5), 0.3), C.MEDIUM_GRAY)


class TestConfidence(unittest.TestCase):
    def test_bonuses(self):
        cases = [
            ((200, 100, 100), 0.65),   # base + saturation only
            ((200, 150, 150), 0.575),  # hue 0, no bonus
            ((200, 150, 100), 0.75),   # hue 30, +0.1
            ((200, 100, 90), 0.815),   # max/(min+1) > 2, +0.15
            ((255, 128, 0), 0.99),     # capped
        ]
        for rgb, expected in cases:
            with self.subTest(rgb=rgb):
                self.assertAlmostEqual(calculate_confidence(*rgb, rgb_to_hsv(*rgb)), expected, places=6)

    def test_classify_reports_confidence(self):
        self.assertAlmostEqual(classify((200, 150, 150)).confidence, 0.575, places=6)
        self.assertAlmostEqual(classify((255, 0, 0)).confidence, 0.95, places=6)


class TestValidation(unittest.TestCase):
    def test_rejects_bad_samples(self):
        for bad in [(1, 2), (1, 2, 3, 4), (256, 0, 0), (-1, 0, 0), (1.5, 0, 0), (True, 0, 0), None]:
            with self.subTest(bad=bad):
                with self.assertRaises(InvalidSample):
                    validate_rgb(bad)

    def test_invalid_sample_is_value_error(self):
        with self.assertRaises(ValueError):
            classify((300, 0, 0))


class TestHelpers(unittest.TestCase):
    def test_hsv_degrees(self):
        h, s, v = rgb_to_hsv(0, 0, 255)
        self.assertAlmostEqual(h, 240.0)
        self.assertAlmostEqual(s, 1.0)
        self.assertAlmostEqual(v, 1.0)

    def test_simplify_defaults(self):
        self.assertEqual(simplify(C.HOT_PINK), C.PURPLE)
        self.assertEqual(simplify(C.VERY_DARK_GRAY, ClassifyMode.GRAY), C.DARK_GRAY)
        self.assertEqual(simplify(C.ORANGE, ClassifyMode.GRAY), C.MEDIUM_GRAY)

    def test_convert_to_gray_bands(self):
        self.assertEqual(convert_to_gray(0.01), C.BLACK)
        self.assertEqual(convert_to_gray(0.1), C.DARK_GRAY)
        self.assertEqual(convert_to_gray(0.3), C.MEDIUM_GRAY)
        self.assertEqual(convert_to_gray(0.9), C.LIGHT_GRAY)
        self.assertEqual(convert_to_gray(0.99), C.WHITE)


if __name__ == "__main__":
    unittest.main()
