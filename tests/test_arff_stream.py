"""Unit tests for the ARFF to river stream reader."""

import os
import tempfile
import unittest

from arff_stream import arff_nominal_attributes, arff_to_river_stream

WEATHER_ARFF = """@RELATION weather

@ATTRIBUTE temperature NUMERIC
@ATTRIBUTE outlook {sunny,rainy}
@ATTRIBUTE class {yes,no}

@DATA
1.5,sunny,yes
?,rainy,no
2.0,sunny,?
3.0,rainy,yes
"""


class TestArffStream(unittest.TestCase):

    def setUp(self):
        self.tmp_dir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp_dir.name, "weather.arff")
        with open(self.path, "w", encoding="utf-8") as f:
            f.write(WEATHER_ARFF)

    def tearDown(self):
        self.tmp_dir.cleanup()

    def test_rows_become_river_pairs(self):
        rows = list(arff_to_river_stream(self.path))
        self.assertEqual(rows[0], ({"temperature": 1.5, "outlook": "sunny"}, "yes"))
        self.assertEqual(rows[1], ({"temperature": None, "outlook": "rainy"}, "no"))

    def test_missing_target_rows_are_skipped(self):
        rows = list(arff_to_river_stream(self.path))
        self.assertEqual(len(rows), 3)
        self.assertEqual(rows[-1][1], "yes")

    def test_target_by_name(self):
        x, y = next(iter(arff_to_river_stream(self.path, target="outlook")))
        self.assertEqual(y, "sunny")
        self.assertEqual(set(x), {"temperature", "class"})

    def test_nominal_attributes(self):
        self.assertEqual(arff_nominal_attributes(self.path), ["outlook"])

    def test_invalid_task(self):
        with self.assertRaises(ValueError):
            list(arff_to_river_stream(self.path, task="clustering"))

    def test_invalid_target(self):
        with self.assertRaises(ValueError):
            list(arff_to_river_stream(self.path, target="humidity"))
        with self.assertRaises(ValueError):
            list(arff_to_river_stream(self.path, target=10))

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            list(arff_to_river_stream(os.path.join(self.tmp_dir.name, "nope.arff")))


if __name__ == "__main__":
    unittest.main()
