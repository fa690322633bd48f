import unittest

import numpy as np

from hit_utils import count_hits, extract_hits, hit_sequences


class TestHits(unittest.TestCase):
    def test_all_background(self):
        path = np.zeros(10, dtype=np.int64)
        self.assertEqual(extract_hits(path), [])
        self.assertEqual(count_hits(path), 0)

    def test_entire_path_is_one_hit(self):
        path = np.ones(7, dtype=np.int64)
        self.assertEqual(extract_hits(path), [(0, 7)])
        self.assertEqual(count_hits(path), 1)

    def test_runs(self):
        path = [0, 1, 1, 0, 2, 2, 2, 0, 1]
        self.assertEqual(extract_hits(path), [(1, 3), (4, 7), (8, 9)])
        self.assertEqual(count_hits(path), 3)

    def test_adjacent_non_background_states_form_one_hit(self):
        path = [0, 1, 2, 1, 0]
        self.assertEqual(extract_hits(path), [(1, 4)])
        self.assertEqual(count_hits(path), 1)

    def test_min_length_discards_short_hits(self):
        path = [0, 1, 1, 0, 2, 2, 2, 0, 1]
        self.assertEqual(extract_hits(path, min_length=2), [(1, 3), (4, 7)])
        self.assertEqual(extract_hits(path, min_length=3), [(4, 7)])
        # Counting ignores the length filter.
        self.assertEqual(count_hits(path), 3)

    def test_max_hits_stops_early(self):
        path = [1, 0, 1, 0, 1, 1, 0, 1, 1]
        self.assertEqual(extract_hits(path, max_hits=2), [(0, 1), (2, 3)])
        self.assertEqual(extract_hits(path, max_hits=1, min_length=2), [(4, 6)])
        self.assertEqual(extract_hits(path, max_hits=0), [(0, 1), (2, 3), (4, 6), (7, 9)])

    def test_other_background_state(self):
        path = [1, 1, 0, 0, 1]
        self.assertEqual(extract_hits(path, background=1), [(2, 4)])
        self.assertEqual(count_hits(path, background=1), 1)

    def test_count_matches_extract(self):
        rng = np.random.default_rng(0)
        path = rng.integers(0, 3, size=500)
        self.assertEqual(count_hits(path), len(extract_hits(path, max_hits=0, min_length=0)))

    def test_hit_sequences(self):
        self.assertEqual(hit_sequences("AACGCA", [(2, 5)]), [(2, 5, "CGC")])


if __name__ == "__main__":
    unittest.main()
