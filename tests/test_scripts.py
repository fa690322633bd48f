import os
import tempfile
import unittest

import numpy as np
from Bio import SeqIO
from Bio.Seq import Seq
from Bio.SeqRecord import SeqRecord

import dice_benchmark
import find_islands
from benchmark_utils import calculate_metrics, labels_from_symbols
from utils import read_sequence, read_sequences
from fixtures import DURBIN_DICE_FILE, gc_island_sequence


class TestUtils(unittest.TestCase):
    def test_read_sequence(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "genome.fasta")
            SeqIO.write([SeqRecord(Seq("acgtn"), id="g1", description="")], path, "fasta")
            self.assertEqual(read_sequence(path), "ACGTN")

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            read_sequence("does/not/exist.fasta")

    def test_read_durbin_records(self):
        records = read_sequences(DURBIN_DICE_FILE)
        self.assertEqual(sorted(records), ["die", "rolls"])
        self.assertEqual(len(records["rolls"]), 300)
        self.assertEqual(len(records["die"]), 300)


class TestBenchmarkUtils(unittest.TestCase):
    def test_metrics(self):
        precision, recall = calculate_metrics([0, 1, 1, 0], [0, 1, 0, 1], state=1)
        self.assertAlmostEqual(precision, 0.5)
        self.assertAlmostEqual(recall, 0.5)

    def test_metrics_without_predictions(self):
        self.assertEqual(calculate_metrics([0, 0], [1, 1], state=1), (0.0, 0.0))

    def test_labels_from_symbols(self):
        self.assertTrue(np.array_equal(labels_from_symbols("FFLF", "FL"), [0, 0, 1, 0]))


class TestScripts(unittest.TestCase):
    def test_find_islands(self):
        with tempfile.TemporaryDirectory() as tmp:
            genome = os.path.join(tmp, "genome.fasta")
            SeqIO.write([SeqRecord(Seq(gc_island_sequence()), id="toy", description="")], genome, "fasta")

            hmm, regions = find_islands.run_analysis(genome, os.path.join(tmp, "out"), rounds=2, max_hits=10,
                                                     min_length=50)
            self.assertEqual(len(hmm.history), 2)
            self.assertEqual(regions, [(600, 1000, "GC" * 200)])

            with open(os.path.join(tmp, "out", "hit_indices.tsv")) as f:
                self.assertEqual(f.read(), "600\t1000\n")
            saved = list(SeqIO.parse(os.path.join(tmp, "out", "hits.fasta"), "fasta"))
            self.assertEqual(saved[0].id, "hit_1_pos_600_1000")

    def test_dice_benchmark(self):
        with tempfile.TemporaryDirectory() as tmp:
            plot_path = os.path.join(tmp, "dice.png")
            hmm = dice_benchmark.main(DURBIN_DICE_FILE, rounds=1, plot_path=plot_path)
            self.assertEqual(len(hmm.history), 1)
            self.assertTrue(os.path.exists(plot_path))


if __name__ == "__main__":
    unittest.main()
