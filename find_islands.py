import argparse
import os

from Bio import SeqIO
from Bio.Seq import Seq
from Bio.SeqRecord import SeqRecord
from tqdm import tqdm

from HMM import HMM, HMMParameters
from hmm_utils import get_gc_content_parameters, nucleotide_emission_index
from utils import read_sequence


def save_fasta(regions, out_fasta):
    records = []
    for i, (start, end, seq) in enumerate(regions, 1):
        record_id = f"hit_{i}_pos_{start}_{end}"
        records.append(SeqRecord(Seq(seq), id=record_id, description=""))
    SeqIO.write(records, out_fasta, "fasta")


def save_indices(regions, out_idx_path):
    with open(out_idx_path, 'w') as f:
        for start, end, _ in regions:
            f.write(f"{start}\t{end}\n")


def run_analysis(fasta_input, out_dir, rounds=10, max_hits=10, min_length=50, on_unvisited='raise', fmt='fasta'):
    os.makedirs(out_dir, exist_ok=True)

    print(f"Reading {fasta_input}...")
    sequence = read_sequence(fasta_input, fmt=fmt)

    print("Beginning analysis...")
    hmm = HMM(sequence, HMMParameters(*get_gc_content_parameters()), nucleotide_emission_index)
    hmm.run_viterbi()
    print(f"Viterbi path log probability: {hmm.log_probability}")
    print(hmm.parameters.report())
    print(f"Hits: {hmm.count_hits()}")

    for _ in tqdm(range(rounds), desc="Viterbi training"):
        hmm.train(on_unvisited=on_unvisited)
        tqdm.write(f"log P(path) = {hmm.log_probability:.4f}, hits = {hmm.count_hits()}")

    print(hmm.parameters.report())

    regions = hmm.hit_sequences(max_hits=max_hits, min_length=min_length)

    fasta_path = os.path.join(out_dir, 'hits.fasta')
    idx_path = os.path.join(out_dir, 'hit_indices.tsv')
    save_fasta(regions, fasta_path)
    save_indices(regions, idx_path)

    print(f"Saved {len(regions)} hits to:")
    print(f"  Indices: {idx_path}")
    print(f"  FASTA:   {fasta_path}")
    return hmm, regions


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Find high G-C content regions with a two-state Viterbi HMM.')
    parser.add_argument('--input', required=True, help='Path to a single-record FASTA (or GenBank) genome')
    parser.add_argument('--out_dir', required=True, help='Output directory to save hits')
    parser.add_argument('--format', default='fasta', choices=['fasta', 'genbank'], help='Input file format')
    parser.add_argument('--rounds', type=int, default=10, help='Number of Viterbi training rounds')
    parser.add_argument('--max_hits', type=int, default=10, help='Maximum hits to save (0 = all)')
    parser.add_argument('--min_length', type=int, default=50, help='Minimum hit length in nucleotides')
    parser.add_argument('--on_unvisited', default='raise', choices=['raise', 'keep'],
                        help='What to do when training finds a state with no counts')
    args = parser.parse_args()

    run_analysis(args.input, args.out_dir, rounds=args.rounds, max_hits=args.max_hits,
                 min_length=args.min_length, on_unvisited=args.on_unvisited, fmt=args.format)
