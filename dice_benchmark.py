# Viterbi decoding and training on the Durbin casino dice example.
import argparse

import matplotlib.pyplot as plt

from HMM import HMM, HMMParameters
from benchmark_utils import evaluate_path, labels_from_symbols
from hmm_utils import dice_emission_index, get_dice_parameters
from utils import read_sequences

DICE_FILE = 'data/durbin_dice.fasta'
PLOT_PATH = 'dice_viterbi.png'
DISPLAY_LENGTH = 60
DIE_SYMBOLS = 'FL'


def print_dice_rolls(rolls, die, viterbi, display_length=DISPLAY_LENGTH):
    """Print rolls, true die and Viterbi die in blocks of display_length."""
    for start in range(0, len(rolls), display_length):
        end = start + display_length
        print(f"Rolls:   {rolls[start:end]}")
        print(f"Die:     {die[start:end]}")
        print(f"Viterbi: {viterbi[start:end]}\n")


def plot_paths(true_labels, predicted_path, plot_path):
    fig, ax = plt.subplots(figsize=(12, 3))
    ax.step(range(len(true_labels)), true_labels, where='post', color='steelblue', label='Die')
    ax.step(range(len(predicted_path)), predicted_path + 0.05, where='post', color='darkorange', label='Viterbi')
    ax.set_yticks([0, 1])
    ax.set_yticklabels(['Fair', 'Loaded'])
    ax.set_xlabel('Roll')
    ax.legend(loc='upper right')
    fig.suptitle('Durbin dice: true die vs Viterbi path')
    plt.tight_layout()
    plt.savefig(plot_path, dpi=200)
    plt.close(fig)
    print(f"Saved path plot to {plot_path}")


def main(dice_file=DICE_FILE, rounds=1, plot_path=PLOT_PATH):
    records = read_sequences(dice_file)
    rolls, die = records['rolls'], records['die']

    print("HMM of Durbin Dice:")
    hmm = HMM(rolls, HMMParameters(*get_dice_parameters()), dice_emission_index)
    hmm.run_viterbi()
    print(f"Viterbi path log probability: {hmm.log_probability}")
    print_dice_rolls(rolls, die, hmm.format_path(DIE_SYMBOLS))

    true_labels = labels_from_symbols(die, DIE_SYMBOLS)
    evaluate_path(hmm, true_labels, state=1)
    print(f"Loaded runs: {hmm.extract_hits()}")

    for _ in range(rounds):
        hmm.train(verbose=True)
        evaluate_path(hmm, true_labels, state=1)

    if plot_path:
        plot_paths(true_labels, hmm.probable_path, plot_path)

    return hmm


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Viterbi decoding/training on the Durbin casino dice rolls.')
    parser.add_argument('--dice', default=DICE_FILE, help='FASTA file with "rolls" and "die" records')
    parser.add_argument('--rounds', type=int, default=1, help='Number of Viterbi training rounds')
    parser.add_argument('--plot', default=PLOT_PATH, help='Where to save the path plot (empty to skip)')
    args = parser.parse_args()

    main(args.dice, rounds=args.rounds, plot_path=args.plot)
