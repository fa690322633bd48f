import os

from utils import read_sequences

DATA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "data")
DURBIN_DICE_FILE = os.path.join(DATA_DIR, "durbin_dice.fasta")

# Viterbi segmentation of the 300 Durbin rolls under the fair/loaded model
# (initial [0.95, 0.05], transitions [[0.95, 0.05], [0.10, 0.90]]).
DURBIN_VITERBI = (
    "FFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFLLLLLLLLLLLL"
    "LLLLLLFFFFFFFFFFFFLLLLLLLLLLLLLLLLLLLLLLLLLLLLLLLLLLFFFFFFFF"
    "FFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFL"
    "LLLLLLLLLLLLFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFF"
    "FFFFFFFFFFFFFFFFFFFFFFFFFFFFFFLLLLLLLLLLLLLLLLLLLFFFFFFFFFFF"
)

# [start, end) runs of the loaded die in DURBIN_VITERBI.
DURBIN_LOADED_RUNS = [(48, 66), (78, 112), (179, 192), (270, 289)]
DURBIN_LOG_PROBABILITY = -538.852149


def load_durbin_dice():
    """Returns (rolls, die) strings of the Durbin et al. casino example."""
    records = read_sequences(DURBIN_DICE_FILE)
    return records["rolls"], records["die"]


def gc_island_sequence(flank=300, island=200):
    """AT-rich flanks around a GC-rich island at [2 * flank, 2 * (flank + island))."""
    return "AT" * flank + "GC" * island + "AT" * flank
