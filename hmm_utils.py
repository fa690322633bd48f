import math
import operator

import numpy as np
from numba import njit

from errors import ConfigurationError, DegenerateTrainingError

UNVISITED_POLICIES = ("raise", "keep")


@njit
def log_sum(lx, ly):
    """
    Given two probabilities x and y, represented by their logs lx, ly,
    return log(x + y) = log(exp(lx) + exp(ly)).

    log(0) is represented by NaN (or -inf, which is what numpy gives for log(0))
    and is treated as the identity. The larger operand is used as the pivot:
        log(a + b) = log(a) + log(1 + b/a)
    which is most accurate when b/a < 1.
    """
    if math.isnan(lx) or lx == -math.inf:
        return ly
    if math.isnan(ly) or ly == -math.inf:
        return lx

    if lx > ly:
        return lx + math.log1p(math.exp(ly - lx))
    return ly + math.log1p(math.exp(lx - ly))


@njit
def _fill_lattice(log_initial, log_transition, log_emission, observations, lattice):
    """
    Viterbi forward pass. lattice[r, c] is the log probability of the best path
    ending in state r at position c. Columns are filled strictly left to right.
    """
    n_states = log_initial.shape[0]
    length = observations.shape[0]

    # Base case: start in r, then emit the first symbol.
    for r in range(n_states):
        lattice[r, 0] = log_initial[r] + log_emission[r, observations[0]]

    for c in range(1, length):
        for r in range(n_states):
            emit = log_emission[r, observations[c]]
            best = lattice[0, c - 1] + log_transition[0, r] + emit
            # Strict '>' keeps the lowest-indexed source state on ties.
            for k in range(1, n_states):
                score = lattice[k, c - 1] + log_transition[k, r] + emit
                if score > best:
                    best = score
            lattice[r, c] = best


@njit
def _trace_path(lattice, log_transition, log_emission, observations, path):
    """
    Viterbi traceback without stored backpointers: every predecessor score is
    recomputed with exactly the same expression used by _fill_lattice, so the
    comparisons (and tie-breaks) are bit-for-bit identical.
    Returns the state chosen for the final column.
    """
    n_states = lattice.shape[0]
    length = lattice.shape[1]

    high_row = 0
    max_score = lattice[0, length - 1]
    for r in range(1, n_states):
        if lattice[r, length - 1] > max_score:
            max_score = lattice[r, length - 1]
            high_row = r
    path[length - 1] = high_row

    for c in range(length - 1, 0, -1):
        r = path[c]
        emit = log_emission[r, observations[c]]
        new_high_row = 0
        best = lattice[0, c - 1] + log_transition[0, r] + emit
        for k in range(1, n_states):
            score = lattice[k, c - 1] + log_transition[k, r] + emit
            if score > best:
                best = score
                new_high_row = k
        path[c - 1] = new_high_row

    return high_row


@njit
def _forward_log_likelihood(log_initial, log_transition, log_emission, observations):
    """Forward algorithm: total log probability of the sequence over all paths."""
    n_states = log_initial.shape[0]
    length = observations.shape[0]

    previous = np.empty(n_states)
    for r in range(n_states):
        previous[r] = log_initial[r] + log_emission[r, observations[0]]

    current = np.empty(n_states)
    for c in range(1, length):
        for r in range(n_states):
            acc = math.nan
            for k in range(n_states):
                acc = log_sum(acc, previous[k] + log_transition[k, r])
            current[r] = acc + log_emission[r, observations[c]]
        previous, current = current, previous

    total = math.nan
    for r in range(n_states):
        total = log_sum(total, previous[r])
    return total


def dice_emission_index(roll):
    """Remap dice rolls ('1'-'6') to indices 0-5."""
    return ord(roll) - ord('1')


def nucleotide_emission_index(nucleotide):
    """Remap nucleotides (ACGT) to indices 0-3. Anything else is treated as a 'T'."""
    if nucleotide == 'A':
        return 0
    if nucleotide == 'C':
        return 1
    if nucleotide == 'G':
        return 2
    return 3


def make_emission_index(alphabet):
    """
    Build an emission index over an explicit alphabet, e.g. make_emission_index("HT").
    Symbols outside the alphabet map to -1, which encode_observations rejects.
    """
    stoi = {symbol: i for i, symbol in enumerate(alphabet)}

    def emission_index(symbol):
        return stoi.get(symbol, -1)

    return emission_index


def encode_observations(sequence, emission_index, emission_count):
    """
    Map every symbol of the sequence to its emission class.

    Returns:
        observations: int64 array of shape [len(sequence)] with values in [0, emission_count).
    """
    if len(sequence) == 0:
        raise ConfigurationError("Observation sequence must contain at least one symbol")

    observations = np.empty(len(sequence), dtype=np.int64)
    for pos, symbol in enumerate(sequence):
        index = emission_index(symbol)
        try:
            observations[pos] = operator.index(index)
        except TypeError as e:
            raise ConfigurationError(
                f"Emission index {index!r} for symbol {symbol!r} at position {pos} is not an integer") from e

    out_of_range = np.flatnonzero((observations < 0) | (observations >= emission_count))
    if out_of_range.size:
        pos = int(out_of_range[0])
        raise ConfigurationError(
            f"Emission index {observations[pos]} for symbol {sequence[pos]!r} at position {pos} "
            f"is outside [0, {emission_count})")

    return observations


def _normalize_counts(counts, previous, table_name, on_unvisited):
    totals = counts.sum(axis=1, keepdims=True)
    unvisited = np.flatnonzero(totals[:, 0] == 0)

    if unvisited.size and on_unvisited == "raise":
        raise DegenerateTrainingError(
            f"Cannot re-estimate {table_name} probabilities: state(s) {unvisited.tolist()} "
            f"have no counts on the decoded path", states=unvisited.tolist())

    # Unvisited rows keep their previous values ("keep" policy).
    return np.divide(counts, totals, out=np.array(previous, dtype=np.float64), where=totals > 0)


def get_transition_counts(path, n_states):
    """Count the transitions i -> j taken along a decoded path. Shape [n_states, n_states]."""
    counts = np.zeros((n_states, n_states), dtype=np.float64)

    # path[:-1] is "current", path[1:] is "next"
    for current, next_state in zip(path[:-1], path[1:]):
        counts[current, next_state] += 1

    return counts


def get_emission_counts(path, observations, n_states, emission_count):
    """Count the emission classes emitted while in each state. Shape [n_states, emission_count]."""
    counts = np.zeros((n_states, emission_count), dtype=np.float64)

    for s in range(n_states):
        state_obs = observations[path == s]
        counts[s] = np.bincount(state_obs, minlength=emission_count)

    return counts


def viterbi_reestimate(parameters, path, observations, on_unvisited="raise"):
    """
    One round of hard-decision (Viterbi) re-estimation.

    Args:
        parameters: current HMMParameters.
        path: decoded state path, int array of shape [L].
        observations: encoded emission classes, int array of shape [L].
        on_unvisited: "raise" to fail on a state with no counts, "keep" to leave
            that state's row unchanged.

    Returns:
        A new HMMParameters; the initial distribution is carried over unchanged.
    """
    if on_unvisited not in UNVISITED_POLICIES:
        raise ConfigurationError(
            f"Unknown unvisited-state policy {on_unvisited!r}; expected one of {UNVISITED_POLICIES}")

    path = np.asarray(path, dtype=np.int64)
    observations = np.asarray(observations, dtype=np.int64)
    n_states = parameters.state_count

    transition_counts = get_transition_counts(path, n_states)
    emission_counts = get_emission_counts(path, observations, n_states, parameters.emission_count)

    transition = _normalize_counts(transition_counts, parameters.transition, "transition", on_unvisited)
    emission = _normalize_counts(emission_counts, parameters.emission, "emission", on_unvisited)

    return parameters.replace(transition=transition, emission=emission)


def get_dice_parameters():
    """
    Fair/loaded casino dice from Durbin et al. (p. 54).
    State 0: fair die, state 1: loaded die (a six half of the time).

    Returns:
        (initial, transition, emission) arrays of shapes [2], [2, 2], [2, 6].
    """
    initial = np.array([0.95, 0.05])
    transition = np.array([[0.95, 0.05],
                           [0.10, 0.90]])
    emission = np.array([[1.0 / 6.0] * 6,
                         [1.0 / 10.0] * 5 + [1.0 / 2.0]])
    return initial, transition, emission


def get_gc_content_parameters():
    """
    Two genomic backgrounds: state 0 is low G-C content, state 1 is high G-C content.
    Emission columns follow nucleotide_emission_index (A, C, G, T).

    Returns:
        (initial, transition, emission) arrays of shapes [2], [2, 2], [2, 4].
    """
    initial = np.array([0.9999, 0.0001])
    transition = np.array([[0.9999, 0.0001],
                           [0.01, 0.99]])
    emission = np.array([[0.25, 0.25, 0.25, 0.25],
                         [0.20, 0.30, 0.30, 0.20]])
    return initial, transition, emission
