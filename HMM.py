import numpy as np

import hit_utils
from errors import ConfigurationError
from hmm_utils import (_fill_lattice, _forward_log_likelihood, _trace_path, encode_observations,
                       viterbi_reestimate)


def _read_only(values):
    values = np.array(values, dtype=np.float64)
    values.setflags(write=False)
    return values


class HMMParameters:
    """
    Immutable snapshot of an HMM: initial distribution [R], transition matrix [R, R]
    and emission matrix [R, E]. Flat (row-major) transition/emission arrays are accepted.

    Rows are not required to sum to 1; unnormalized weights decode fine but the
    resulting log probabilities lose their probabilistic meaning.
    """

    def __init__(self, initial, transition, emission, emission_count=None):
        initial = np.asarray(initial, dtype=np.float64).ravel()
        transition = np.asarray(transition, dtype=np.float64)
        emission = np.asarray(emission, dtype=np.float64)

        n_states = initial.shape[0]
        if n_states == 0:
            raise ConfigurationError("An HMM needs at least one state")

        if transition.size != n_states * n_states:
            raise ConfigurationError(
                f"Transition table has {transition.size} entries, expected {n_states}x{n_states}")

        if emission_count is None:
            emission_count = emission.shape[-1] if emission.ndim == 2 else emission.size // n_states
        if emission_count < 1 or emission.size != n_states * emission_count:
            raise ConfigurationError(
                f"Emission table has {emission.size} entries, expected {n_states}x{emission_count}")

        for name, table in (("initial", initial), ("transition", transition), ("emission", emission)):
            if not np.all(np.isfinite(table)) or np.any(table < 0):
                raise ConfigurationError(f"{name} probabilities must be finite and non-negative")

        self.state_count = n_states
        self.emission_count = int(emission_count)
        self.initial = _read_only(initial)
        self.transition = _read_only(transition.reshape(n_states, n_states))
        self.emission = _read_only(emission.reshape(n_states, self.emission_count))

    @property
    def log_initial(self):
        with np.errstate(divide='ignore'):
            return np.log(self.initial)

    @property
    def log_transition(self):
        with np.errstate(divide='ignore'):
            return np.log(self.transition)

    @property
    def log_emission(self):
        with np.errstate(divide='ignore'):
            return np.log(self.emission)

    def replace(self, initial=None, transition=None, emission=None):
        """Return a new snapshot with the given tables swapped in; self is left untouched."""
        return HMMParameters(
            self.initial if initial is None else initial,
            self.transition if transition is None else transition,
            self.emission if emission is None else emission,
            emission_count=self.emission_count,
        )

    def report(self):
        """Log (raw) listing of every emission, initial and transition probability."""
        lines = []
        for title, raw, logs in (("Emission", self.emission, self.log_emission),
                                 ("Initial", self.initial, self.log_initial),
                                 ("Transition", self.transition, self.log_transition)):
            lines.append(f"{title} log prob:")
            for prob, log_prob in zip(raw.ravel(), logs.ravel()):
                lines.append(f"{log_prob:.6g} ({prob:.6g})")
        return "\n".join(lines)

    def __eq__(self, other):
        if not isinstance(other, HMMParameters):
            return NotImplemented
        return (np.array_equal(self.initial, other.initial)
                and np.array_equal(self.transition, other.transition)
                and np.array_equal(self.emission, other.emission))

    __hash__ = None

    def __repr__(self):
        return f"HMMParameters(state_count={self.state_count}, emission_count={self.emission_count})"


class HMM:
    """
    Viterbi decoding session over one observation sequence.

    The lattice is a dense [n_states, L] matrix of log probabilities; it is rebuilt
    from scratch whenever the parameters change. Traceback recomputes predecessor
    scores instead of storing backpointers, so memory stays O(n_states * L).
    """

    def __init__(self, observations, parameters, emission_index):
        # Immutable copy; hit_sequences slices it.
        self.sequence = observations if isinstance(observations, str) else tuple(observations)
        self.emission_index = emission_index
        self.observations = encode_observations(self.sequence, emission_index, parameters.emission_count)
        self.parameters = parameters
        self.history = []

        self.lattice = None
        self.probable_path = None
        self.log_probability = None
        self._build_lattice()

    def _build_lattice(self):
        self._log_initial = self.parameters.log_initial
        self._log_transition = self.parameters.log_transition
        self._log_emission = self.parameters.log_emission

        lattice = np.empty((self.parameters.state_count, len(self.observations)), dtype=np.float64)
        _fill_lattice(self._log_initial, self._log_transition, self._log_emission, self.observations, lattice)
        lattice.setflags(write=False)

        self.lattice = lattice
        self.probable_path = None
        self.log_probability = None

    def run_viterbi(self):
        """Trace back the most probable state path; also sets self.log_probability."""
        path = np.empty(len(self.observations), dtype=np.int64)
        high_row = _trace_path(self.lattice, self._log_transition, self._log_emission, self.observations, path)

        self.probable_path = path
        self.log_probability = float(self.lattice[high_row, -1])
        return path

    def _require_path(self):
        if self.probable_path is None:
            self.run_viterbi()
        return self.probable_path

    def log_likelihood(self):
        """Total log probability of the sequence summed over every path (forward algorithm)."""
        return float(_forward_log_likelihood(self._log_initial, self._log_transition, self._log_emission,
                                             self.observations))

    def extract_hits(self, max_hits=0, min_length=0, background=0):
        return hit_utils.extract_hits(self._require_path(), max_hits=max_hits, min_length=min_length,
                                      background=background)

    def count_hits(self, background=0):
        return hit_utils.count_hits(self._require_path(), background=background)

    def hit_sequences(self, max_hits=0, min_length=0, background=0):
        hits = self.extract_hits(max_hits=max_hits, min_length=min_length, background=background)
        return hit_utils.hit_sequences(self.sequence, hits)

    def train(self, on_unvisited="raise", verbose=False):
        """
        One round of Viterbi training: re-estimate transitions and emissions from the
        current decoded path, then refill the lattice and trace back with the new
        parameters. On DegenerateTrainingError the session is left unchanged.
        """
        path = self._require_path()
        new_parameters = viterbi_reestimate(self.parameters, path, self.observations, on_unvisited=on_unvisited)

        self.history.append(self.parameters)
        self.parameters = new_parameters
        self._build_lattice()
        self.run_viterbi()

        if verbose:
            print(f"Viterbi path log probability: {self.log_probability}")
            print(self.parameters.report())
            print(f"Hits: {self.count_hits()}\n")

    def format_path(self, symbols):
        """Render the decoded path with one character per state, e.g. symbols="FL"."""
        if len(symbols) < self.parameters.state_count:
            raise ConfigurationError(f"Need {self.parameters.state_count} state symbols, got {len(symbols)}")
        return "".join(symbols[s] for s in self._require_path())
