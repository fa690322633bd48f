class HMMError(Exception):
    """Base class for errors raised by the Viterbi decoder and trainer."""


class ConfigurationError(HMMError, ValueError):
    """
    Raised when a model or observation sequence violates the size/range contract:
    zero states, mis-sized transition or emission tables, or an emission index
    outside [0, emission_count).
    """


class DegenerateTrainingError(HMMError, ArithmeticError):
    """
    Raised when a Viterbi training round cannot re-estimate a state because the
    decoded path never left it (or never visited it), which would divide by zero.
    """

    def __init__(self, message, states=()):
        super().__init__(message)
        self.states = tuple(states)
