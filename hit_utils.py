import numpy as np


def extract_hits(path, max_hits=0, min_length=0, background=0):
    """
    Return [start, end) intervals of contiguous non-background runs in a decoded path.

    Args:
        path: decoded state path, shape [L].
        max_hits: stop once this many hits have been kept (0 = no limit).
        min_length: drop hits shorter than this (they are not merged or extended).
        background: the reference state; every other state counts as a hit.
    """
    hit_indices = np.flatnonzero(np.asarray(path) != background)
    hits = []
    if hit_indices.size == 0:
        return hits

    # A hit still open at the end of the path closes at L.
    breaks = np.flatnonzero(np.diff(hit_indices) != 1)
    starts = np.concatenate(([hit_indices[0]], hit_indices[breaks + 1]))
    ends = np.concatenate((hit_indices[breaks] + 1, [hit_indices[-1] + 1]))

    for start, end in zip(starts, ends):
        if end - start < min_length:
            continue
        hits.append((int(start), int(end)))
        if max_hits and len(hits) == max_hits:
            break
    return hits


def count_hits(path, background=0):
    """Number of contiguous non-background runs, without materializing intervals."""
    in_hit = np.asarray(path) != background
    if in_hit.size == 0:
        return 0

    # Count background -> hit edges, treating the position before 0 as background.
    return int(in_hit[0]) + int(np.count_nonzero(in_hit[1:] & ~in_hit[:-1]))


def hit_sequences(sequence, hits):
    """Return list of (start, end, seq) for each hit interval."""
    return [(start, end, sequence[start:end]) for start, end in hits]
