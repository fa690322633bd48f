import numpy as np


def calculate_metrics(predicted_path, true_labels, state=1):
    """
    Calculates position-level Precision and Recall for one state of a decoded path.
    """
    predicted_path = np.asarray(predicted_path)
    true_labels = np.asarray(true_labels)

    # Create binary masks
    pred_state = (predicted_path == state)
    true_state = (true_labels == state)

    # True Positives: Predicted state AND actually in state
    tp = np.sum(pred_state & true_state)

    # False Positives: Predicted state BUT actually not
    fp = np.sum(pred_state & ~true_state)

    # False Negatives: Predicted not in state BUT actually in state
    fn = np.sum(~pred_state & true_state)

    precision = tp / (tp + fp) if (tp + fp) > 0 else 0.0
    recall = tp / (tp + fn) if (tp + fn) > 0 else 0.0

    return precision, recall


def labels_from_symbols(symbols, alphabet):
    """Convert a label string such as "FFLL" into state indices using alphabet (e.g. "FL")."""
    stoi = {symbol: i for i, symbol in enumerate(alphabet)}
    return np.array([stoi[symbol] for symbol in symbols], dtype=np.int64)


def evaluate_path(hmm, true_labels, state=1):
    """
    Decodes the session (if needed) and scores its path against known labels.

    Returns:
        precision, recall, predicted_path
    """
    predicted_path = hmm.probable_path if hmm.probable_path is not None else hmm.run_viterbi()

    precision, recall = calculate_metrics(predicted_path, true_labels, state=state)

    print("-" * 30)
    print(f"Results for State {state}:")
    print(f"Precision: {precision:.4f}")
    print(f"Recall:    {recall:.4f}")
    print("-" * 30)

    return precision, recall, predicted_path
