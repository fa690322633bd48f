import os

from Bio import SeqIO


def read_sequence(path, fmt="fasta"):
    """
    Reads the single record of a FASTA/GenBank file.

    Returns:
        full_sequence (str): The upper-cased sequence.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Sequence file not found at {path}")

    record = SeqIO.read(path, fmt)
    return str(record.seq).upper()


def read_sequences(path, fmt="fasta"):
    """Reads every record of a FASTA/GenBank file into {record id: sequence string}."""
    if not os.path.exists(path):
        raise FileNotFoundError(f"Sequence file not found at {path}")

    return {record.id: str(record.seq) for record in SeqIO.parse(path, fmt)}
