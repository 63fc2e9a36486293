"""Writer for FASTA sequence format"""

from collections.abc import Iterable

from alnkit.util.misc import iter_blocks


def seqs_to_fasta(
    seqs: Iterable[tuple[str, str]],
    block_size: int = 70,
) -> str:
    """Returns a Fasta string given (name, seq) pairs.

    Parameters
    ----------
    seqs
        (name, sequence) pairs in output order
    block_size
        the sequence length to write to each line

    Returns
    -------
    The sequences in the Fasta format.
    """
    result = []
    for name, seq in seqs:
        result.append(f"> {name}")
        result.extend(iter_blocks(seq, block_size))
    if result:
        result.append("")
    return "\n".join(result)
