"""Writers for PHYLIP and MPM sequence formats
"""

from collections.abc import Sequence

from alnkit.util.misc import iter_blocks


def _header(seqs: Sequence[tuple[str, str]]) -> str:
    length = len(seqs[0][1]) if seqs else 0
    return f"  {len(seqs)} {length}"


def alignment_to_phylip(seqs: Sequence[tuple[str, str]], block_size: int = 70) -> str:
    """Returns a Phylip string given (name, seq) pairs, each name is on its
    own line followed by the sequence in block_size lines"""
    seqs = list(seqs)
    result = [_header(seqs)]
    for name, seq in seqs:
        result.append(name)
        result.extend(iter_blocks(seq, block_size))
    result.append("")
    return "\n".join(result)


def alignment_to_mpm(seqs: Sequence[tuple[str, str]], **kwargs) -> str:
    """Returns an MPM string given (name, seq) pairs, all names are listed
    before the sequences, one sequence per line"""
    seqs = list(seqs)
    result = [_header(seqs)]
    result.extend(name for name, _ in seqs)
    result.extend(seq for _, seq in seqs)
    result.append("")
    return "\n".join(result)
