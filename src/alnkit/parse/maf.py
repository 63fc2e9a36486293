"""Parser for MAF (multiple alignment format) files.

Alignment blocks are concatenated in file order. Sequences are named by
the part of the source field before the first '.', so ``hg38.chr1`` is
``hg38``. A sequence absent from a block is all gaps over that block.
"""

import typing

from alnkit.parse.record import RecordError


class MafBlock:
    """the aligned sequences of one 'a' paragraph"""

    __slots__ = ("seqs", "starts")

    def __init__(self):
        self.seqs: dict[str, str] = {}
        self.starts: dict[str, int] = {}

    @property
    def length(self) -> int:
        lengths = {len(s) for s in self.seqs.values()}
        if len(lengths) > 1:
            msg = f"sequences in MAF block have different lengths {sorted(lengths)}"
            raise RecordError(msg)
        return lengths.pop() if lengths else 0


def _parse_s_line(line: str) -> tuple[str, int, str]:
    fields = line.split()
    if len(fields) != 7:
        msg = f"malformed MAF sequence line {line!r}"
        raise RecordError(msg)
    src, start = fields[1], fields[2]
    try:
        start = int(start)
    except ValueError as err:
        msg = f"malformed MAF sequence line {line!r}"
        raise RecordError(msg) from err
    return src.split(".", 1)[0], start, fields[6]


def maf_blocks(data: typing.Iterable[str]) -> typing.Iterator[MafBlock]:
    """yields the alignment blocks, other line types are ignored"""
    block = None
    for line in data:
        line = line.strip()
        if not line or line.startswith("#"):
            if block is not None and block.seqs:
                yield block
            block = None
            continue
        if line[0] == "a":
            if block is not None and block.seqs:
                yield block
            block = MafBlock()
        elif line[0] == "s":
            if block is None:
                raise RecordError("sequence line outside an alignment block")
            name, start, seq = _parse_s_line(line)
            if name in block.seqs:
                msg = f"{name!r} occurs more than once in a MAF block"
                raise RecordError(msg)
            block.seqs[name] = seq
            block.starts[name] = start

    if block is not None and block.seqs:
        yield block


def maf_to_seqs(
    data: typing.Iterable[str], gap_char: str = "-"
) -> tuple[list[str], list[str], int]:
    """names, sequences and the 0-based start of the first sequence of the
    first block"""
    names: list[str] = []
    pieces: dict[str, list[str]] = {}
    total = 0
    idx_offset = None
    for block in maf_blocks(data):
        length = block.length
        if idx_offset is None:
            idx_offset = next(iter(block.starts.values()))
        for name in block.seqs:
            if name not in pieces:
                names.append(name)
                pieces[name] = [gap_char * total]
        for name in names:
            pieces[name].append(block.seqs.get(name, gap_char * length))
        total += length

    if idx_offset is None:
        raise RecordError("no alignment blocks found")
    return names, ["".join(pieces[n]) for n in names], idx_offset
