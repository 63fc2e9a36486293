from __future__ import annotations

import typing

from alnkit.format.fasta import seqs_to_fasta
from alnkit.format.phylip import alignment_to_mpm, alignment_to_phylip
from alnkit.format.ss import alignment_to_ss
from alnkit.parse.record import FileFormatError
from alnkit.util.io import PathType, atomic_write, get_format_suffixes
from alnkit.util.misc import get_setting_from_environ

if typing.TYPE_CHECKING:  # pragma: no cover
    from alnkit.core.alignment import Alignment

OUTPUT_LINE_LEN = 70
FORMAT_ENV = "ALNKIT_FORMAT"
PRETTY_CHAR = "."
DEFAULT_SUFFIX = "msa"

# canonical format name for each accepted name
_format_names = {
    "fasta": "fasta",
    "fa": "fasta",
    "phylip": "phylip",
    "ph": "phylip",
    "mpm": "mpm",
    "ss": "ss",
    "maf": "maf",
}

_suffixes = {
    "fasta": "fa",
    "phylip": "ph",
    "mpm": "mpm",
    "ss": "ss",
    "maf": "maf",
}

_format_for_suffix = {
    "fa": "fasta",
    "fasta": "fasta",
    "ph": "phylip",
    "mpm": "mpm",
    "ss": "ss",
    "maf": "maf",
}

FORMATTERS = {
    "fasta": seqs_to_fasta,
    "phylip": alignment_to_phylip,
    "mpm": alignment_to_mpm,
}


def get_format(name: str) -> str:
    """the canonical name for a format name, case insensitive

    Raises
    ------
    FileFormatError
        if the format is unknown
    """
    fmt = _format_names.get(name.lower())
    if fmt is None:
        msg = f"unknown alignment format {name!r}"
        raise FileFormatError(msg)
    return fmt


def format_for_suffix(path: PathType) -> str | None:
    """format implied by the filename suffix, ignoring compression
    suffixes, None if not recognised"""
    suffix, _ = get_format_suffixes(path)
    return _format_for_suffix.get(suffix)


def suffix_for_format(name: str) -> str:
    """the conventional filename suffix for a format"""
    return _suffixes.get(_format_names.get(name.lower(), ""), DEFAULT_SUFFIX)


def line_length() -> int:
    """characters of sequence per line, the ALNKIT_FORMAT environment
    variable may set line_length"""
    setting = get_setting_from_environ(FORMAT_ENV, {"line_length": int})
    return setting.get("line_length", OUTPUT_LINE_LEN)


def _named_rows(aln: Alignment, pretty: bool) -> list[tuple[str, str]]:
    """(name, row) pairs, if pretty characters matching the first row are
    replaced by PRETTY_CHAR"""
    data = aln._explicit_array()
    if pretty and len(data):
        data = data.copy()
        same = data[1:] == data[0]
        data[1:][same] = ord(PRETTY_CHAR)
    return [(n, r.tobytes().decode("ascii")) for n, r in zip(aln.names, data)]


def format_alignment(aln: Alignment, format: str = "fasta", pretty: bool = False) -> str:
    """aln as a string in the named format

    Parameters
    ----------
    aln
        the alignment, its representation is not changed
    format
        one of fasta, phylip, mpm or ss
    pretty
        replace characters identical to the first row with '.', ignored for
        the ss format
    """
    fmt = get_format(format)
    if fmt == "ss":
        return alignment_to_ss(aln)
    if fmt not in FORMATTERS:
        msg = f"writing {fmt!r} format is not supported"
        raise FileFormatError(msg)

    return FORMATTERS[fmt](_named_rows(aln, pretty), block_size=line_length())


def save_to_filename(
    aln: Alignment,
    filename: PathType,
    format: str | None = None,
    pretty: bool = False,
) -> None:
    """writes aln to filename

    Parameters
    ----------
    aln
        to be written
    filename
        name of the alignment file, a compression suffix compresses the
        output
    format
        the alignment format, defaults to the format implied by the suffix
    pretty
        see format_alignment
    """
    format = format or format_for_suffix(filename)
    if format is None:
        msg = f"format of {str(filename)!r} not known"
        raise FileFormatError(msg)

    contents = format_alignment(aln, format, pretty=pretty)
    with atomic_write(filename, mode="wt") as f:
        f.write(contents)

