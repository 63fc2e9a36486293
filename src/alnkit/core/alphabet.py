"""Character classification for alignments.

Alignment rows are stored as numpy uint8 arrays of ASCII codes. An
MsaAlphabet records the valid symbols, the gap character and the missing
data characters as 256 element lookup tables indexed by those codes.
"""

from __future__ import annotations

import numpy
import numpy.typing as npt
from typing_extensions import Self

GAP_CHAR = "-"
DEFAULT_ALPHABET = "ACGT"
# the first missing data character is the canonical one
DEFAULT_MISSING_CHARS = "*N"
AMBIGUITY_CHAR = "N"

NumpyUint8ArrayType = npt.NDArray[numpy.uint8]


class AlphabetError(TypeError):
    pass


def _make_table(dtype, fill) -> numpy.ndarray:
    return numpy.full(256, fill, dtype=dtype)


_UPPER = numpy.arange(256, dtype=numpy.uint8)
_UPPER[ord("a") : ord("z") + 1] -= 32

_IS_ALPHA = numpy.zeros(256, dtype=bool)
_IS_ALPHA[ord("a") : ord("z") + 1] = True
_IS_ALPHA[ord("A") : ord("Z") + 1] = True

COMPLEMENT = numpy.arange(256, dtype=numpy.uint8)
for _a, _b in ("AT", "TA", "CG", "GC"):
    COMPLEMENT[ord(_a)] = ord(_b)


def _to_bytes(data: str | bytes) -> bytes:
    if isinstance(data, bytes):
        return data
    try:
        return data.encode("ascii")
    except UnicodeEncodeError as err:
        msg = f"non-ASCII character in {data[:20]!r}"
        raise AlphabetError(msg) from err


def to_array(data: str | bytes) -> NumpyUint8ArrayType:
    """converts text to a (writeable) uint8 array of character codes"""
    return numpy.frombuffer(_to_bytes(data), dtype=numpy.uint8).copy()


class MsaAlphabet:
    """symbols, gap and missing data characters of an alignment

    Parameters
    ----------
    symbols
        ordered valid non-gap symbols, may include missing data characters
    missing
        missing data characters, the first is used when masking
    gap_char
        the gap character
    """

    __slots__ = ("_symbols", "_missing", "_gap_char", "inv_lookup", "is_missing")

    def __init__(
        self,
        symbols: str = DEFAULT_ALPHABET,
        missing: str = DEFAULT_MISSING_CHARS,
        gap_char: str = GAP_CHAR,
    ):
        if len(gap_char) != 1:
            raise AlphabetError(f"gap character must be length 1, not {gap_char!r}")
        if not missing:
            raise AlphabetError("at least one missing data character is required")
        for chars in (symbols, missing, gap_char):
            _to_bytes(chars)
        if len(set(symbols)) != len(symbols):
            raise AlphabetError(f"duplicated symbols in {symbols!r}")
        if gap_char in symbols or gap_char in missing:
            raise AlphabetError(f"gap character {gap_char!r} cannot be a symbol")

        self._gap_char = gap_char
        self._missing = missing
        self._set_symbols(symbols)

    def _set_symbols(self, symbols: str) -> None:
        self._symbols = symbols
        self.inv_lookup = _make_table(numpy.int16, -1)
        for i, c in enumerate(symbols):
            self.inv_lookup[ord(c)] = i
        self.is_missing = _make_table(bool, False)
        for c in self._missing:
            self.is_missing[ord(c)] = True

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(symbols={self._symbols!r}, "
            f"missing={self._missing!r}, gap_char={self._gap_char!r})"
        )

    def __str__(self) -> str:
        return self._symbols

    def __len__(self) -> int:
        return len(self._symbols)

    def __iter__(self):
        yield from self._symbols

    def __contains__(self, char: str) -> bool:
        return len(char) == 1 and ord(char) < 256 and self.inv_lookup[ord(char)] >= 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MsaAlphabet):
            return NotImplemented
        return (self._symbols, self._missing, self._gap_char) == (
            other._symbols,
            other._missing,
            other._gap_char,
        )

    def __hash__(self) -> int:
        return hash((self._symbols, self._missing, self._gap_char))

    @property
    def symbols(self) -> str:
        return self._symbols

    @property
    def missing(self) -> str:
        return self._missing

    @property
    def gap_char(self) -> str:
        return self._gap_char

    @property
    def gap_code(self) -> int:
        return ord(self._gap_char)

    @property
    def missing_code(self) -> int:
        """character code used when masking data"""
        return ord(self._missing[0])

    @property
    def valid(self) -> numpy.ndarray:
        """boolean table of every character code allowed in a row"""
        valid = self.inv_lookup >= 0
        valid |= self.is_missing
        valid[self.gap_code] = True
        return valid

    @property
    def is_real(self) -> numpy.ndarray:
        """boolean table of codes that are neither gap nor missing data"""
        real = self.inv_lookup >= 0
        real &= ~self.is_missing
        return real

    def index(self, char: str) -> int:
        """index of char in symbols, -1 if absent"""
        return int(self.inv_lookup[ord(char)]) if len(char) == 1 else -1

    def is_gap(self, char: str) -> bool:
        return char == self._gap_char

    def is_missing_char(self, char: str) -> bool:
        return len(char) == 1 and bool(self.is_missing[ord(char)])

    def has_lowercase(self) -> bool:
        return any(c.islower() for c in self._symbols)

    def copy(self) -> Self:
        return self.__class__(
            symbols=self._symbols, missing=self._missing, gap_char=self._gap_char
        )

    def remove_symbol(self, char: str = AMBIGUITY_CHAR) -> None:
        """removes char from the symbols, lookups for other symbols are reindexed"""
        self._set_symbols(self._symbols.replace(char, ""))

    def reset(self, symbols: str) -> None:
        """replaces the symbols, gap and missing data characters are unchanged"""
        if len(set(symbols)) != len(symbols) or self._gap_char in symbols:
            raise AlphabetError(f"invalid symbols {symbols!r}")
        _to_bytes(symbols)
        self._set_symbols(symbols)

    def to_upper(self) -> None:
        """upper cases the symbols, dropping lower case symbols already present"""
        symbols = []
        for c in self._symbols:
            c = c.upper()
            if c not in symbols:
                symbols.append(c)
        self._set_symbols("".join(symbols))

    def sanitise(self, data: str | bytes, name: str | None = None) -> NumpyUint8ArrayType:
        """returns data as a uint8 array of character codes valid for this alphabet

        Parameters
        ----------
        data
            raw sequence characters, without whitespace
        name
            sequence name, used in error messages

        Notes
        -----
        Data is upper cased unless the alphabet contains lower case symbols.
        A '.' becomes the first missing data character when it is not a symbol.
        Unrecognised letters are converted to 'N', any other unrecognised
        character raises an AlphabetError.
        """
        arr = to_array(data)
        if not self.has_lowercase():
            arr = _UPPER[arr]
        dot = ord(".")
        if self.inv_lookup[dot] < 0:
            arr[arr == dot] = self.missing_code

        invalid = ~self.valid[arr]
        if invalid.any():
            bad = invalid & ~_IS_ALPHA[arr]
            if bad.any():
                char = chr(arr[bad.argmax()])
                where = f" in sequence {name!r}" if name else ""
                msg = f"invalid character {char!r}{where}"
                raise AlphabetError(msg)
            fill = ord(AMBIGUITY_CHAR)
            arr[invalid] = fill if self.valid[fill] else self.missing_code
        return arr
