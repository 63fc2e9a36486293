"""Opening, possibly compressed, alignment files and writing them safely."""

import shutil
import uuid
from bz2 import open as bzip_open
from gzip import open as gzip_open
from lzma import open as lzma_open
from os import PathLike
from pathlib import Path, PurePath
from tempfile import mkdtemp
from typing import IO, Callable, Optional, Tuple, Union

from chardet import detect

from alnkit.util.misc import _wout_period

PathType = Union[str, PathLike, PurePath]

# bytes examined when detecting a text encoding
_ENCODING_SAMPLE = 100

_compression_handlers = {
    "gz": gzip_open,
    "bz2": bzip_open,
    "xz": lzma_open,
    "lzma": lzma_open,
}


def _opener(path: Path) -> Callable:
    """the open function for the compression suffix of path"""
    _, compression = get_format_suffixes(path)
    return _compression_handlers.get(compression, open)


def open_(filename: PathType, mode="rt", **kwargs) -> IO:
    """open that handles different compression

    Parameters
    ----------
    filename
        path to a, possibly compressed, file
    mode
        standard file opening mode
    kwargs
        passed to open functions

    Notes
    -----
    When reading text without a specified encoding, the encoding is
    detected by chardet from the start of the file.
    """
    if not filename:
        raise ValueError(f"{filename} not a valid file name")

    mode = mode or "rt"
    path = Path(filename).expanduser()
    op = _opener(path)
    if "b" in mode:
        return op(path, mode, **kwargs)

    encoding = kwargs.pop("encoding", None)
    if encoding is None and mode.startswith("r"):
        with op(path, mode="rb") as infile:
            encoding = detect(infile.read(_ENCODING_SAMPLE))["encoding"]

    if "t" not in mode:
        # compression libraries default to binary
        mode = f"{mode}t"
    return op(path, mode, encoding=encoding, **kwargs)


class atomic_write:
    """context manager writing to a temporary file in a sibling directory,
    the file replaces path only if the block completes without error

    Parameters
    ----------
    path
        destination, a compression suffix compresses the output
    mode
        file writing mode
    encoding
        text encoding
    """

    def __init__(self, path: PathType, mode="w", encoding=None):
        self._path = Path(path).expanduser()
        self._mode = mode
        self._encoding = encoding
        self._tmpdir: Optional[Path] = None
        self._tmppath: Optional[Path] = None
        self._file: Optional[IO] = None
        self.succeeded: Optional[bool] = None

    def __enter__(self) -> IO:
        self._tmpdir = Path(mkdtemp(dir=self._path.parent))
        # keep the suffixes so open_ compresses as the destination requires
        self._tmppath = self._tmpdir / f"{uuid.uuid4()}{''.join(self._path.suffixes)}"
        self._file = open_(self._tmppath, self._mode, encoding=self._encoding)
        return self._file

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._file.close()
        self.succeeded = exc_type is None
        if self.succeeded:
            self._tmppath.replace(self._path)
        shutil.rmtree(self._tmpdir)


T = Optional[str]


def get_format_suffixes(filename: PathType) -> Tuple[T, T]:
    """returns file, compression suffixes"""
    suffixes = [_wout_period.sub("", s).lower() for s in Path(filename).suffixes[-2:]]
    if not suffixes:
        return None, None

    if suffixes[-1] not in _compression_handlers:
        return suffixes[-1], None

    fmt = suffixes[0] if len(suffixes) == 2 else None
    return fmt, suffixes[-1]

