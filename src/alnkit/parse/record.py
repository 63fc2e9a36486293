"""Exceptions raised when reading alignment, feature and category files."""


class FileFormatError(Exception):
    """Exception raised when a file can not be parsed or its format is unknown."""


class RecordError(FileFormatError):
    """Exception raised when a record in a file is malformed."""
