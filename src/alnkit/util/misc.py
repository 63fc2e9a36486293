"""Miscellaneous utility functions."""

from __future__ import annotations

import os
import re
import typing
import warnings

_wout_period = re.compile(r"^\.")
_setting = re.compile(r"\s*(\w+)\s*=([^=]*)")


def get_setting_from_environ(
    environ_var: str, params_types: dict[str, typing.Callable]
) -> dict[str, typing.Any]:
    """settings read from the environment variable environ_var

    The variable holds comma separated 'name=value' pairs. Pairs naming a
    parameter absent from params_types, or not of that form, are ignored.
    Values are cast with params_types[name], a value that cannot be cast
    is skipped with a warning.
    """
    settings = {}
    for item in os.environ.get(environ_var, "").split(","):
        match = _setting.fullmatch(item)
        if match is None or match.group(1) not in params_types:
            continue
        name, value = match.groups()
        cast = params_types[name]
        try:
            settings[name] = cast(value)
        except ValueError:
            warnings.warn(
                f"could not cast {name}={value} to type {cast}, skipping",
                stacklevel=2,
            )
    return settings


def iter_blocks(text: str, block_size: int) -> typing.Iterator[str]:
    """yields successive block_size chunks of text"""
    for i in range(0, len(text), block_size):
        yield text[i : i + block_size]
