#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/lark2md/utils/io_utils.py
"""I/O helpers for reading block snapshots and writing rendered Markdown."""

from __future__ import annotations

import io
from pathlib import Path
from typing import IO, Union, cast

InputSource = Union[str, Path, bytes, IO[bytes], IO[str]]


def read_text_source(source: InputSource) -> str:
    """Read text from a path, raw bytes, or a file-like object.

    A ``str`` is treated as a path only when it does not look like JSON
    content (it does not start with ``{`` or ``[`` after whitespace).

    Parameters
    ----------
    source : str, Path, bytes, IO[bytes] or IO[str]
        Where to read from

    Returns
    -------
    str
        The decoded text

    Raises
    ------
    TypeError
        If the source type is not supported
    OSError
        If a path cannot be read

    """
    if isinstance(source, Path):
        return source.read_text(encoding="utf-8")
    if isinstance(source, str):
        if source.lstrip()[:1] in ("{", "["):
            return source
        return Path(source).read_text(encoding="utf-8")
    if isinstance(source, (bytes, bytearray)):
        return bytes(source).decode("utf-8-sig")
    if hasattr(source, "read"):
        data = source.read()
        if isinstance(data, bytes):
            return data.decode("utf-8-sig")
        if isinstance(data, str):
            return data
        raise TypeError(f"Stream returned unsupported type: {type(data)}")
    raise TypeError(f"Unsupported input type: {type(source)}")


def write_content(content: str, output: Union[str, Path, IO[bytes], IO[str]]) -> None:
    """Write rendered text to a path or a file-like object.

    Binary streams receive UTF-8 encoded bytes; text streams receive the
    string unchanged.

    Raises
    ------
    TypeError
        If the output type is not supported

    """
    if isinstance(output, (str, Path)):
        Path(output).write_text(content, encoding="utf-8")
        return

    if not hasattr(output, "write"):
        raise TypeError(f"Unsupported output type: {type(output)}")

    if isinstance(output, io.TextIOBase):
        is_binary_mode = False
    elif isinstance(output, (io.BufferedIOBase, io.RawIOBase)):
        is_binary_mode = True
    else:
        mode = getattr(output, "mode", "")
        is_binary_mode = isinstance(mode, str) and "b" in mode

    if is_binary_mode:
        cast(IO[bytes], output).write(content.encode("utf-8"))
    else:
        cast(IO[str], output).write(content)


__all__ = ["InputSource", "read_text_source", "write_content"]
