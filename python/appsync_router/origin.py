"""Defining-file inference from the call stack.

This is a convenience default only: it finds "the file that called the
public entry point" so that a resolver folder next to it can be used. Pass
an explicit ``base_dir`` in RouterConfig to avoid it entirely.
"""

from __future__ import annotations

import inspect
from pathlib import Path

from .exceptions import AmbiguousOriginError


def find_defining_file(function_name: str, *, skip: int = 1) -> Path:
    """Find the file of the frame that called ``function_name``.

    The search starts ``skip`` frames above this function, so by default the
    immediate caller of find_defining_file is the first candidate.

    Args:
        function_name: Name of the entry point function (e.g. "__init__").
        skip: Frames to skip before searching.

    Returns:
        Path of the file containing the caller of function_name.

    Raises:
        AmbiguousOriginError: If no matching frame (or no caller) exists.
    """
    frame = inspect.currentframe()
    try:
        for _ in range(skip):
            if frame is None:
                break
            frame = frame.f_back

        while frame is not None:
            if frame.f_code.co_name == function_name:
                caller = frame.f_back
                # interactive sessions report "<stdin>" or "<string>"
                if caller is None or caller.f_code.co_filename.startswith("<"):
                    break
                return Path(caller.f_code.co_filename).resolve()
            frame = frame.f_back
    finally:
        del frame

    raise AmbiguousOriginError(
        "Cannot find defining file.",
        metadata={"function_name": function_name},
    )


__all__ = ["find_defining_file"]
