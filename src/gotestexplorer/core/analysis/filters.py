from __future__ import annotations

"""
File Classification and Exclusion Rules.

Regex-based directory exclusion plus the Go naming conventions that decide
which files are test files and which are plain sources.
"""

import os
import re
from typing import Iterable, List


def compile_patterns(patterns: Iterable[str]) -> List[re.Pattern]:
    """
    Transform raw regex strings into compiled Pattern objects.

    Malformed expressions are discarded so a bad user setting never breaks
    the directory walk.

    Args:
        patterns: Raw regex strings.

    Returns:
        List[re.Pattern]: Compiled regex objects.
    """
    compiled: List[re.Pattern] = []
    for p in patterns:
        try:
            compiled.append(re.compile(p))
        except re.error:
            continue
    return compiled


def matches_any(name: str, compiled_patterns: Iterable[re.Pattern]) -> bool:
    """True if *name* matches at least one compiled pattern."""
    return any(rx.search(name) for rx in compiled_patterns)


def is_test_file(file_name: str, suffix: str) -> bool:
    """
    Classify a file as a test file.

    Args:
        file_name: Base name of the file.
        suffix: Test file suffix (``_test.go`` for Go).

    Returns:
        bool: True when the name carries the suffix and something before it.
    """
    return len(file_name) > len(suffix) and file_name.endswith(suffix)


def is_source_file(file_name: str, extensions: Iterable[str]) -> bool:
    _, ext = os.path.splitext(file_name)
    return ext in extensions
