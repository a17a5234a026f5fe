from __future__ import annotations

"""
Domain Constants.

Centralizes the naming conventions of Go workspaces (manifests, test files,
test function prefixes) and the identifiers of every tree item kind.
"""

import re
from typing import FrozenSet, List, Pattern

CURRENT_CONFIG_VERSION = "1.0.0"

# -----------------------------------------------------------------------------
# GO WORKSPACE CONVENTIONS
# -----------------------------------------------------------------------------

DEFAULT_MANIFEST_NAME = "go.mod"
DEFAULT_TEST_FILE_SUFFIX = "_test.go"
DEFAULT_SOURCE_EXTENSIONS: List[str] = [".go"]
DEFAULT_EXCLUDE_PATTERNS: List[str] = [
    r"^(\.git|vendor|testdata|node_modules)$",
]

# Test, Benchmark and Example functions: prefix plus an upper-case letter
TEST_FUNC_RX: Pattern[str] = re.compile(r"^(?P<type>Test|Benchmark|Example)[A-Z]\w*$")

# Suite methods as reported by the symbol provider: (*Receiver).TestName
TEST_METHOD_RX: Pattern[str] = re.compile(
    r"^\((?P<receiver>[^)]+)\)\.(?P<name>Test[A-Z]\w*)$"
)
SUITE_METHOD_NAME_RX: Pattern[str] = re.compile(r"^Test[A-Z]\w*$")

# testify suites are only runnable from files importing the suite package
SUITE_IMPORT_RX: Pattern[str] = re.compile(r'"github\.com/stretchr/testify/suite"')

MODULE_DIRECTIVE_RX: Pattern[str] = re.compile(r"^\s*module\s+(\S+)", re.MULTILINE)

# -----------------------------------------------------------------------------
# ITEM KINDS
# -----------------------------------------------------------------------------

KIND_MODULE = "module"
KIND_WORKSPACE = "workspace"
KIND_PACKAGE = "package"
KIND_FILE = "file"
KIND_TEST = "test"
KIND_BENCHMARK = "benchmark"
KIND_EXAMPLE = "example"

ROOT_KINDS: FrozenSet[str] = frozenset({KIND_MODULE, KIND_WORKSPACE})
LEAF_KINDS: FrozenSet[str] = frozenset({KIND_TEST, KIND_BENCHMARK, KIND_EXAMPLE})
ALL_KINDS: FrozenSet[str] = ROOT_KINDS | LEAF_KINDS | {KIND_PACKAGE, KIND_FILE}
