from __future__ import annotations

"""
Unit tests for the test symbol mapper.

Verifies prefix-based kind mapping, suite method extraction and the
fail-soft behaviour of symbol loading.
"""

import asyncio

from gotestexplorer.core.analysis.symbols import imports_suite_package, load_symbols, map_symbols
from gotestexplorer.domain.tree_models import Document, SourceRange, Symbol, SymbolKind


def _fn(name: str, *children: Symbol) -> Symbol:
    return Symbol(name, SymbolKind.FUNCTION, children=tuple(children))


def _leaves(symbols, suite_methods: bool = False):
    return [(leaf.kind, leaf.name) for leaf in map_symbols(symbols, suite_methods)]


def test_one_of_each_kind():
    symbols = [_fn("TestMain"), _fn("TestFoo"), _fn("BenchmarkBar"), _fn("ExampleBaz")]

    assert _leaves(symbols) == [
        ("test", "TestMain"),
        ("test", "TestFoo"),
        ("benchmark", "BenchmarkBar"),
        ("example", "ExampleBaz"),
    ]


def test_names_must_continue_with_an_upper_case_letter():
    symbols = [_fn("Testify"), _fn("Test"), _fn("helper"), _fn("Benchmarks"), _fn("Test_Under")]
    assert _leaves(symbols) == []


def test_non_function_symbols_are_ignored():
    symbols = [Symbol("TestVar", SymbolKind.VARIABLE), Symbol("TestConst", SymbolKind.CONSTANT)]
    assert _leaves(symbols) == []


def test_suite_methods_under_receiver_type():
    suite = Symbol("ExampleTestSuite", SymbolKind.STRUCT, children=(
        Symbol("(*ExampleTestSuite).SetupTest", SymbolKind.METHOD),
        Symbol("(*ExampleTestSuite).TestExample", SymbolKind.METHOD),
    ))
    symbols = [suite, _fn("TestExampleTestSuite")]

    assert _leaves(symbols, suite_methods=True) == [
        ("test", "(*ExampleTestSuite).TestExample"),
        ("test", "TestExampleTestSuite"),
    ]


def test_bare_method_names_get_the_receiver_prefix():
    suite = Symbol("MySuite", SymbolKind.STRUCT, children=(Symbol("TestThing", SymbolKind.METHOD),))
    assert _leaves([suite, _fn("TestMySuite")], suite_methods=True) == [
        ("test", "(*MySuite).TestThing"),
        ("test", "TestMySuite"),
    ]


def test_methods_nested_in_runner_function_are_flattened():
    runner = _fn(
        "TestSuiteRunner",
        Symbol("(*S).TestA", SymbolKind.METHOD),
        _fn("TestClosure"),
    )
    assert _leaves([runner]) == [("test", "TestSuiteRunner"), ("test", "(*S).TestA")]


def test_methods_only_map_with_test_prefix():
    symbols = [
        Symbol("(*S).BenchmarkX", SymbolKind.METHOD),
        Symbol("(S).TestValue", SymbolKind.METHOD),
        _fn("TestS"),
    ]
    assert _leaves(symbols, suite_methods=True) == [("test", "(S).TestValue"), ("test", "TestS")]


def test_receiver_methods_without_suite_import_are_not_tests():
    fake = Symbol("fakeDB", SymbolKind.STRUCT, children=(
        Symbol("(*fakeDB).TestConnection", SymbolKind.METHOD),
    ))
    assert _leaves([fake, _fn("TestFoo")]) == [("test", "TestFoo")]


def test_receiver_methods_without_runner_are_not_tests():
    suite = Symbol("MySuite", SymbolKind.STRUCT, children=(
        Symbol("(*MySuite).TestThing", SymbolKind.METHOD),
    ))
    # Benchmarks and examples cannot run a suite
    assert _leaves([suite, _fn("BenchmarkX")], suite_methods=True) == [("benchmark", "BenchmarkX")]
    assert _leaves([Symbol("(S).TestValue", SymbolKind.METHOD)], suite_methods=True) == []


def test_imports_suite_package():
    assert imports_suite_package('import (\n\t"testing"\n\n\t"github.com/stretchr/testify/suite"\n)\n')
    assert imports_suite_package('import "github.com/stretchr/testify/suite"')
    assert not imports_suite_package('import "github.com/stretchr/testify/assert"')
    assert not imports_suite_package("")


def test_duplicates_are_emitted_once():
    assert _leaves([_fn("TestA"), _fn("TestA")]) == [("test", "TestA")]


def test_ranges_are_carried_over():
    rng = SourceRange(3, 0, 5, 1)
    [leaf] = map_symbols([Symbol("TestA", SymbolKind.FUNCTION, rng)])
    assert leaf.range == rng


def test_load_symbols_accepts_sync_and_async_providers():
    doc = Document("/p/a_test.go", "")
    sym = _fn("TestA")

    async def async_provider(document):
        return [sym]

    assert asyncio.run(load_symbols(lambda d: [sym], doc)) == [sym]
    assert asyncio.run(load_symbols(async_provider, doc)) == [sym]


def test_load_symbols_degrades_to_empty_on_failure(caplog):
    def broken(document):
        raise RuntimeError("parser crashed")

    assert asyncio.run(load_symbols(broken, Document("/p/a_test.go", ""))) == []
    assert "parser crashed" in caplog.text
