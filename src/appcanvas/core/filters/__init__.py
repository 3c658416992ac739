"""Filter compilation API."""

from .ast import UNSET, And, Comparison, Filter, MatchAll, Predicate
from .compiler import FilterCompiler, compile_filters
from .evaluator import PredicateEvaluator, matches
from .exceptions import FilterCompilationError
from .sql_compiler import SQLCompiler, compile_to_sql

__all__ = [
    "UNSET",
    "And",
    "Comparison",
    "Filter",
    "FilterCompilationError",
    "FilterCompiler",
    "MatchAll",
    "Predicate",
    "PredicateEvaluator",
    "SQLCompiler",
    "compile_filters",
    "compile_to_sql",
    "matches",
]
