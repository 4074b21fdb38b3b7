"""Parsing module for repository method names."""

from sqlite_tables.parsing.method_parser import MethodNameParser, ParsedQuery, Verb

__all__ = [
    "MethodNameParser",
    "ParsedQuery",
    "Verb",
]
