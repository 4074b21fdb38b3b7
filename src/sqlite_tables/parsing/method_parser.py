"""Parser for the repository method-name grammar.

The grammar is the contract of a query interface::

    save
    findAll [OrderBy <Field> [Asc|Desc]]
    findAllBy <Predicate> [OrderBy <Field> [Asc|Desc]]
    findBy <Predicate> [OrderBy <Field> [Asc|Desc]]
    existsBy <Predicate>
    deleteBy <Predicate>
    updateBy <Predicate>
    update <Field> (And <Field>)* By <Predicate>

    <Predicate> := <Field> ((And|Or) <Field>)*

Connectors are kept in name order. ``findByAAndBOrC`` means
``A AND B OR C`` with SQLite's own precedence and no extra grouping.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import ply.yacc as yacc

from sqlite_tables.exceptions import QuerySyntaxError
from sqlite_tables.parsing.method_lexer import MethodLexer


class Verb(Enum):
    """Operation selected by the method-name prefix."""

    SAVE = "save"
    FIND = "find"
    FIND_ALL = "findAll"
    EXISTS = "exists"
    DELETE = "delete"
    UPDATE = "update"


_VERB_TOKENS = {"SAVE", "FIND", "EXISTS", "DELETE", "UPDATE"}


@dataclass
class ParsedQuery:
    """Decomposed method name."""

    method_name: str
    verb: Verb
    predicate_terms: list[str] = field(default_factory=list)
    connectors: list[str] = field(default_factory=list)  # "AND"/"OR", one fewer than terms
    order_field: str | None = None
    direction: str = "ASC"
    set_fields: list[str] = field(default_factory=list)

    @property
    def has_predicate(self) -> bool:
        return bool(self.predicate_terms)


@dataclass
class _Predicate:
    terms: list[str]
    connectors: list[str]


@dataclass
class _Order:
    field: str
    direction: str


class MethodNameParser:
    """Parser for repository method names.

    ply parsers keep state between calls, so each handler owns its own
    instance.
    """

    tokens = MethodLexer.tokens
    start = "method"

    def __init__(self) -> None:
        self.lexer = MethodLexer()
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore
        self._method_name = ""
        self._tokens: list[Any] = []
        # Lexer and parser keep per-parse state; one parse at a time.
        self._lock = threading.Lock()

    def p_method_save(self, p: yacc.YaccProduction) -> None:
        """method : SAVE"""
        p[0] = ParsedQuery(self._method_name, Verb.SAVE)

    def p_method_find_all(self, p: yacc.YaccProduction) -> None:
        """method : FIND ALL order_opt"""
        p[0] = self._query(Verb.FIND_ALL, None, p[3])

    def p_method_find_all_by(self, p: yacc.YaccProduction) -> None:
        """method : FIND ALL BY predicate order_opt"""
        p[0] = self._query(Verb.FIND_ALL, p[4], p[5])

    def p_method_find_by(self, p: yacc.YaccProduction) -> None:
        """method : FIND BY predicate order_opt"""
        p[0] = self._query(Verb.FIND, p[3], p[4])

    def p_method_exists(self, p: yacc.YaccProduction) -> None:
        """method : EXISTS BY predicate"""
        p[0] = self._query(Verb.EXISTS, p[3], None)

    def p_method_delete(self, p: yacc.YaccProduction) -> None:
        """method : DELETE BY predicate"""
        p[0] = self._query(Verb.DELETE, p[3], None)

    def p_method_update(self, p: yacc.YaccProduction) -> None:
        """method : UPDATE BY predicate"""
        p[0] = self._query(Verb.UPDATE, p[3], None)

    def p_method_update_fields(self, p: yacc.YaccProduction) -> None:
        """method : UPDATE field_list BY predicate"""
        query = self._query(Verb.UPDATE, p[4], None)
        query.set_fields = p[2]
        p[0] = query

    def p_order_opt(self, p: yacc.YaccProduction) -> None:
        """order_opt : ORDER BY field direction"""
        p[0] = _Order(field=p[3], direction=p[4])

    def p_order_opt_empty(self, p: yacc.YaccProduction) -> None:
        """order_opt : empty"""
        p[0] = None

    def p_direction(self, p: yacc.YaccProduction) -> None:
        """direction : ASC
                     | DESC"""
        p[0] = p[1].upper()

    def p_direction_default(self, p: yacc.YaccProduction) -> None:
        """direction : empty"""
        p[0] = "ASC"

    def p_predicate_single(self, p: yacc.YaccProduction) -> None:
        """predicate : field"""
        p[0] = _Predicate(terms=[p[1]], connectors=[])

    def p_predicate_connected(self, p: yacc.YaccProduction) -> None:
        """predicate : predicate AND field
                     | predicate OR field"""
        p[1].terms.append(p[3])
        p[1].connectors.append(p[2].upper())
        p[0] = p[1]

    def p_field_list_single(self, p: yacc.YaccProduction) -> None:
        """field_list : field"""
        p[0] = [p[1]]

    def p_field_list_multiple(self, p: yacc.YaccProduction) -> None:
        """field_list : field_list AND field"""
        p[0] = p[1] + [p[3]]

    def p_field_single(self, p: yacc.YaccProduction) -> None:
        """field : field_word"""
        p[0] = p[1][:1].lower() + p[1][1:]

    def p_field_multiple(self, p: yacc.YaccProduction) -> None:
        """field : field field_word"""
        p[0] = p[1] + p[2]

    def p_field_word(self, p: yacc.YaccProduction) -> None:
        """field_word : WORD
                      | ALL"""
        p[0] = p[1]

    def p_empty(self, p: yacc.YaccProduction) -> None:
        """empty :"""
        pass

    def p_error(self, p: yacc.YaccProduction) -> None:
        name = self._method_name
        if p is None:
            last = self._tokens[-1] if self._tokens else None
            before = self._tokens[-2] if len(self._tokens) > 1 else None
            if last is not None and last.type == "BY":
                if before is not None and before.type == "ORDER":
                    raise QuerySyntaxError(f"OrderBy in method '{name}' has no following field")
                raise QuerySyntaxError(f"Method '{name}' requires at least one predicate field")
            if last is not None and last.type in ("AND", "OR"):
                raise QuerySyntaxError(
                    f"Connector '{last.value}' at end of method '{name}' has no following field"
                )
            raise QuerySyntaxError(f"Unexpected end of method name '{name}'")

        index = self._tokens.index(p) if p in self._tokens else -1
        previous = self._tokens[index - 1] if index > 0 else None
        if previous is not None and previous.type == "BY" and p.type in ("ORDER", "AND", "OR"):
            raise QuerySyntaxError(f"Method '{name}' requires at least one predicate field")
        raise QuerySyntaxError(f"Unexpected '{p.value}' at position {p.lexpos} in method '{name}'")

    def build(self, **kwargs: Any) -> None:
        """Build the parser."""
        self.parser = yacc.yacc(module=self, **kwargs)

    def parse(self, method_name: str) -> ParsedQuery:
        """Parse a method name.

        Raises:
            QuerySyntaxError: If the name does not fit the grammar.
        """
        with self._lock:
            if self.parser is None:
                self.build(debug=False, write_tables=False)

            self._method_name = method_name
            self._tokens = self.lexer.tokenize(method_name)
            if not self._tokens or self._tokens[0].type not in _VERB_TOKENS:
                raise QuerySyntaxError(f"Unrecognized verb in method name '{method_name}'")

            stream = iter(self._tokens)
            return self.parser.parse(
                lexer=self.lexer.lexer,
                tokenfunc=lambda: next(stream, None),
            )

    def _query(self, verb: Verb, predicate: _Predicate | None, order: _Order | None) -> ParsedQuery:
        query = ParsedQuery(self._method_name, verb)
        if predicate is not None:
            query.predicate_terms = predicate.terms
            query.connectors = predicate.connectors
        if order is not None:
            query.order_field = order.field
            query.direction = order.direction
        return query
