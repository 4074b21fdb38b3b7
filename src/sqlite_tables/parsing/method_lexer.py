"""Lexer for repository method names."""

import ply.lex as lex

from sqlite_tables.exceptions import QuerySyntaxError


class MethodLexer:
    """Splits a camelCase method name into words and keywords.

    Every word starts at an uppercase letter (or at the start of the name)
    and runs over the following lowercase letters, digits and underscores.
    """

    # Reserved words, matched case-sensitively against whole words
    reserved = {
        "find": "FIND",
        "exists": "EXISTS",
        "delete": "DELETE",
        "update": "UPDATE",
        "save": "SAVE",
        "All": "ALL",
        "By": "BY",
        "And": "AND",
        "Or": "OR",
    }

    tokens = [
        "WORD",
        "ORDER",
        "ASC",
        "DESC",
    ] + list(reserved.values())

    def __init__(self) -> None:
        self.lexer: lex.Lexer = None  # type: ignore

    # Function rules are tried in definition order, so the context-sensitive
    # keywords must come before t_WORD.

    def t_ORDER(self, t: lex.LexToken) -> lex.LexToken:
        r"Order(?=By(?![a-z0-9_]))"
        return t

    def t_ASC(self, t: lex.LexToken) -> lex.LexToken:
        r"Asc\Z"
        return t

    def t_DESC(self, t: lex.LexToken) -> lex.LexToken:
        r"Desc\Z"
        return t

    def t_WORD(self, t: lex.LexToken) -> lex.LexToken:
        r"[A-Za-z0-9_][a-z0-9_]*"
        t.type = self.reserved.get(t.value, "WORD")
        return t

    def t_error(self, t: lex.LexToken) -> None:
        raise QuerySyntaxError(
            f"Illegal character '{t.value[0]}' at position {t.lexpos} in method name"
        )

    def build(self, **kwargs) -> None:  # type: ignore
        """Build the lexer."""
        self.lexer = lex.lex(module=self, **kwargs)

    def tokenize(self, data: str) -> list[lex.LexToken]:
        """Tokenize a method name and return all tokens."""
        self.lexer.input(data)
        tokens = []
        while True:
            tok = self.lexer.token()
            if tok is None:
                break
            tokens.append(tok)
        return tokens
