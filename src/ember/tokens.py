"""
Token types for the Ember lexer.

Token categories line up with the error code ranges used by diagnostics:
- E0xx: Scan errors
- E1xx: Parse errors
- E4xx: Eval errors
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Any, Optional


class TokenType(Enum):
    """All token types recognized by the lexer."""

    # --- Single-character tokens ---
    LEFT_PAREN = auto()         # (
    RIGHT_PAREN = auto()        # )
    LEFT_BRACE = auto()         # {
    RIGHT_BRACE = auto()        # }
    COMMA = auto()              # ,
    DOT = auto()                # .
    MINUS = auto()              # -
    PLUS = auto()               # +
    SEMICOLON = auto()          # ;
    SLASH = auto()              # /
    STAR = auto()               # *

    # --- One or two character tokens ---
    BANG = auto()               # !
    BANG_EQUAL = auto()         # !=
    EQUAL = auto()              # =
    EQUAL_EQUAL = auto()        # ==
    GREATER = auto()            # >
    GREATER_EQUAL = auto()      # >=
    LESS = auto()               # <
    LESS_EQUAL = auto()         # <=

    # --- Literals ---
    IDENTIFIER = auto()         # user-defined names
    STRING = auto()             # "hello"
    NUMBER = auto()             # 42, 3.14

    # --- Keywords ---
    AND = auto()                # and (reserved)
    CLASS = auto()              # class (reserved)
    ELSE = auto()               # else (reserved)
    FALSE = auto()              # false
    FUN = auto()                # fun (reserved)
    FOR = auto()                # for (reserved)
    IF = auto()                 # if (reserved)
    NIL = auto()                # nil
    OR = auto()                 # or (reserved)
    PRINT = auto()              # print
    RETURN = auto()             # return (reserved)
    SUPER = auto()              # super (reserved)
    THIS = auto()               # this (reserved)
    TRUE = auto()               # true
    VAR = auto()                # var
    WHILE = auto()              # while (reserved)

    # --- Special ---
    EOF = auto()                # end of input


@dataclass(frozen=True)
class SourceLocation:
    """Represents a position in source code."""
    line: int           # 1-indexed line number
    column: int         # 1-indexed column number
    offset: int         # 0-indexed character offset from start
    filename: Optional[str] = None

    def __str__(self) -> str:
        if self.filename:
            return f"{self.filename}:{self.line}:{self.column}"
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class SourceSpan:
    """Represents a range in source code."""
    start: SourceLocation
    end: SourceLocation

    @property
    def line(self) -> int:
        return self.start.line

    def __str__(self) -> str:
        if self.start.filename:
            return f"{self.start.filename}:{self.start.line}:{self.start.column}-{self.end.line}:{self.end.column}"
        return f"{self.start.line}:{self.start.column}-{self.end.line}:{self.end.column}"


@dataclass(frozen=True)
class Token:
    """A single token from the lexer."""
    type: TokenType
    value: Any              # float for NUMBER, str for STRING/IDENTIFIER, else None
    lexeme: str             # The original source text
    span: SourceSpan        # Location in source

    @property
    def line(self) -> int:
        """Line the token starts on."""
        return self.span.start.line

    def __str__(self) -> str:
        if self.type in (TokenType.NUMBER, TokenType.STRING, TokenType.IDENTIFIER):
            return f"{self.type.name}({self.value!r})"
        return self.type.name


# Keyword mapping - maps string to token type
KEYWORDS: dict[str, TokenType] = {
    "and": TokenType.AND,
    "class": TokenType.CLASS,
    "else": TokenType.ELSE,
    "false": TokenType.FALSE,
    "for": TokenType.FOR,
    "fun": TokenType.FUN,
    "if": TokenType.IF,
    "nil": TokenType.NIL,
    "or": TokenType.OR,
    "print": TokenType.PRINT,
    "return": TokenType.RETURN,
    "super": TokenType.SUPER,
    "this": TokenType.THIS,
    "true": TokenType.TRUE,
    "var": TokenType.VAR,
    "while": TokenType.WHILE,
}


# Keywords the grammar does not consume yet
RESERVED_KEYWORDS: set[str] = {
    "and", "class", "else", "for", "fun", "if", "or", "return", "super", "this", "while",
}


# Tokens that can begin a new declaration or statement; parser recovery stops here
STATEMENT_STARTS: frozenset = frozenset({
    TokenType.CLASS,
    TokenType.FUN,
    TokenType.VAR,
    TokenType.FOR,
    TokenType.IF,
    TokenType.WHILE,
    TokenType.PRINT,
    TokenType.RETURN,
})


def is_reserved_keyword(keyword: str) -> bool:
    """Check if a keyword is reserved but not yet part of the grammar."""
    return keyword in RESERVED_KEYWORDS
