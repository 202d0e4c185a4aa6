"""
TokenReader - cursor over the whitespace-separated tokens of a protocol line.

Every command codec decodes through a TokenReader. The reader tracks the
character offset of each token so free-text fields (identification values,
multi-word option names, string defaults) are sliced from the original line
instead of being re-joined from tokens.

Key features:
- Position tracking with peek/skip operations
- Keyword expectations that raise typed ParseErrors
- Raw text spans between keywords and to end of line

Example:
    >>> reader = TokenReader("option name Skill Level type spin", command="option")
    >>> reader.expect("option")
    >>> reader.expect("name")
    >>> reader.read_text_until("type")
    'Skill Level'
    >>> reader.read()
    'spin'
"""

from __future__ import annotations

import re

from ucicodec.exceptions import ParseError, ParseErrorKind

_TOKEN_PATTERN = re.compile(r"\S+")
_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")


class TokenReader:
    """
    Reader for the tokens of a single protocol line.

    Attributes:
        position: Index of the next token.
        remaining: Number of tokens left.
        line: The line being read, with its terminator stripped.
    """

    __slots__ = ("_line", "_tokens", "_position", "_command")

    def __init__(self, line: str, command: str | None = None) -> None:
        """
        Initialize the token reader.

        Args:
            line: Protocol line; a trailing CR/LF and whitespace are ignored.
            command: Command name reported in ParseErrors.
        """
        self._line = line.rstrip()
        self._tokens = [(m.start(), m.group()) for m in _TOKEN_PATTERN.finditer(self._line)]
        self._position = 0
        self._command = command

    @property
    def position(self) -> int:
        return self._position

    @property
    def remaining(self) -> int:
        return len(self._tokens) - self._position

    @property
    def line(self) -> str:
        return self._line

    def is_at_end(self) -> bool:
        """Check if all tokens have been read."""
        return self._position >= len(self._tokens)

    def error(
        self,
        message: str,
        kind: ParseErrorKind = ParseErrorKind.UNEXPECTED_FORMAT,
        field: str | None = None,
    ) -> ParseError:
        """Build a ParseError that carries this reader's command and line."""
        return ParseError(message, kind=kind, command=self._command, field=field, line=self._line)

    def _check_available(self, field: str | None) -> None:
        if self.is_at_end():
            what = f"value for {field!r}" if field else "token"
            raise self.error(
                f"Expected {what}, line ended",
                ParseErrorKind.UNEXPECTED_END_OF_TOKENS,
                field,
            )

    # ===== Token Access =====

    def peek(self) -> str | None:
        """Return the next token without advancing, or None at end of line."""
        if self.is_at_end():
            return None
        return self._tokens[self._position][1]

    def read(self, field: str | None = None) -> str:
        """
        Read the next token and advance.

        Raises:
            ParseError: UNEXPECTED_END_OF_TOKENS if the line ended.
        """
        self._check_available(field)
        token = self._tokens[self._position][1]
        self._position += 1
        return token

    def skip(self, count: int = 1) -> None:
        """Skip forward by ``count`` tokens."""
        if self._position + count > len(self._tokens):
            raise self.error(
                f"Cannot skip {count} tokens, {self.remaining} left",
                ParseErrorKind.UNEXPECTED_END_OF_TOKENS,
            )
        self._position += count

    def read_int(self, field: str) -> int:
        """
        Read the next token as a decimal integer.

        Raises:
            ParseError: UNEXPECTED_END_OF_TOKENS if missing,
                UNEXPECTED_FORMAT if not an integer.
        """
        token = self.read(field)
        if _INTEGER_PATTERN.fullmatch(token) is None:
            raise self.error(f"Invalid integer {token!r} for {field!r}", field=field)
        return int(token)

    # ===== Keywords =====

    def expect_command(self, keyword: str, *, has_fields: bool = False) -> None:
        """
        Consume the leading command keyword.

        Args:
            keyword: The command keyword.
            has_fields: Whether the command requires fields after the keyword.

        Raises:
            ParseError: UNEXPECTED_EOF for an empty line,
                UNEXPECTED_COMMAND if the line is a different command,
                UNEXPECTED_FORMAT if required fields are missing.
        """
        token = self.peek()
        if token is None:
            raise self.error(f"Expected {keyword!r}, got empty line", ParseErrorKind.UNEXPECTED_EOF)
        if token != keyword:
            raise self.error(f"Expected {keyword!r}, got {token!r}", ParseErrorKind.UNEXPECTED_COMMAND)
        self._position += 1
        if has_fields and self.is_at_end():
            raise self.error(f"Expected fields after {keyword!r}")

    def expect(self, keyword: str) -> None:
        """
        Consume a required field keyword.

        Raises:
            ParseError: UNEXPECTED_END_OF_TOKENS if the line ended,
                UNEXPECTED_FORMAT if another token is found.
        """
        token = self.read(keyword)
        if token != keyword:
            raise self.error(f"Expected {keyword!r}, got {token!r}", field=keyword)

    def accept(self, keyword: str) -> bool:
        """Consume ``keyword`` if it is the next token."""
        if self.peek() == keyword:
            self._position += 1
            return True
        return False

    def has_ahead(self, keyword: str) -> bool:
        """Check whether ``keyword`` occurs among the unread tokens."""
        return any(token == keyword for _, token in self._tokens[self._position :])

    def expect_end(self) -> None:
        """
        Require that no tokens remain.

        Raises:
            ParseError: UNEXPECTED_FORMAT listing the trailing tokens.
        """
        if not self.is_at_end():
            raise self.error(f"Unexpected trailing tokens {self.rest_of_line()!r}")

    # ===== Text Spans =====

    def rest_of_line(self) -> str:
        """
        Return the raw text from the next token to end of line and advance to the end.

        Internal whitespace is preserved; returns "" at end of line.
        """
        if self.is_at_end():
            return ""
        start = self._tokens[self._position][0]
        self._position = len(self._tokens)
        return self._line[start:]

    def read_text_until(self, keyword: str) -> str:
        """
        Return the raw text up to the next standalone ``keyword`` and consume both.

        Raises:
            ParseError: UNEXPECTED_END_OF_TOKENS if the keyword never occurs,
                UNEXPECTED_FORMAT if the text before it is empty.
        """
        for index in range(self._position, len(self._tokens)):
            offset, token = self._tokens[index]
            if token == keyword:
                if index == self._position:
                    raise self.error(f"Expected text before {keyword!r}")
                start = self._tokens[self._position][0]
                self._position = index + 1
                return self._line[start:offset].rstrip()
        raise self.error(
            f"Keyword {keyword!r} not found",
            ParseErrorKind.UNEXPECTED_END_OF_TOKENS,
            keyword,
        )

    def read_tokens_until(self, keywords: frozenset[str] | set[str]) -> list[str]:
        """Read tokens up to (not including) the first token in ``keywords``."""
        tokens: list[str] = []
        while not self.is_at_end() and self.peek() not in keywords:
            tokens.append(self.read())
        return tokens

    def __repr__(self) -> str:
        return f"TokenReader(position={self._position}, remaining={self.remaining}, line={self._line!r})"
