"""
Base class for protocol command codecs.

Every command is an immutable pydantic model with a leading ``KEYWORD``,
an ``encode()`` producing the line without its terminator, and a
``decode()`` classmethod that inverts it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar, TypeVar

from pydantic import BaseModel, ConfigDict

from ucicodec.protocol.token_reader import TokenReader

C = TypeVar("C", bound="Command")


class Command(BaseModel, ABC):
    """
    A single protocol line, typed by its keyword.

    Subclasses set ``KEYWORD`` and implement ``encode`` and ``decode``;
    ``decode(encode(x)) == x`` holds for every constructible command.
    """

    model_config = ConfigDict(frozen=True)

    KEYWORD: ClassVar[str]

    @abstractmethod
    def encode(self) -> str:
        """Render the command as a line, without terminator."""
        ...

    @classmethod
    @abstractmethod
    def decode(cls: type[C], line: str) -> C:
        """
        Decode a line into this command.

        Raises:
            ParseError: If the line is not a well-formed instance of this command.
        """
        ...

    @classmethod
    def reader(cls, line: str) -> TokenReader:
        """Token reader over ``line`` reporting errors against this command."""
        return TokenReader(line, command=cls.KEYWORD)

    def to_line(self) -> str:
        """Render the command with its line terminator."""
        return self.encode() + "\n"

    def __str__(self) -> str:
        return self.encode()


class KeywordCommand(Command):
    """A command consisting of its keyword alone (``uciok``, ``isready``, ...)."""

    def encode(self) -> str:
        return self.KEYWORD

    @classmethod
    def decode(cls: type[C], line: str) -> C:
        reader = cls.reader(line)
        reader.expect_command(cls.KEYWORD)
        reader.expect_end()
        return cls()
