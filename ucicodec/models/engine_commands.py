"""
Engine-to-controller command codecs.

Wire forms:

- ``id name <text>`` / ``id author <text>``: text runs to end of line
- ``option name <name> type <type> [<type fields>]``: the name is every
  token between ``name`` and the first ``type``
- ``uciok``: end of the ``uci`` handshake
- ``readyok``: reply to ``isready``
"""

from __future__ import annotations

from enum import Enum
from typing import Union

from pydantic import field_validator

from ucicodec.exceptions import ParseError, ParseErrorKind
from ucicodec.models.command import Command, KeywordCommand
from ucicodec.models.info_commands import InfoCommand, decode_info_command
from ucicodec.models.options import UciOption, decode_option_data, option_type_of
from ucicodec.models.values import OptionType
from ucicodec.protocol.constants import EngineKeyword
from ucicodec.protocol.token_reader import TokenReader


class IdField(str, Enum):
    """Fields of the identification block."""

    NAME = "name"
    AUTHOR = "author"


class IdCommand(Command):
    """
    One identification field.

    Example:
        >>> IdCommand.decode("id name Stockfish 17.1\\n")
        IdCommand(field=<IdField.NAME: 'name'>, value='Stockfish 17.1')
    """

    KEYWORD = EngineKeyword.ID

    field: IdField
    value: str

    @field_validator("value")
    @classmethod
    def validate_value(cls, v: str) -> str:
        if not v or v != v.strip() or "\n" in v or "\r" in v:
            raise ValueError(f"Identification value must be non-empty single-line text: {v!r}")
        return v

    @classmethod
    def name(cls, value: str) -> IdCommand:
        return cls(field=IdField.NAME, value=value)

    @classmethod
    def author(cls, value: str) -> IdCommand:
        return cls(field=IdField.AUTHOR, value=value)

    def encode(self) -> str:
        return f"{self.KEYWORD} {self.field.value} {self.value}"

    @classmethod
    def decode(cls, line: str) -> IdCommand:
        reader = cls.reader(line)
        reader.expect_command(cls.KEYWORD, has_fields=True)
        token = reader.read("field")
        try:
            field = IdField(token)
        except ValueError as e:
            raise reader.error(f"Unknown id field {token!r}", ParseErrorKind.UNKNOWN_FIELD, token) from e
        value = reader.rest_of_line()
        if not value:
            raise reader.error(f"Missing value for id {token}", ParseErrorKind.UNEXPECTED_END_OF_TOKENS, token)
        return cls(field=field, value=value)


class OptionCommand(Command):
    """
    One option declaration.

    Example:
        >>> cmd = OptionCommand.decode("option name Threads type spin default 1 min 1 max 1024")
        >>> cmd.encode()
        'option name Threads type spin default 1 min 1 max 1024'
    """

    KEYWORD = EngineKeyword.OPTION

    option: UciOption

    def encode(self) -> str:
        option_type = option_type_of(self.option.data)
        line = f"{self.KEYWORD} name {self.option.name} type {option_type.value}"
        fields = self.option.data.encode()
        return f"{line} {fields}" if fields else line

    @classmethod
    def decode(cls, line: str) -> OptionCommand:
        reader = cls.reader(line)
        reader.expect_command(cls.KEYWORD, has_fields=True)
        reader.expect("name")
        name = reader.read_text_until("type")
        option_type = _read_option_type(reader)
        data = decode_option_data(option_type, reader)
        return cls(option=UciOption.from_parts(name, data, line=reader.line))


def _read_option_type(reader: TokenReader) -> OptionType:
    token = reader.read("type")
    try:
        option_type = OptionType(token)
    except ValueError as e:
        raise reader.error(f"Unknown option type {token!r}", ParseErrorKind.UNKNOWN_KEYWORD, "type") from e
    if option_type is OptionType.COMBO:
        raise reader.error("Combo options are not supported", ParseErrorKind.UNKNOWN_KEYWORD, "type")
    return option_type


class UciOkCommand(KeywordCommand):
    """End of the handshake (``uciok``)."""

    KEYWORD = EngineKeyword.UCIOK


class ReadyOkCommand(KeywordCommand):
    """Reply to ``isready``."""

    KEYWORD = EngineKeyword.READYOK


EngineCommand = Union[IdCommand, OptionCommand, UciOkCommand, ReadyOkCommand, InfoCommand]

_ENGINE_COMMANDS: dict[str, type[Command]] = {
    EngineKeyword.ID: IdCommand,
    EngineKeyword.OPTION: OptionCommand,
    EngineKeyword.UCIOK: UciOkCommand,
    EngineKeyword.READYOK: ReadyOkCommand,
}


def decode_engine_command(line: str) -> EngineCommand:
    """
    Decode any line sent by the engine.

    Raises:
        ParseError: UNEXPECTED_EOF for a blank line, UNEXPECTED_COMMAND for
            an unknown keyword, or the command's own decode error.
    """
    keyword = line.split(maxsplit=1)[0] if line.strip() else None
    if keyword is None:
        raise ParseError("Empty line", kind=ParseErrorKind.UNEXPECTED_EOF, line=line)
    if keyword == EngineKeyword.INFO:
        return decode_info_command(line)
    command_type = _ENGINE_COMMANDS.get(keyword)
    if command_type is None:
        raise ParseError(
            f"Unknown engine command {keyword!r}",
            kind=ParseErrorKind.UNEXPECTED_COMMAND,
            line=line.rstrip(),
        )
    return command_type.decode(line)  # type: ignore[return-value]
