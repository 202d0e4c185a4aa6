"""
Typed option data and option declarations.

An option declaration is a name plus typed data. The data carries only the
fields its type defines:

- ``Spin``: default, min, max
- ``StringOption``: default (empty string rendered as ``<empty>``)
- ``CheckOption``: boolean default
- ``ButtonOption``: no fields

Declarations of well-known names are checked against the catalogue type in
``UciOption.from_parts``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar, Union

from pydantic import BaseModel, ConfigDict, field_validator

from ucicodec.exceptions import DuplicateFieldError, ParseError, ParseErrorKind, TypeMismatchError
from ucicodec.models.values import (
    NumaPolicy,
    OptionKind,
    OptionType,
    Spin,
    decode_check,
    decode_uci_string,
    encode_check,
    encode_uci_string,
)
from ucicodec.protocol.constants import ProtocolConstants

if TYPE_CHECKING:
    from ucicodec.protocol.token_reader import TokenReader


def _check_single_line(value: str) -> str:
    if value != value.strip() or "\n" in value or "\r" in value:
        raise ValueError(f"Value must be a single line without surrounding whitespace: {value!r}")
    return value


class StringOption(BaseModel):
    """Free-text option (``type string``)."""

    model_config = ConfigDict(frozen=True)

    option_type: ClassVar[OptionType] = OptionType.STRING

    default: str = ""

    @field_validator("default")
    @classmethod
    def validate_default(cls, v: str) -> str:
        if v == ProtocolConstants.EMPTY_STRING:
            raise ValueError(f"Use an empty default instead of the literal {v!r}")
        return _check_single_line(v)

    def encode(self) -> str:
        return f"default {encode_uci_string(self.default)}"


class CheckOption(BaseModel):
    """Boolean option (``type check``)."""

    model_config = ConfigDict(frozen=True)

    option_type: ClassVar[OptionType] = OptionType.CHECK

    default: bool

    def encode(self) -> str:
        return f"default {encode_check(self.default)}"


class ButtonOption(BaseModel):
    """Trigger option with no value (``type button``)."""

    model_config = ConfigDict(frozen=True)

    option_type: ClassVar[OptionType] = OptionType.BUTTON

    def encode(self) -> str:
        return ""


OptionData = Union[Spin, StringOption, CheckOption, ButtonOption]
"""Typed data of a declared option."""


def option_type_of(data: OptionData) -> OptionType:
    if isinstance(data, Spin):
        return OptionType.SPIN
    return data.option_type


# ===== Field decoding =====

_SPIN_FIELDS = ("default", "min", "max")


def decode_spin_fields(reader: TokenReader) -> Spin:
    """
    Decode ``default <int> min <int> max <int>``.

    The three fields are accepted in any order, each exactly once.
    """
    values: dict[str, int] = {}
    for _ in _SPIN_FIELDS:
        field = reader.read("spin field")
        if field not in _SPIN_FIELDS:
            raise reader.error(f"Unknown spin field {field!r}", ParseErrorKind.UNKNOWN_FIELD, field)
        if field in values:
            raise DuplicateFieldError(field, block="spin", line=reader.line)
        values[field] = reader.read_int(field)
    reader.expect_end()
    return Spin(**values)


def decode_option_data(option_type: OptionType, reader: TokenReader) -> OptionData:
    """
    Decode the type-specific fields following ``type <option_type>``.

    Raises:
        ParseError: If fields are missing, malformed, or trailing tokens remain.
    """
    if option_type is OptionType.SPIN:
        return decode_spin_fields(reader)

    if option_type is OptionType.STRING:
        reader.expect("default")
        text = reader.rest_of_line()
        if not text:
            raise reader.error("Missing string default", ParseErrorKind.UNEXPECTED_END_OF_TOKENS, "default")
        return StringOption(default=decode_uci_string(text))

    if option_type is OptionType.CHECK:
        reader.expect("default")
        token = reader.read("default")
        try:
            value = decode_check(token)
        except ParseError as e:
            e.command, e.line = "option", reader.line
            raise
        reader.expect_end()
        return CheckOption(default=value)

    if option_type is OptionType.BUTTON:
        reader.expect_end()
        return ButtonOption()

    raise reader.error(f"Unsupported option type {option_type.value!r}", ParseErrorKind.UNKNOWN_KEYWORD, "type")


class UciOption(BaseModel):
    """
    A declared option: name plus typed data.

    Example:
        >>> opt = UciOption.from_parts("Threads", Spin(default=1, min=1, max=1024))
        >>> opt.kind
        <OptionKind.THREADS: 'Threads'>
    """

    model_config = ConfigDict(frozen=True)

    name: str
    data: OptionData

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        _check_single_line(v)
        if not v or "type" in v.split():
            raise ValueError(f"Invalid option name {v!r}")
        return v

    @property
    def kind(self) -> OptionKind | None:
        """The well-known kind, or None for a custom option."""
        return OptionKind.lookup(self.name)

    @property
    def is_custom(self) -> bool:
        return self.kind is None

    @property
    def option_type(self) -> OptionType:
        return option_type_of(self.data)

    @property
    def numa_policy(self) -> NumaPolicy | None:
        """The parsed NumaPolicy default, for the NumaPolicy option only."""
        if self.kind is not OptionKind.NUMA_POLICY or not isinstance(self.data, StringOption):
            return None
        return NumaPolicy.parse(self.data.default)

    @classmethod
    def from_parts(cls, name: str, data: OptionData, *, line: str | None = None) -> UciOption:
        """
        Build a declaration, checking well-known names against their catalogue type.

        Raises:
            TypeMismatchError: If a well-known name has the wrong type.
            ParseError: If the NumaPolicy default is empty.
        """
        kind = OptionKind.lookup(name)
        if kind is not None:
            found = option_type_of(data)
            if found is not kind.option_type:
                raise TypeMismatchError(kind, found, line=line)
        if kind is OptionKind.NUMA_POLICY and isinstance(data, StringOption):
            NumaPolicy.parse(data.default)
        return cls(name=name, data=data)
