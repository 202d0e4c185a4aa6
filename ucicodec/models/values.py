"""
Value types for UCI option declarations.

Design principles:
- Value objects are frozen pydantic models
- Wire renderings are produced by ``encode()`` and read back by the codecs
- Range checks (a spin default inside min/max) are left to the caller
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ucicodec.exceptions import ParseError, ParseErrorKind
from ucicodec.protocol.constants import ProtocolConstants


class OptionType(str, Enum):
    """The ``type`` clause of an option declaration."""

    SPIN = "spin"
    STRING = "string"
    CHECK = "check"
    BUTTON = "button"
    COMBO = "combo"

    def __str__(self) -> str:
        return self.value


class OptionKind(str, Enum):
    """
    Well-known (Stockfish) option names.

    Each kind has a fixed option type; a declaration of a well-known name
    with any other type is a decode error. Members are in the order
    Stockfish declares them.
    """

    DEBUG_LOG_FILE = "Debug Log File"
    NUMA_POLICY = "NumaPolicy"
    THREADS = "Threads"
    HASH = "Hash"
    CLEAR_HASH = "Clear Hash"
    PONDER = "Ponder"
    MULTI_PV = "MultiPV"
    SKILL_LEVEL = "Skill Level"
    MOVE_OVERHEAD = "Move Overhead"
    NODESTIME = "nodestime"
    UCI_CHESS960 = "UCI_Chess960"
    UCI_LIMIT_STRENGTH = "UCI_LimitStrength"
    UCI_ELO = "UCI_Elo"
    UCI_SHOW_WDL = "UCI_ShowWDL"
    SYZYGY_PATH = "SyzygyPath"
    SYZYGY_PROBE_DEPTH = "SyzygyProbeDepth"
    SYZYGY_50_MOVE_RULE = "Syzygy50MoveRule"
    SYZYGY_PROBE_LIMIT = "SyzygyProbeLimit"
    EVAL_FILE = "EvalFile"
    EVAL_FILE_SMALL = "EvalFileSmall"

    def __str__(self) -> str:
        return self.value

    @property
    def option_type(self) -> OptionType:
        return _OPTION_TYPES[self]

    @property
    def slot(self) -> str:
        """Attribute name of this option on an option block."""
        return self.name.lower()

    @classmethod
    def lookup(cls, name: str) -> OptionKind | None:
        """Return the well-known kind for ``name``, or None for a custom option."""
        try:
            return cls(name)
        except ValueError:
            return None


_OPTION_TYPES: dict[OptionKind, OptionType] = {
    OptionKind.DEBUG_LOG_FILE: OptionType.STRING,
    OptionKind.NUMA_POLICY: OptionType.STRING,
    OptionKind.THREADS: OptionType.SPIN,
    OptionKind.HASH: OptionType.SPIN,
    OptionKind.CLEAR_HASH: OptionType.BUTTON,
    OptionKind.PONDER: OptionType.CHECK,
    OptionKind.MULTI_PV: OptionType.SPIN,
    OptionKind.SKILL_LEVEL: OptionType.SPIN,
    OptionKind.MOVE_OVERHEAD: OptionType.SPIN,
    OptionKind.NODESTIME: OptionType.SPIN,
    OptionKind.UCI_CHESS960: OptionType.CHECK,
    OptionKind.UCI_LIMIT_STRENGTH: OptionType.CHECK,
    OptionKind.UCI_ELO: OptionType.SPIN,
    OptionKind.UCI_SHOW_WDL: OptionType.CHECK,
    OptionKind.SYZYGY_PATH: OptionType.STRING,
    OptionKind.SYZYGY_PROBE_DEPTH: OptionType.SPIN,
    OptionKind.SYZYGY_50_MOVE_RULE: OptionType.CHECK,
    OptionKind.SYZYGY_PROBE_LIMIT: OptionType.SPIN,
    OptionKind.EVAL_FILE: OptionType.STRING,
    OptionKind.EVAL_FILE_SMALL: OptionType.STRING,
}


# ===== Scalar renderings =====


def encode_uci_string(value: str) -> str:
    """Render a string value, using ``<empty>`` for the empty string."""
    return value if value else ProtocolConstants.EMPTY_STRING


def decode_uci_string(text: str) -> str:
    """Inverse of ``encode_uci_string``."""
    return "" if text == ProtocolConstants.EMPTY_STRING else text


def encode_check(value: bool) -> str:
    return "true" if value else "false"


def decode_check(text: str, *, field: str = "default") -> bool:
    """
    Parse a ``check`` value.

    Raises:
        ParseError: UNKNOWN_KEYWORD unless the text is ``true`` or ``false``.
    """
    if text == "true":
        return True
    if text == "false":
        return False
    raise ParseError(
        f"Invalid check value {text!r}, expected 'true' or 'false'",
        kind=ParseErrorKind.UNKNOWN_KEYWORD,
        field=field,
    )


# ===== Option values =====


class Spin(BaseModel):
    """
    Integer range declaration (``type spin``).

    Example:
        >>> Spin(default=1, min=1, max=1024).encode()
        'default 1 min 1 max 1024'
    """

    model_config = ConfigDict(frozen=True)

    default: int
    min: int
    max: int

    def encode(self) -> str:
        return f"default {self.default} min {self.min} max {self.max}"


class NumaPolicyKind(str, Enum):
    """Named NUMA binding policies."""

    NONE = "none"
    SYSTEM = "system"
    AUTO = "auto"
    HARDWARE = "hardware"
    CUSTOM = "custom"


class NumaPolicy(BaseModel):
    """
    Value of the ``NumaPolicy`` option.

    Either one of the named policies or a custom CPU specification such as
    ``0-15,32-47:16-31,48-63`` (':' separates NUMA nodes, ',' separates
    CPU indices).

    Example:
        >>> NumaPolicy.parse("auto").kind
        <NumaPolicyKind.AUTO: 'auto'>
        >>> NumaPolicy.parse("0-7:8-15").encode()
        '0-7:8-15'
    """

    model_config = ConfigDict(frozen=True)

    kind: NumaPolicyKind
    custom: str | None = Field(default=None, description="CPU specification for CUSTOM policies")

    @model_validator(mode="after")
    def check_custom(self) -> NumaPolicy:
        if self.kind is NumaPolicyKind.CUSTOM:
            if not self.custom or self.custom != self.custom.strip():
                raise ValueError("Custom NUMA policy requires a non-empty specification")
            if self.custom in _NAMED_POLICIES:
                raise ValueError(f"Custom NUMA policy {self.custom!r} collides with a named policy")
        elif self.custom is not None:
            raise ValueError(f"NUMA policy {self.kind.value!r} takes no specification")
        return self

    @classmethod
    def parse(cls, text: str) -> NumaPolicy:
        """
        Parse a NUMA policy value.

        Raises:
            ParseError: UNEXPECTED_FORMAT if the value is empty.
        """
        if not text:
            raise ParseError(
                "Empty NumaPolicy value",
                kind=ParseErrorKind.UNEXPECTED_FORMAT,
                field=OptionKind.NUMA_POLICY.value,
            )
        if text in _NAMED_POLICIES:
            return cls(kind=NumaPolicyKind(text))
        return cls(kind=NumaPolicyKind.CUSTOM, custom=text)

    def encode(self) -> str:
        if self.kind is NumaPolicyKind.CUSTOM:
            return self.custom or ""
        return self.kind.value

    def __str__(self) -> str:
        return self.encode()


_NAMED_POLICIES = frozenset(k.value for k in NumaPolicyKind if k is not NumaPolicyKind.CUSTOM)
