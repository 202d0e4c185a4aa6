"""
Data models for UCI commands and values.

This package provides pydantic models for every command line exchanged
between controller and engine, plus the option value types they carry.
Each command model encodes to one line and decodes from one line.
"""

from ucicodec.models.command import Command, KeywordCommand
from ucicodec.models.engine_commands import (
    EngineCommand,
    IdCommand,
    IdField,
    OptionCommand,
    ReadyOkCommand,
    UciOkCommand,
    decode_engine_command,
)
from ucicodec.models.gui_commands import (
    GoCommand,
    GuiCommand,
    IsReadyCommand,
    PositionCommand,
    QuitCommand,
    SetOptionCommand,
    StopCommand,
    UciCommand,
    UciNewGameCommand,
    decode_gui_command,
)
from ucicodec.models.info_commands import (
    AvailableProcessorsInfo,
    InfoCommand,
    InfoStringCommand,
    NnueEvaluationInfo,
    UsingThreadsInfo,
    decode_info_command,
)
from ucicodec.models.options import (
    ButtonOption,
    CheckOption,
    OptionData,
    StringOption,
    UciOption,
    option_type_of,
)
from ucicodec.models.values import (
    NumaPolicy,
    NumaPolicyKind,
    OptionKind,
    OptionType,
    Spin,
    decode_check,
    decode_uci_string,
    encode_check,
    encode_uci_string,
)

__all__ = [
    # Base
    "Command",
    "KeywordCommand",
    # Values
    "OptionType",
    "OptionKind",
    "Spin",
    "NumaPolicy",
    "NumaPolicyKind",
    "encode_uci_string",
    "decode_uci_string",
    "encode_check",
    "decode_check",
    # Options
    "StringOption",
    "CheckOption",
    "ButtonOption",
    "OptionData",
    "UciOption",
    "option_type_of",
    # Engine Commands
    "IdField",
    "IdCommand",
    "OptionCommand",
    "UciOkCommand",
    "ReadyOkCommand",
    "EngineCommand",
    "decode_engine_command",
    # Info Records
    "InfoStringCommand",
    "AvailableProcessorsInfo",
    "UsingThreadsInfo",
    "NnueEvaluationInfo",
    "InfoCommand",
    "decode_info_command",
    # Controller Commands
    "UciCommand",
    "IsReadyCommand",
    "UciNewGameCommand",
    "StopCommand",
    "QuitCommand",
    "PositionCommand",
    "GoCommand",
    "SetOptionCommand",
    "GuiCommand",
    "decode_gui_command",
]
