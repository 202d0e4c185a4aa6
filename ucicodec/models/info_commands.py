"""
``info string`` records printed by Stockfish.

Recognised messages:

- ``info string Available processors: 0-7``
- ``info string Using 4 threads`` (``thread`` when there is one)
- ``info string NNUE evaluation using nn-1c0000000000.nnue (133MiB, (22528, 3072, 15, 32, 1))``

Any other ``info string`` line decodes to ``InfoStringCommand`` with the raw
text. Search ``info`` lines (depth, score, pv) are not decoded.
"""

from __future__ import annotations

import re
from typing import Union

from pydantic import Field, field_validator, model_validator

from ucicodec.exceptions import ParseError, ParseErrorKind
from ucicodec.models.command import Command
from ucicodec.protocol.constants import EngineKeyword
from ucicodec.protocol.token_reader import TokenReader

_AVAILABLE_PROCESSORS = re.compile(r"Available processors:\s*([0-9]+)\s*-\s*([0-9]+)")
_USING_THREADS = re.compile(r"Using ([0-9]+) threads?")
_NNUE_EVALUATION = re.compile(
    r"NNUE evaluation using (\S+) \(([0-9]+)MiB, \(([0-9]+), ([0-9]+), ([0-9]+), ([0-9]+), ([0-9]+)\)\)"
)


def _string_reader(line: str) -> tuple[TokenReader, str]:
    reader = TokenReader(line, command=EngineKeyword.INFO)
    reader.expect_command(EngineKeyword.INFO, has_fields=True)
    reader.expect("string")
    return reader, reader.rest_of_line()


class InfoStringCommand(Command):
    """An ``info string`` message not covered by a more specific record."""

    KEYWORD = EngineKeyword.INFO

    text: str

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        if not v or v != v.strip() or "\n" in v:
            raise ValueError(f"Info text must be non-empty single-line text: {v!r}")
        return v

    def encode(self) -> str:
        return f"info string {self.text}"

    @classmethod
    def decode(cls, line: str) -> InfoStringCommand:
        reader, text = _string_reader(line)
        if not text:
            raise reader.error("Missing info string text", ParseErrorKind.UNEXPECTED_END_OF_TOKENS, "string")
        return cls(text=text)


class AvailableProcessorsInfo(Command):
    """CPU indices the engine may bind threads to."""

    KEYWORD = EngineKeyword.INFO

    first: int = Field(ge=0)
    last: int = Field(ge=0)

    def encode(self) -> str:
        return f"info string Available processors: {self.first}-{self.last}"

    @classmethod
    def decode(cls, line: str) -> AvailableProcessorsInfo:
        reader, text = _string_reader(line)
        match = _AVAILABLE_PROCESSORS.fullmatch(text)
        if match is None:
            raise reader.error(f"Not an available processors record: {text!r}")
        return cls(first=int(match.group(1)), last=int(match.group(2)))


class UsingThreadsInfo(Command):
    """Number of search threads in use."""

    KEYWORD = EngineKeyword.INFO

    threads: int = Field(ge=0)

    def encode(self) -> str:
        suffix = "" if self.threads == 1 else "s"
        return f"info string Using {self.threads} thread{suffix}"

    @classmethod
    def decode(cls, line: str) -> UsingThreadsInfo:
        reader, text = _string_reader(line)
        match = _USING_THREADS.fullmatch(text)
        if match is None:
            raise reader.error(f"Not a thread count record: {text!r}")
        threads = int(match.group(1))
        if text.endswith("threads") == (threads == 1):
            raise reader.error(f"Thread count and plural disagree: {text!r}")
        return cls(threads=threads)


class NnueEvaluationInfo(Command):
    """
    The loaded NNUE network.

    Attributes:
        network: Network file name.
        size_mib: Network size in MiB.
        input_features: Feature transformer inputs.
        hidden_neurons: Width of the first hidden layer.
        head_dimensions: Dimensions of the remaining three layers.
    """

    KEYWORD = EngineKeyword.INFO

    network: str
    size_mib: int = Field(ge=0)
    input_features: int = Field(ge=0)
    hidden_neurons: int = Field(ge=0)
    head_dimensions: tuple[int, int, int]

    @model_validator(mode="after")
    def check_network(self) -> NnueEvaluationInfo:
        if not self.network or any(c.isspace() for c in self.network):
            raise ValueError(f"Invalid network file name {self.network!r}")
        return self

    def encode(self) -> str:
        dims = ", ".join(str(d) for d in (self.input_features, self.hidden_neurons, *self.head_dimensions))
        return f"info string NNUE evaluation using {self.network} ({self.size_mib}MiB, ({dims}))"

    @classmethod
    def decode(cls, line: str) -> NnueEvaluationInfo:
        reader, text = _string_reader(line)
        match = _NNUE_EVALUATION.fullmatch(text)
        if match is None:
            raise reader.error(f"Not an NNUE evaluation record: {text!r}")
        network, size, inputs, hidden, *head = match.groups()
        return cls(
            network=network,
            size_mib=int(size),
            input_features=int(inputs),
            hidden_neurons=int(hidden),
            head_dimensions=tuple(int(d) for d in head),
        )


InfoCommand = Union[AvailableProcessorsInfo, UsingThreadsInfo, NnueEvaluationInfo, InfoStringCommand]

_STRING_RECORDS: tuple[tuple[re.Pattern[str], type[Command]], ...] = (
    (_AVAILABLE_PROCESSORS, AvailableProcessorsInfo),
    (_USING_THREADS, UsingThreadsInfo),
    (_NNUE_EVALUATION, NnueEvaluationInfo),
)


def decode_info_command(line: str) -> InfoCommand:
    """
    Decode an ``info string`` line into the most specific record.

    Raises:
        ParseError: If the line is not an ``info string`` line.
    """
    _, text = _string_reader(line)
    for pattern, record in _STRING_RECORDS:
        if pattern.fullmatch(text):
            try:
                return record.decode(line)  # type: ignore[return-value]
            except (ParseError, ValueError):
                break
    return InfoStringCommand.decode(line)
