"""Shared fixtures: Stockfish 17.1 handshake transcript."""

import pytest

from ucicodec.transport.mock import MockTransport

ID_LINES = [
    "id name Stockfish 17.1",
    "id author the Stockfish developers (see AUTHORS file)",
]

OPTION_LINES = [
    "option name Debug Log File type string default <empty>",
    "option name NumaPolicy type string default auto",
    "option name Threads type spin default 1 min 1 max 1024",
    "option name Hash type spin default 16 min 1 max 33554432",
    "option name Clear Hash type button",
    "option name Ponder type check default false",
    "option name MultiPV type spin default 1 min 1 max 256",
    "option name Skill Level type spin default 20 min 0 max 20",
    "option name Move Overhead type spin default 10 min 0 max 5000",
    "option name nodestime type spin default 0 min 0 max 10000",
    "option name UCI_Chess960 type check default false",
    "option name UCI_LimitStrength type check default false",
    "option name UCI_Elo type spin default 1320 min 1320 max 3190",
    "option name UCI_ShowWDL type check default false",
    "option name SyzygyPath type string default <empty>",
    "option name SyzygyProbeDepth type spin default 1 min 1 max 100",
    "option name Syzygy50MoveRule type check default true",
    "option name SyzygyProbeLimit type spin default 7 min 0 max 7",
    "option name EvalFile type string default nn-1c0000000000.nnue",
    "option name EvalFileSmall type string default nn-37f18f62d772.nnue",
]

HANDSHAKE_LINES = [*ID_LINES, "", *OPTION_LINES, "", "uciok"]

BANNER = "Stockfish 17.1 by the Stockfish developers (see AUTHORS file)"


def to_bytes(lines: list[str]) -> bytes:
    return "".join(line + "\n" for line in lines).encode("utf-8")


@pytest.fixture
def id_lines():
    return list(ID_LINES)


@pytest.fixture
def option_lines():
    return list(OPTION_LINES)


@pytest.fixture
def handshake_bytes():
    """Full reply to ``uci``, byte-for-byte as Stockfish sends it."""
    return to_bytes(HANDSHAKE_LINES)


@pytest.fixture
def mock_transport():
    return MockTransport()


@pytest.fixture
def engine_transport():
    """Mock transport that answers like Stockfish."""
    transport = MockTransport()

    def respond(data: bytes) -> bytes | None:
        if data == b"uci\n":
            return to_bytes([BANNER, *HANDSHAKE_LINES])
        if data == b"isready\n":
            return b"readyok\n"
        if data == b"setoption name Threads value 4\n":
            return b"info string Using 4 threads\n"
        return None

    transport.set_response_callback(respond)
    return transport
