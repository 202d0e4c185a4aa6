"""
UCI engine client.

This module provides a thin controller-side client that drives the codec
over a transport: it sends commands and reads the engine's replies.

The client tracks the connection lifecycle:
    DISCONNECTED -> connect() -> CONNECTED
    CONNECTED -> quit() -> DISCONNECTED

Example:
    >>> from ucicodec import EngineClient
    >>> from ucicodec.transport import AsyncSerialTransport
    >>>
    >>> async def main():
    ...     async with EngineClient(AsyncSerialTransport("/dev/ttyUSB0")) as client:
    ...         print(client.engine_name)
    ...         await client.set_option(OptionKind.THREADS, 4)
    ...         await client.wait_ready()
"""

from __future__ import annotations

import logging
from enum import Enum, auto
from typing import TYPE_CHECKING

from ucicodec.exceptions import ConnectionError, ParseError, ProtocolError
from ucicodec.models.command import Command
from ucicodec.models.engine_commands import ReadyOkCommand, decode_engine_command
from ucicodec.models.gui_commands import (
    GoCommand,
    IsReadyCommand,
    PositionCommand,
    QuitCommand,
    SetOptionCommand,
    StopCommand,
    UciCommand,
    UciNewGameCommand,
)
from ucicodec.models.info_commands import InfoCommand
from ucicodec.models.values import OptionKind
from ucicodec.parsers.handshake import HandshakeOptions, HandshakeResponse, HandshakeSequencer
from ucicodec.protocol.constants import EngineKeyword, ProtocolConstants
from ucicodec.protocol.dispatch import LineOutcome, handle_next_line
from ucicodec.protocol.line_source import TransportLineSource

if TYPE_CHECKING:
    from ucicodec.models.values import NumaPolicy
    from ucicodec.parsers.option_block import OptionBlock
    from ucicodec.transport.abc import AbstractTransport

logger = logging.getLogger(__name__)


class ClientState(Enum):
    """Engine client connection states."""

    DISCONNECTED = auto()
    """No handshake has been performed."""

    CONNECTING = auto()
    """``uci`` was sent and the handshake is being read."""

    CONNECTED = auto()
    """Handshake complete; the engine accepts commands."""

    DISCONNECTING = auto()
    """``quit`` is being sent."""


def _decode_banner_line(line: str) -> LineOutcome[str]:
    # Engines print a banner before answering uci; stop at the first id line
    tokens = line.split(maxsplit=1)
    if tokens and tokens[0] == EngineKeyword.ID:
        return LineOutcome.peeked()
    return LineOutcome.read(line.rstrip())


def _decode_ready_reply(line: str) -> LineOutcome[Command | None]:
    if not line.strip():
        return LineOutcome.read(None)
    try:
        return LineOutcome.read(decode_engine_command(line))
    except ParseError as e:
        return LineOutcome.failed(e)


class EngineClient:
    """
    Client for a UCI engine.

    Attributes:
        state: Current connection state.
        handshake: The engine's reply to ``uci`` (once connected).
        transport: The underlying transport layer.

    Example:
        >>> client = EngineClient(transport)
        >>> await client.connect()
        >>> await client.set_position(moves=("e2e4",))
        >>> await client.go(depth=12)
        >>> await client.quit()
    """

    def __init__(
        self,
        transport: AbstractTransport,
        timeout: float = ProtocolConstants.DEFAULT_RECEIVE_TIMEOUT,
        handshake_options: HandshakeOptions | None = None,
    ) -> None:
        """
        Initialize the engine client.

        Args:
            transport: Transport carrying the engine's byte stream.
            timeout: Time to wait for each chunk of engine output, in seconds.
            handshake_options: How strictly to read the ``uci`` reply.
        """
        self._transport = transport
        self._timeout = timeout
        self._handshake_options = handshake_options or HandshakeOptions()
        self._state = ClientState.DISCONNECTED
        self._handshake: HandshakeResponse | None = None
        self._source = TransportLineSource(transport, timeout=timeout)

    @property
    def state(self) -> ClientState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state == ClientState.CONNECTED

    @property
    def transport(self) -> AbstractTransport:
        return self._transport

    @property
    def handshake(self) -> HandshakeResponse | None:
        return self._handshake

    @property
    def engine_name(self) -> str | None:
        """Name from ``id name``, if connected."""
        return self._handshake.id_block.name if self._handshake else None

    @property
    def engine_author(self) -> str | None:
        return self._handshake.id_block.author if self._handshake else None

    @property
    def options(self) -> OptionBlock | None:
        """Options the engine declared during the handshake."""
        return self._handshake.option_block if self._handshake else None

    async def connect(self) -> HandshakeResponse:
        """
        Perform the ``uci`` handshake.

        Opens the transport if needed, sends ``uci``, skips any banner the
        engine prints first, then reads the identification block, option
        declarations and ``uciok``.

        Returns:
            The engine's handshake reply.

        Raises:
            ConnectionError: If already connected or the engine closed the
                stream without identifying itself.
            HandshakeError: If the reply is malformed.
            TimeoutError: If the engine stops producing output.
        """
        if self._state != ClientState.DISCONNECTED:
            raise ConnectionError(f"Cannot connect: client is in {self._state.name} state")

        if not self._transport.is_open:
            logger.debug("Opening transport %s", self._transport.port_name)
            await self._transport.open()

        self._state = ClientState.CONNECTING
        logger.info("Starting handshake on %s", self._transport.port_name)

        try:
            await self._write(UciCommand())
            await self._skip_banner()
            response = await HandshakeSequencer(self._handshake_options).read(self._source)
        except Exception:
            self._state = ClientState.DISCONNECTED
            raise

        if response is None:
            self._state = ClientState.DISCONNECTED
            raise ConnectionError("Engine closed the stream before identifying itself")

        self._handshake = response
        self._state = ClientState.CONNECTED
        logger.info(
            "Connected to %s (%d options)",
            response.id_block.name,
            len(response.option_block),
        )
        return response

    async def wait_ready(self) -> list[InfoCommand]:
        """
        Send ``isready`` and wait for ``readyok``.

        Returns:
            ``info`` records the engine printed before ``readyok``, such as
            the thread count after a Threads change.

        Raises:
            ProtocolError: If the engine replies with anything else, or the
                stream ends first.
        """
        self._ensure_connected()
        await self._write(IsReadyCommand())

        infos: list[InfoCommand] = []
        while True:
            outcome = await handle_next_line(self._source, _decode_ready_reply)
            if outcome is None:
                raise ProtocolError("Stream ended while waiting for readyok")
            reply = outcome.unwrap()
            if reply is None:
                continue
            if isinstance(reply, ReadyOkCommand):
                logger.debug("Engine ready (%d info lines)", len(infos))
                return infos
            if reply.KEYWORD == EngineKeyword.INFO:
                logger.debug("Engine info: %s", reply)
                infos.append(reply)  # type: ignore[arg-type]
                continue
            raise ProtocolError(f"Unexpected reply to isready: {reply.encode()!r}")

    async def send(self, command: Command) -> None:
        """
        Send any controller command.

        Raises:
            ConnectionError: If not connected.
        """
        self._ensure_connected()
        await self._write(command)

    async def new_game(self) -> None:
        await self.send(UciNewGameCommand())

    async def set_position(self, fen: str | None = None, moves: tuple[str, ...] = ()) -> None:
        """Set up the start position (or ``fen``) followed by ``moves``."""
        await self.send(PositionCommand(fen=fen, moves=moves))

    async def set_option(
        self,
        option: OptionKind | str,
        value: int | bool | str | NumaPolicy | None = None,
    ) -> None:
        """
        Change an engine option.

        Well-known options are rendered according to their catalogue type.
        Any other name is sent with ``value`` as raw text.

        Raises:
            TypeError: If ``value`` does not fit a well-known option's type.
        """
        kind = option if isinstance(option, OptionKind) else OptionKind.lookup(option)
        if kind is None:
            command = SetOptionCommand(name=option, value=None if value is None else str(value))
        else:
            command = SetOptionCommand.for_option(kind, value)
        await self.send(command)

    async def go(self, **limits: object) -> None:
        """
        Start a search.

        Args:
            **limits: ``go`` fields, e.g. ``depth=20`` or ``movetime=1000``.
        """
        await self.send(GoCommand(**limits))

    async def stop(self) -> None:
        await self.send(StopCommand())

    async def quit(self) -> None:
        """
        Send ``quit``. Safe to call even if not connected.
        """
        if self._state == ClientState.DISCONNECTED:
            return

        logger.info("Disconnecting from %s", self.engine_name)
        self._state = ClientState.DISCONNECTING
        try:
            await self._write(QuitCommand())
        finally:
            self._state = ClientState.DISCONNECTED
            self._handshake = None
            logger.debug("Disconnected")

    async def _skip_banner(self) -> None:
        while True:
            outcome = await handle_next_line(self._source, _decode_banner_line)
            if outcome is None or outcome.is_peeked:
                return
            logger.debug("Skipped banner line %r", outcome.value)

    async def _write(self, command: Command) -> None:
        logger.debug("Sending %r", command.encode())
        await self._transport.write(command.to_line().encode("utf-8"))

    def _ensure_connected(self) -> None:
        if self._state != ClientState.CONNECTED:
            raise ConnectionError(f"Not connected (state: {self._state.name})")

    async def __aenter__(self) -> EngineClient:
        """Open the transport and perform the handshake."""
        if not self._transport.is_open:
            await self._transport.open()
        try:
            await self.connect()
        except BaseException:
            if self._transport.is_open:
                await self._transport.close()
            raise
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Send ``quit`` and close the transport."""
        try:
            if self._state != ClientState.DISCONNECTED:
                await self.quit()
        finally:
            if self._transport.is_open:
                await self._transport.close()

    def __repr__(self) -> str:
        name = self.engine_name or "None"
        return f"EngineClient(state={self._state.name}, engine={name!r})"
