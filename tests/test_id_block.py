"""Tests for identification block assembly."""

import pytest

from ucicodec.exceptions import (
    DuplicateFieldError,
    IncompleteBlockError,
    ParseError,
    ParseErrorKind,
    UciCodecError,
)
from ucicodec.models.engine_commands import IdCommand
from ucicodec.parsers.block_state import BlockState
from ucicodec.parsers.id_block import IdBlock, IdBlockAssembler, IdBlockBuilder, read_id_block
from ucicodec.protocol.dispatch import DispatchResult
from ucicodec.protocol.line_source import ByteBufferLineSource, MessageLineSource

STOCKFISH = IdBlock(name="Stockfish 17.1", author="the Stockfish developers (see AUTHORS file)")


def feed_lines(lines):
    return "".join(line + "\n" for line in lines).encode("utf-8")


class TestIdBlockBuilder:
    """Tests for the partial block."""

    def test_build(self):
        builder = IdBlockBuilder()
        builder.set(IdCommand.author("A"))
        assert builder.try_build() is None
        assert builder.missing_fields() == ["name"]
        builder.set(IdCommand.name("N"))
        assert builder.build() == IdBlock(name="N", author="A")

    def test_duplicate(self):
        builder = IdBlockBuilder()
        builder.set(IdCommand.name("N"))
        with pytest.raises(DuplicateFieldError) as exc_info:
            builder.set(IdCommand.name("M"))
        assert exc_info.value.field == "name"

    def test_incomplete_build(self):
        builder = IdBlockBuilder(name="N")
        with pytest.raises(IncompleteBlockError) as exc_info:
            builder.build()
        assert exc_info.value.missing_fields == ("author",)
        assert exc_info.value.builder is builder
        assert exc_info.value.kind is ParseErrorKind.INCOMPLETE_BLOCK


class TestIdBlock:
    """Tests for the finished block."""

    def test_encode(self, id_lines):
        assert STOCKFISH.encode() == "\n".join(id_lines)


class TestReadIdBlock:
    """Tests for reading the block from a source."""

    @pytest.mark.asyncio
    async def test_transcript(self, id_lines):
        source = ByteBufferLineSource(feed_lines(id_lines), eof=True)
        assert await read_id_block(source) == STOCKFISH

    @pytest.mark.asyncio
    async def test_author_first(self, id_lines):
        source = ByteBufferLineSource(feed_lines(reversed(id_lines)), eof=True)
        assert await read_id_block(source) == STOCKFISH

    @pytest.mark.asyncio
    async def test_stops_after_both_fields(self, id_lines):
        source = ByteBufferLineSource(feed_lines([*id_lines, "", "uciok"]))
        assert await read_id_block(source) == STOCKFISH
        assert source.buffered == b"\nuciok\n"

    @pytest.mark.asyncio
    async def test_duplicate_name(self):
        source = ByteBufferLineSource(feed_lines(["id name A", "id name B", "id author C"]), eof=True)
        with pytest.raises(DuplicateFieldError):
            await read_id_block(source)

    @pytest.mark.asyncio
    async def test_incomplete_at_eof(self):
        source = ByteBufferLineSource(feed_lines(["id name A"]), eof=True)
        with pytest.raises(IncompleteBlockError) as exc_info:
            await read_id_block(source)
        assert exc_info.value.missing_fields == ("author",)

    @pytest.mark.asyncio
    async def test_none_on_empty_stream(self):
        assert await read_id_block(ByteBufferLineSource(eof=True)) is None

    @pytest.mark.asyncio
    async def test_malformed_line(self):
        source = ByteBufferLineSource(feed_lines(["id name A", "uciok"]), eof=True)
        with pytest.raises(ParseError) as exc_info:
            await read_id_block(source)
        assert exc_info.value.kind is ParseErrorKind.UNEXPECTED_COMMAND

    @pytest.mark.asyncio
    async def test_message_source(self, id_lines):
        source = MessageLineSource()
        source.feed_message("\n".join(id_lines))
        assert await read_id_block(source) == STOCKFISH


class TestIdBlockAssembler:
    """Tests for incremental assembly."""

    def test_byte_at_a_time(self, id_lines):
        data = feed_lines(id_lines)
        source = ByteBufferLineSource()
        assembler = IdBlockAssembler()

        for byte in data[:-1]:
            source.feed(bytes([byte]))
            result, block = assembler.poll(source)
            assert result is DispatchResult.PENDING
            assert block is None

        assert assembler.state is BlockState.ACCUMULATING
        assert assembler.builder.name == "Stockfish 17.1"

        source.feed(data[-1:])
        assert assembler.poll(source) == (DispatchResult.OUTCOME, STOCKFISH)
        assert assembler.state is BlockState.COMPLETE

    def test_poll_after_complete_returns_block(self, id_lines):
        source = ByteBufferLineSource(feed_lines(id_lines))
        assembler = IdBlockAssembler()
        assembler.poll(source)
        assert assembler.poll(source) == (DispatchResult.OUTCOME, STOCKFISH)

    def test_end_of_stream_when_empty(self):
        assembler = IdBlockAssembler()
        result, block = assembler.poll(ByteBufferLineSource(eof=True))
        assert result is DispatchResult.END_OF_STREAM
        assert block is None
        assert assembler.state is BlockState.EMPTY

    def test_errored_assembler_refuses(self):
        assembler = IdBlockAssembler()
        with pytest.raises(ParseError):
            assembler.poll(ByteBufferLineSource(b"uciok\n"))
        assert assembler.state is BlockState.ERRORED
        with pytest.raises(UciCodecError):
            assembler.poll(ByteBufferLineSource(b"id name A\n"))
