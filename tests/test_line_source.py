"""Tests for line framing over byte buffers and message channels."""

import asyncio

import pytest

from ucicodec.exceptions import TimeoutError, TransportError
from ucicodec.protocol.line_source import (
    ByteBufferLineSource,
    LinePollResult,
    MessageLineSource,
    StreamReaderLineSource,
    TransportLineSource,
    is_echoed_command,
    split_message,
)
from ucicodec.transport.mock import MockTransport


class TestByteBufferLineSource:
    """Tests for the manual-consuming byte buffer source."""

    def test_empty_buffer_is_pending(self):
        source = ByteBufferLineSource()
        assert source.poll_line().result is LinePollResult.PENDING

    def test_partial_line_is_pending(self):
        source = ByteBufferLineSource(b"uci")
        assert source.poll_line().result is LinePollResult.PENDING

    def test_complete_line(self):
        source = ByteBufferLineSource(b"uciok\nreadyok\n")
        poll = source.poll_line()
        assert poll.result is LinePollResult.LINE
        assert poll.line == "uciok\n"
        assert poll.length == 6

    def test_line_is_re_derived_until_consumed(self):
        source = ByteBufferLineSource(b"uciok\nreadyok\n")
        first = source.poll_line()
        second = source.poll_line()
        assert first == second

        source.consume(first.length)
        assert source.poll_line().line == "readyok\n"

    def test_byte_at_a_time(self):
        source = ByteBufferLineSource()
        data = b"id name Stockfish 17.1\n"
        for byte in data[:-1]:
            source.feed(bytes([byte]))
            assert source.poll_line().result is LinePollResult.PENDING
        source.feed(data[-1:])
        assert source.poll_line().line == "id name Stockfish 17.1\n"

    def test_split_multibyte_code_point(self):
        source = ByteBufferLineSource()
        encoded = "id author Jérôme\n".encode("utf-8")
        split = encoded.index("é".encode("utf-8")) + 1

        source.feed(encoded[:split])
        assert source.poll_line().result is LinePollResult.PENDING
        source.feed(encoded[split:])
        assert source.poll_line().line == "id author Jérôme\n"

    def test_length_counts_bytes(self):
        source = ByteBufferLineSource("id author é\n".encode("utf-8"))
        poll = source.poll_line()
        assert poll.length == len("id author é\n".encode("utf-8"))

    def test_invalid_utf8_before_eof_is_pending(self):
        source = ByteBufferLineSource(b"id name \xff\n")
        assert source.poll_line().result is LinePollResult.PENDING

    def test_invalid_utf8_at_eof_raises(self):
        source = ByteBufferLineSource(b"id name \xff\n", eof=True)
        with pytest.raises(TransportError):
            source.poll_line()

    def test_eof_on_empty_buffer(self):
        source = ByteBufferLineSource(eof=True)
        assert source.poll_line().result is LinePollResult.EOF

    def test_unterminated_final_line(self):
        source = ByteBufferLineSource(b"uciok", eof=True)
        poll = source.poll_line()
        assert poll.result is LinePollResult.LINE
        assert poll.line == "uciok"
        source.consume(poll.length)
        assert source.poll_line().result is LinePollResult.EOF

    def test_feed_after_eof_raises(self):
        source = ByteBufferLineSource()
        source.feed_eof()
        with pytest.raises(TransportError):
            source.feed(b"uciok\n")

    def test_consume_out_of_range_raises(self):
        source = ByteBufferLineSource(b"uciok\n")
        with pytest.raises(ValueError):
            source.consume(7)

    def test_restore_not_supported(self):
        source = ByteBufferLineSource(b"uciok\n")
        with pytest.raises(NotImplementedError):
            source.restore("uciok\n")

    @pytest.mark.asyncio
    async def test_wait_readable_wakes_on_feed(self):
        source = ByteBufferLineSource()

        async def feed_later():
            await asyncio.sleep(0)
            source.feed(b"readyok\n")

        task = asyncio.create_task(feed_later())
        await asyncio.wait_for(source.wait_readable(), timeout=1.0)
        await task
        assert source.poll_line().line == "readyok\n"


class TestStreamReaderLineSource:
    """Tests for the asyncio StreamReader source."""

    @pytest.mark.asyncio
    async def test_reads_chunks_until_eof(self):
        reader = asyncio.StreamReader()
        reader.feed_data(b"uci")
        reader.feed_data(b"ok\n")
        reader.feed_eof()
        source = StreamReaderLineSource(reader, chunk_size=2)

        while source.poll_line().result is LinePollResult.PENDING:
            await source.wait_readable()
        poll = source.poll_line()
        assert poll.line == "uciok\n"

        source.consume(poll.length)
        while source.poll_line().result is LinePollResult.PENDING:
            await source.wait_readable()
        assert source.poll_line().result is LinePollResult.EOF


class TestTransportLineSource:
    """Tests for the transport-backed source."""

    @pytest.fixture
    def transport(self):
        return MockTransport()

    @pytest.mark.asyncio
    async def test_reads_from_transport(self, transport):
        await transport.open()
        transport.add_responses(b"ready", b"ok\n")
        source = TransportLineSource(transport)

        await source.wait_readable()
        assert source.poll_line().result is LinePollResult.PENDING
        await source.wait_readable()
        assert source.poll_line().line == "readyok\n"

    @pytest.mark.asyncio
    async def test_empty_read_is_eof(self, transport):
        await transport.open()
        transport.feed_eof()
        source = TransportLineSource(transport)
        await source.wait_readable()
        assert source.at_eof
        assert source.poll_line().result is LinePollResult.EOF

    @pytest.mark.asyncio
    async def test_timeout_propagates(self, transport):
        await transport.open()
        source = TransportLineSource(transport, timeout=0.1)
        with pytest.raises(TimeoutError):
            await source.wait_readable()


class TestSplitMessage:
    """Tests for line-granular message splitting."""

    def test_drops_trailing_empty_element(self):
        assert split_message("id name X\nid author Y\n") == ["id name X", "id author Y"]

    def test_keeps_blank_lines_inside(self):
        assert split_message("id author Y\n\nuciok") == ["id author Y", "", "uciok"]

    def test_strips_carriage_returns(self):
        assert split_message("readyok\r\n") == ["readyok"]

    def test_filters_echoed_commands(self):
        message = "uci\nid name X\nposition startpos moves e2e4\nreadyok\n"
        assert split_message(message, filter_echo=True) == ["id name X", "readyok"]

    def test_echo_detection(self):
        assert is_echoed_command("isready")
        assert is_echoed_command("go depth 10")
        assert not is_echoed_command("go")
        assert not is_echoed_command("uciok")
        assert not is_echoed_command("uci extra")


class TestMessageLineSource:
    """Tests for the auto-consuming message source."""

    def test_lines_are_handed_out_once(self):
        source = MessageLineSource()
        source.feed_message("uciok\nreadyok\n")
        assert len(source) == 2
        assert source.poll_line().line == "uciok"
        assert source.poll_line().line == "readyok"
        assert source.poll_line().result is LinePollResult.PENDING

    def test_restored_line_comes_first(self):
        source = MessageLineSource()
        source.feed_message("uciok\nreadyok\n")
        poll = source.poll_line()
        source.restore(poll.line)
        assert source.poll_line().line == "uciok"

    def test_double_restore_raises(self):
        source = MessageLineSource()
        source.restore("uciok")
        with pytest.raises(RuntimeError):
            source.restore("readyok")

    def test_close_signals_eof(self):
        source = MessageLineSource()
        source.feed_message("uciok")
        source.close()
        assert source.poll_line().line == "uciok"
        assert source.poll_line().result is LinePollResult.EOF

    def test_feed_after_close_raises(self):
        source = MessageLineSource()
        source.close()
        with pytest.raises(TransportError):
            source.feed_message("uciok")

    def test_echo_filter(self):
        source = MessageLineSource(filter_echo=True)
        source.feed_message("isready\nreadyok\n")
        assert len(source) == 1
        assert source.poll_line().line == "readyok"
