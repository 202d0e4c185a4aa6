"""Tests for MockTransport."""

import asyncio

import pytest

from ucicodec.exceptions import TimeoutError, TransportError
from ucicodec.transport.mock import MockTransport, ScriptedMockTransport, encode_lines


class TestMockTransport:
    """Tests for MockTransport class."""

    @pytest.fixture
    def transport(self):
        return MockTransport()

    @pytest.mark.asyncio
    async def test_open_close(self, transport):
        assert not transport.is_open
        await transport.open()
        assert transport.is_open
        await transport.close()
        assert not transport.is_open

    @pytest.mark.asyncio
    async def test_double_open_raises(self, transport):
        await transport.open()
        with pytest.raises(TransportError):
            await transport.open()

    @pytest.mark.asyncio
    async def test_write_records_data(self, transport):
        await transport.open()
        await transport.write(b"uci\n")
        await transport.write(b"isready\n")
        assert transport.written_data == [b"uci\n", b"isready\n"]
        assert transport.last_written == b"isready\n"
        assert transport.written_lines == ["uci", "isready"]

    @pytest.mark.asyncio
    async def test_write_when_closed_raises(self, transport):
        with pytest.raises(TransportError):
            await transport.write(b"uci\n")

    @pytest.mark.asyncio
    async def test_read_when_closed_raises(self, transport):
        with pytest.raises(TransportError):
            await transport.read(16)

    @pytest.mark.asyncio
    async def test_each_response_is_a_separate_read(self, transport):
        await transport.open()
        transport.add_responses(b"ready", b"ok\n")
        assert await transport.read(4096) == b"ready"
        assert await transport.read(4096) == b"ok\n"

    @pytest.mark.asyncio
    async def test_read_respects_max_size(self, transport):
        await transport.open()
        transport.add_response(b"readyok\n")
        assert await transport.read(5) == b"ready"
        assert await transport.read(5) == b"ok\n"

    @pytest.mark.asyncio
    async def test_read_no_data_raises_timeout(self, transport):
        await transport.open()
        with pytest.raises(TimeoutError) as exc_info:
            await transport.read(16, timeout=0.5)
        assert exc_info.value.timeout_seconds == 0.5

    @pytest.mark.asyncio
    async def test_read_after_eof(self, transport):
        await transport.open()
        transport.add_lines("uciok")
        transport.feed_eof()
        assert await transport.read(16) == b"uciok\n"
        assert await transport.read(16) == b""

    @pytest.mark.asyncio
    async def test_clear(self, transport):
        await transport.open()
        await transport.write(b"uci\n")
        transport.add_response(b"uciok\n")
        transport.feed_eof()
        transport.clear()
        assert transport.written_data == []
        with pytest.raises(TimeoutError):
            await transport.read(16)

    @pytest.mark.asyncio
    async def test_discard_buffers(self, transport):
        await transport.open()
        transport.add_response(b"buffered data")
        await transport.read(4)
        transport.discard_buffers()
        with pytest.raises(TimeoutError):
            await transport.read(16)

    @pytest.mark.asyncio
    async def test_response_callback(self, transport):
        await transport.open()

        def engine(data: bytes) -> bytes | None:
            return b"readyok\n" if data == b"isready\n" else None

        transport.set_response_callback(engine)
        await transport.write(b"ucinewgame\n")
        await transport.write(b"isready\n")
        assert await transport.read(4096) == b"readyok\n"

    @pytest.mark.asyncio
    async def test_context_manager(self):
        async with MockTransport() as transport:
            assert transport.is_open
            transport.add_lines("readyok")
            assert await transport.read(4096) == b"readyok\n"
        assert not transport.is_open

    def test_encode_lines(self):
        assert encode_lines("id name X", "", "uciok") == b"id name X\n\nuciok\n"

    def test_assert_written(self, transport):
        async def run():
            await transport.open()
            await transport.write(b"uci\n")
            transport.assert_written(b"uci\n")
            transport.assert_written(b"uci\n", 0)
            with pytest.raises(AssertionError):
                transport.assert_written(b"quit\n")

        asyncio.run(run())

    def test_assert_written_nothing_written(self, transport):
        with pytest.raises(AssertionError):
            transport.assert_written(b"uci\n")

    def test_assert_write_count(self, transport):
        async def run():
            await transport.open()
            await transport.write(b"uci\n")
            await transport.write(b"isready\n")
            transport.assert_write_count(2)
            with pytest.raises(AssertionError):
                transport.assert_write_count(3)

        asyncio.run(run())


class TestScriptedMockTransport:
    """Tests for ScriptedMockTransport class."""

    @pytest.fixture
    def transport(self):
        return ScriptedMockTransport()

    @pytest.mark.asyncio
    async def test_scripted_responses(self, transport):
        await transport.open()
        transport.expect(response=b"readyok\n", request=b"isready\n")
        transport.expect(response=b"", request=b"quit\n")

        await transport.write(b"isready\n")
        assert await transport.read(4096) == b"readyok\n"
        await transport.write(b"quit\n")
        assert transport.script_complete

    @pytest.mark.asyncio
    async def test_scripted_any_request(self, transport):
        await transport.open()
        transport.expect(response=b"readyok\n")

        await transport.write(b"anything\n")
        assert await transport.read(4096) == b"readyok\n"

    @pytest.mark.asyncio
    async def test_scripted_wrong_request_raises(self, transport):
        await transport.open()
        transport.expect(response=b"readyok\n", request=b"isready\n")

        with pytest.raises(AssertionError) as exc_info:
            await transport.write(b"uci\n")
        assert "Script mismatch" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_reset_script(self, transport):
        await transport.open()
        transport.expect(response=b"uciok\n")
        transport.expect(response=b"readyok\n")

        await transport.write(b"uci\n")
        await transport.read(4096)

        transport.reset_script()

        await transport.write(b"uci\n")
        assert await transport.read(4096) == b"uciok\n"
