"""Tests for TokenReader."""

import pytest

from ucicodec.exceptions import ParseError, ParseErrorKind
from ucicodec.protocol.token_reader import TokenReader


class TestTokenReader:
    """Tests for token access."""

    def test_read_and_peek(self):
        reader = TokenReader("go depth 10\n")
        assert reader.peek() == "go"
        assert reader.read() == "go"
        assert reader.remaining == 2
        reader.expect("depth")
        assert reader.read_int("depth") == 10
        assert reader.position == 3
        assert reader.peek() is None

    def test_trailing_whitespace_ignored(self):
        reader = TokenReader("uciok \r\n")
        assert reader.line == "uciok"
        assert reader.read() == "uciok"
        assert reader.is_at_end()

    def test_read_past_end(self):
        reader = TokenReader("go", command="go")
        reader.read()
        with pytest.raises(ParseError) as exc_info:
            reader.read("depth")
        assert exc_info.value.kind is ParseErrorKind.UNEXPECTED_END_OF_TOKENS
        assert exc_info.value.command == "go"
        assert exc_info.value.field == "depth"

    def test_read_int_invalid(self):
        reader = TokenReader("depth ten")
        reader.skip()
        with pytest.raises(ParseError) as exc_info:
            reader.read_int("depth")
        assert exc_info.value.kind is ParseErrorKind.UNEXPECTED_FORMAT

    def test_read_int_negative(self):
        reader = TokenReader("mate -3")
        reader.skip()
        assert reader.read_int("mate") == -3

    def test_read_int_explicit_plus(self):
        reader = TokenReader("depth +7")
        reader.skip()
        assert reader.read_int("depth") == 7

    @pytest.mark.parametrize("token", ["1_0", "\uff11\uff12", "0x10", "1.5", "-", "+"])
    def test_read_int_rejects_malformed(self, token):
        reader = TokenReader(f"depth {token}")
        reader.skip()
        with pytest.raises(ParseError) as exc_info:
            reader.read_int("depth")
        assert exc_info.value.kind is ParseErrorKind.UNEXPECTED_FORMAT

    def test_skip_past_end(self):
        reader = TokenReader("uciok")
        with pytest.raises(ParseError):
            reader.skip(2)


class TestTokenReaderKeywords:
    """Tests for keyword expectations."""

    def test_expect_command_on_empty_line(self):
        reader = TokenReader("\n")
        with pytest.raises(ParseError) as exc_info:
            reader.expect_command("uciok")
        assert exc_info.value.kind is ParseErrorKind.UNEXPECTED_EOF

    def test_expect_command_mismatch(self):
        reader = TokenReader("readyok")
        with pytest.raises(ParseError) as exc_info:
            reader.expect_command("uciok")
        assert exc_info.value.kind is ParseErrorKind.UNEXPECTED_COMMAND

    def test_expect_command_requires_fields(self):
        reader = TokenReader("id")
        with pytest.raises(ParseError) as exc_info:
            reader.expect_command("id", has_fields=True)
        assert exc_info.value.kind is ParseErrorKind.UNEXPECTED_FORMAT

    def test_expect_mismatch(self):
        reader = TokenReader("option nom Hash")
        reader.skip()
        with pytest.raises(ParseError) as exc_info:
            reader.expect("name")
        assert exc_info.value.kind is ParseErrorKind.UNEXPECTED_FORMAT

    def test_accept(self):
        reader = TokenReader("position startpos moves e2e4")
        reader.skip(2)
        assert not reader.accept("fen")
        assert reader.accept("moves")
        assert reader.read() == "e2e4"

    def test_has_ahead(self):
        reader = TokenReader("setoption name Clear Hash")
        assert not reader.has_ahead("value")
        assert reader.has_ahead("Hash")

    def test_expect_end(self):
        reader = TokenReader("uciok now")
        reader.skip()
        with pytest.raises(ParseError) as exc_info:
            reader.expect_end()
        assert "now" in str(exc_info.value)


class TestTokenReaderSpans:
    """Tests for raw text spans."""

    def test_rest_of_line_preserves_spacing(self):
        reader = TokenReader("id author Jane  Doe\n")
        reader.skip(2)
        assert reader.rest_of_line() == "Jane  Doe"
        assert reader.is_at_end()
        assert reader.rest_of_line() == ""

    def test_read_text_until(self):
        reader = TokenReader("option name Skill Level type spin")
        reader.skip(2)
        assert reader.read_text_until("type") == "Skill Level"
        assert reader.read() == "spin"

    def test_read_text_until_keyword_inside_token_is_ignored(self):
        reader = TokenReader("option name Ultratype type check")
        reader.skip(2)
        assert reader.read_text_until("type") == "Ultratype"

    def test_read_text_until_empty_span(self):
        reader = TokenReader("option name type spin")
        reader.skip(2)
        with pytest.raises(ParseError) as exc_info:
            reader.read_text_until("type")
        assert exc_info.value.kind is ParseErrorKind.UNEXPECTED_FORMAT

    def test_read_text_until_missing_keyword(self):
        reader = TokenReader("option name Hash")
        reader.skip(2)
        with pytest.raises(ParseError) as exc_info:
            reader.read_text_until("type")
        assert exc_info.value.kind is ParseErrorKind.UNEXPECTED_END_OF_TOKENS

    def test_read_tokens_until(self):
        reader = TokenReader("go searchmoves e2e4 d2d4 depth 5")
        reader.skip(2)
        assert reader.read_tokens_until({"depth"}) == ["e2e4", "d2d4"]
        assert reader.peek() == "depth"
