"""Tests for info string records."""

import pytest

from ucicodec.exceptions import ParseError
from ucicodec.models.info_commands import (
    AvailableProcessorsInfo,
    InfoStringCommand,
    NnueEvaluationInfo,
    UsingThreadsInfo,
    decode_info_command,
)

NNUE_BIG = "info string NNUE evaluation using nn-1c0000000000.nnue (133MiB, (22528, 3072, 15, 32, 1))"
NNUE_SMALL = "info string NNUE evaluation using nn-37f18f62d772.nnue (6MiB, (22528, 128, 15, 32, 1))"


class TestInfoRecords:
    """Tests for the records Stockfish prints at startup."""

    def test_available_processors(self):
        record = decode_info_command("info string Available processors: 0-7\n")
        assert record == AvailableProcessorsInfo(first=0, last=7)
        assert record.encode() == "info string Available processors: 0-7"

    @pytest.mark.parametrize("threads,line", [(1, "info string Using 1 thread"), (8, "info string Using 8 threads")])
    def test_using_threads(self, threads, line):
        record = decode_info_command(line)
        assert record == UsingThreadsInfo(threads=threads)
        assert record.encode() == line

    def test_plural_mismatch_falls_back_to_text(self):
        record = decode_info_command("info string Using 1 threads")
        assert record == InfoStringCommand(text="Using 1 threads")

    def test_nnue(self):
        record = decode_info_command(NNUE_BIG)
        assert isinstance(record, NnueEvaluationInfo)
        assert record.network == "nn-1c0000000000.nnue"
        assert record.size_mib == 133
        assert record.input_features == 22528
        assert record.hidden_neurons == 3072
        assert record.head_dimensions == (15, 32, 1)
        assert record.encode() == NNUE_BIG

    def test_nnue_small(self):
        assert decode_info_command(NNUE_SMALL).encode() == NNUE_SMALL

    def test_other_text(self):
        record = decode_info_command("info string Found 5 tablebases")
        assert record == InfoStringCommand(text="Found 5 tablebases")

    def test_missing_text(self):
        with pytest.raises(ParseError):
            decode_info_command("info string")

    def test_not_info_string(self):
        with pytest.raises(ParseError):
            decode_info_command("info depth 10 score cp 20")

    def test_specific_decode_rejects_other_text(self):
        with pytest.raises(ParseError):
            UsingThreadsInfo.decode("info string Found 5 tablebases")

    def test_fullwidth_thread_count_is_plain_text(self):
        record = decode_info_command("info string Using ８ threads")
        assert record == InfoStringCommand(text="Using ８ threads")
