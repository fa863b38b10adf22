# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for the text preprocessor.

Covers tokenizer type selection, the passthrough/regex/Bert encodings,
truncation and padding, Bert role resolution, and every construction-time
error. Vocab ids referenced below come from BERT_VOCAB and REGEX_VOCAB in
conftest.py.
"""

from pathlib import Path
from typing import Callable

import pytest

from seqprep.engine.core import InputEngine
from seqprep.metadata.schema import ModelMetadata
from seqprep.processor.exceptions import (
    BufferWriteError,
    InternalPreprocessorError,
    InvalidConfigurationError,
    ShapeMismatchError,
    TokenizerCreationError,
    TypeMismatchError,
)
from seqprep.processor.text_preprocessor import BertLayout, TextPreprocessor, TokenizerType

CLS, SEP = 2, 3
A, B, C, D, E, F = 4, 5, 6, 7, 8, 9
HELLO, WORLD, JUMP, SUFFIX_S, BANG = 11, 12, 13, 14, 15

START, PAD, UNKNOWN, T1, T3 = 1, 7, 2, 3, 4


def _bert(metadata: ModelMetadata, indices: tuple = (0, 1, 2)) -> tuple[InputEngine, TextPreprocessor]:
    engine = InputEngine.from_metadata(metadata)
    return engine, TextPreprocessor(engine, list(indices))


def _buffers(engine: InputEngine) -> list:
    return [engine.get_input(i).read() for i in range(engine.input_count())]


class TestPassthrough:
    def test_string_buffer_selects_none(self, string_engine: InputEngine) -> None:
        preprocessor = TextPreprocessor(string_engine, [0])
        assert preprocessor.tokenizer_type is TokenizerType.NONE

    def test_text_is_written_verbatim(self, string_engine: InputEngine) -> None:
        preprocessor = TextPreprocessor(string_engine, [0])
        preprocessor.preprocess("hello")
        assert string_engine.get_input(0).read() == "hello"

    def test_no_tokenizer_is_built(self, string_engine: InputEngine) -> None:
        preprocessor = TextPreprocessor(string_engine, [0])
        assert preprocessor._tokenizer is None
        assert preprocessor.bert_layout is None

    def test_case_and_whitespace_are_preserved(self, string_engine: InputEngine) -> None:
        preprocessor = TextPreprocessor(string_engine, [0])
        preprocessor.preprocess("  Mixed CASE\ttext ")
        assert string_engine.get_input(0).read() == "  Mixed CASE\ttext "


class TestBertEncoding:
    def test_selects_bert_for_three_buffers(
        self, bert_metadata: Callable[..., ModelMetadata]
    ) -> None:
        _, preprocessor = _bert(bert_metadata())
        assert preprocessor.tokenizer_type is TokenizerType.BERT
        assert preprocessor.bert_layout == BertLayout(
            ids_index=0, mask_index=1, segment_ids_index=2, max_seq_len=8
        )

    def test_truncates_to_max_seq_len_minus_two(
        self, bert_metadata: Callable[..., ModelMetadata]
    ) -> None:
        engine, preprocessor = _bert(bert_metadata(lengths=(8, 8, 8)))
        preprocessor.preprocess("a b c d e f g")

        ids, mask, segment_ids = _buffers(engine)
        assert ids == [CLS, A, B, C, D, E, F, SEP]
        assert mask == [1] * 8
        assert segment_ids == [0] * 8

    def test_pads_short_input_with_zeros(
        self, bert_metadata: Callable[..., ModelMetadata]
    ) -> None:
        engine, preprocessor = _bert(bert_metadata())
        preprocessor.preprocess("hello world!")

        ids, mask, segment_ids = _buffers(engine)
        assert ids == [CLS, HELLO, WORLD, BANG, SEP, 0, 0, 0]
        assert mask == [1, 1, 1, 1, 1, 0, 0, 0]
        assert segment_ids == [0] * 8

    def test_length_two_keeps_only_markers(
        self, bert_metadata: Callable[..., ModelMetadata]
    ) -> None:
        engine, preprocessor = _bert(bert_metadata(lengths=(2, 2, 2)))
        preprocessor.preprocess("a b c")

        ids, mask, segment_ids = _buffers(engine)
        assert ids == [CLS, SEP]
        assert mask == [1, 1]
        assert segment_ids == [0, 0]

    def test_empty_text_gives_cls_sep(
        self, bert_metadata: Callable[..., ModelMetadata]
    ) -> None:
        engine, preprocessor = _bert(bert_metadata(lengths=(4, 4, 4)))
        preprocessor.preprocess("")

        ids, mask, _ = _buffers(engine)
        assert ids == [CLS, SEP, 0, 0]
        assert mask == [1, 1, 0, 0]

    def test_text_is_lowercased(
        self, bert_metadata: Callable[..., ModelMetadata]
    ) -> None:
        engine, preprocessor = _bert(bert_metadata(lengths=(4, 4, 4)))
        preprocessor.preprocess("HeLLo WORLD")

        ids, _, _ = _buffers(engine)
        assert ids == [CLS, HELLO, WORLD, SEP]

    def test_wordpiece_subwords(
        self, bert_metadata: Callable[..., ModelMetadata]
    ) -> None:
        engine, preprocessor = _bert(bert_metadata(lengths=(5, 5, 5)))
        preprocessor.preprocess("jumps")

        ids, mask, _ = _buffers(engine)
        assert ids == [CLS, JUMP, SUFFIX_S, SEP, 0]
        assert mask == [1, 1, 1, 1, 0]

    def test_unresolved_marker_ids_stay_zero(
        self, bert_metadata: Callable[..., ModelMetadata]
    ) -> None:
        """[CLS]/[SEP] missing from the vocab leave 0 in ids, but mask still counts them."""
        engine, preprocessor = _bert(
            bert_metadata(lengths=(4, 4, 4), vocab_file="vocab_no_specials.txt")
        )
        preprocessor.preprocess("a")

        ids, mask, _ = _buffers(engine)
        # Without [CLS] and [SEP] every id after [UNK] shifts down by 2: a=2.
        assert ids == [0, 2, 0, 0]
        assert mask == [1, 1, 1, 0]

    def test_repeated_calls_are_identical(
        self, bert_metadata: Callable[..., ModelMetadata]
    ) -> None:
        engine, preprocessor = _bert(bert_metadata())
        preprocessor.preprocess("hello world")
        first = _buffers(engine)
        preprocessor.preprocess("hello world")
        assert _buffers(engine) == first

    def test_shorter_text_clears_previous_call(
        self, bert_metadata: Callable[..., ModelMetadata]
    ) -> None:
        engine, preprocessor = _bert(bert_metadata())
        preprocessor.preprocess("a b c d e f")
        preprocessor.preprocess("a")

        ids, mask, _ = _buffers(engine)
        assert ids == [CLS, A, SEP, 0, 0, 0, 0, 0]
        assert mask == [1, 1, 1, 0, 0, 0, 0, 0]


class TestBertRoleResolution:
    def test_roles_resolved_by_tensor_name(
        self, bert_metadata: Callable[..., ModelMetadata]
    ) -> None:
        engine, preprocessor = _bert(
            bert_metadata(names=("segment_ids", "ids", "mask"), lengths=(4, 4, 4))
        )
        assert preprocessor.bert_layout == BertLayout(
            ids_index=1, mask_index=2, segment_ids_index=0, max_seq_len=4
        )

        preprocessor.preprocess("a")
        segment_ids, ids, mask = _buffers(engine)
        assert ids == [CLS, A, SEP, 0]
        assert mask == [1, 1, 1, 0]
        assert segment_ids == [0, 0, 0, 0]

    def test_unknown_names_fall_back_to_given_order(
        self, bert_metadata: Callable[..., ModelMetadata]
    ) -> None:
        names = ("input_word_ids", "input_mask", "input_type_ids")
        _, preprocessor = _bert(bert_metadata(names=names), indices=(2, 0, 1))
        assert preprocessor.bert_layout == BertLayout(
            ids_index=2, mask_index=0, segment_ids_index=1, max_seq_len=8
        )

    def test_partial_name_match_mixes_lookup_and_fallback(
        self, bert_metadata: Callable[..., ModelMetadata]
    ) -> None:
        names = ("input_word_ids", "mask", "input_type_ids")
        _, preprocessor = _bert(bert_metadata(names=names), indices=(0, 2, 1))
        assert preprocessor.bert_layout == BertLayout(
            ids_index=0, mask_index=1, segment_ids_index=1, max_seq_len=8
        )


class TestBertErrors:
    def test_mismatched_lengths_raise_shape_error(
        self, bert_metadata: Callable[..., ModelMetadata]
    ) -> None:
        engine = InputEngine.from_metadata(bert_metadata(lengths=(8, 6, 8)))
        with pytest.raises(ShapeMismatchError) as exc_info:
            TextPreprocessor(engine, [0, 1, 2])

        err = exc_info.value
        assert (err.ids_length, err.mask_length, err.segment_ids_length) == (8, 6, 8)
        assert "(8)" in str(err) and "(6)" in str(err)

    def test_length_below_two_is_rejected(
        self, bert_metadata: Callable[..., ModelMetadata]
    ) -> None:
        engine = InputEngine.from_metadata(bert_metadata(lengths=(1, 1, 1)))
        with pytest.raises(InvalidConfigurationError):
            TextPreprocessor(engine, [0, 1, 2])

    def test_missing_process_unit_fails_tokenizer_creation(
        self, bert_metadata: Callable[..., ModelMetadata]
    ) -> None:
        engine = InputEngine.from_metadata(bert_metadata(vocab_file=None))
        with pytest.raises(TokenizerCreationError, match="No metadata or input process unit"):
            TextPreprocessor(engine, [0, 1, 2])

    def test_missing_vocab_file_fails_tokenizer_creation(
        self, bert_metadata: Callable[..., ModelMetadata]
    ) -> None:
        engine = InputEngine.from_metadata(bert_metadata(vocab_file="nope.txt"))
        with pytest.raises(TokenizerCreationError, match="nope.txt"):
            TextPreprocessor(engine, [0, 1, 2])

    def test_non_int32_buffers_fail_at_write_time(
        self, bert_metadata: Callable[..., ModelMetadata]
    ) -> None:
        engine, preprocessor = _bert(bert_metadata(tensor_type="int64"))
        with pytest.raises(BufferWriteError, match="Type mismatch"):
            preprocessor.preprocess("hello")


class TestRegexEncoding:
    def test_selects_regex_for_int32_with_unit(
        self, regex_metadata: Callable[..., ModelMetadata]
    ) -> None:
        engine = InputEngine.from_metadata(regex_metadata())
        preprocessor = TextPreprocessor(engine, [0])
        assert preprocessor.tokenizer_type is TokenizerType.REGEX
        assert preprocessor.bert_layout is None

    def test_start_unknown_and_pad(
        self, regex_metadata: Callable[..., ModelMetadata]
    ) -> None:
        engine = InputEngine.from_metadata(regex_metadata(length=5))
        TextPreprocessor(engine, [0]).preprocess("t1 t2 t3")
        assert engine.get_input(0).read() == [START, T1, UNKNOWN, T3, PAD]

    def test_without_start_token(
        self, regex_metadata: Callable[..., ModelMetadata]
    ) -> None:
        engine = InputEngine.from_metadata(
            regex_metadata(length=5, vocab_file="regex_vocab_no_start.txt")
        )
        TextPreprocessor(engine, [0]).preprocess("t1 t2 t3")
        assert engine.get_input(0).read() == [T1, UNKNOWN, T3, PAD, PAD]

    def test_excess_tokens_are_dropped(
        self, regex_metadata: Callable[..., ModelMetadata]
    ) -> None:
        engine = InputEngine.from_metadata(regex_metadata(length=3))
        TextPreprocessor(engine, [0]).preprocess("t1 t3 t1 t3 t1")
        assert engine.get_input(0).read() == [START, T1, T3]

    def test_no_case_folding(
        self, regex_metadata: Callable[..., ModelMetadata]
    ) -> None:
        engine = InputEngine.from_metadata(regex_metadata(length=3))
        TextPreprocessor(engine, [0]).preprocess("T1 t1")
        assert engine.get_input(0).read() == [START, UNKNOWN, T1]

    def test_missing_pad_and_unknown_default_to_zero(
        self, regex_metadata: Callable[..., ModelMetadata]
    ) -> None:
        engine = InputEngine.from_metadata(
            regex_metadata(length=4, vocab_file="regex_vocab_bare.txt")
        )
        TextPreprocessor(engine, [0]).preprocess("t3 zzz")
        assert engine.get_input(0).read() == [T3, 0, 0, 0]

    def test_empty_text_is_start_then_padding(
        self, regex_metadata: Callable[..., ModelMetadata]
    ) -> None:
        engine = InputEngine.from_metadata(regex_metadata(length=4))
        TextPreprocessor(engine, [0]).preprocess("")
        assert engine.get_input(0).read() == [START, PAD, PAD, PAD]

    def test_repeated_calls_are_identical(
        self, regex_metadata: Callable[..., ModelMetadata]
    ) -> None:
        engine = InputEngine.from_metadata(regex_metadata())
        preprocessor = TextPreprocessor(engine, [0])
        preprocessor.preprocess("t1 t2 t3")
        first = engine.get_input(0).read()
        preprocessor.preprocess("t1 t2 t3")
        assert engine.get_input(0).read() == first

    def test_one_dimensional_buffer(self, vocab_dir: Path) -> None:
        metadata = ModelMetadata.model_validate(
            {
                "config_version": "1.0.0",
                "associated_files_directory": str(vocab_dir),
                "input_tensors": [
                    {
                        "name": "input_text",
                        "tensor_type": "int32",
                        "shape": [4],
                        "process_units": [
                            {
                                "options_type": "regex_tokenizer",
                                "delim_regex_pattern": r"\s+",
                                "vocab_file": "regex_vocab.txt",
                            }
                        ],
                    }
                ],
            }
        )
        engine = InputEngine.from_metadata(metadata)
        TextPreprocessor(engine, [0]).preprocess("t3")
        assert engine.get_input(0).read() == [START, T3, PAD, PAD]


class TestRegexErrors:
    def test_non_int32_buffer_with_unit_is_type_mismatch(
        self, regex_metadata: Callable[..., ModelMetadata]
    ) -> None:
        engine = InputEngine.from_metadata(regex_metadata(tensor_type="int64"))
        with pytest.raises(TypeMismatchError) as exc_info:
            TextPreprocessor(engine, [0])

        assert exc_info.value.buffer_name == "input_text"
        assert exc_info.value.actual_type == "int64"
        assert "input_text" in str(exc_info.value)
        assert "INT64" in str(exc_info.value)

    def test_numeric_buffer_without_unit_fails_tokenizer_creation(
        self, regex_metadata: Callable[..., ModelMetadata]
    ) -> None:
        engine = InputEngine.from_metadata(regex_metadata(attach_unit=False))
        with pytest.raises(TokenizerCreationError, match="No metadata or input process unit"):
            TextPreprocessor(engine, [0])

    def test_vocab_id_outside_int32_fails_at_construction(
        self,
        vocab_dir: Path,
        regex_metadata: Callable[..., ModelMetadata],
    ) -> None:
        (vocab_dir / "regex_vocab_big.txt").write_text("<PAD> 0\nbig 4294967296\n", encoding="utf-8")
        engine = InputEngine.from_metadata(regex_metadata(vocab_file="regex_vocab_big.txt"))
        with pytest.raises(TokenizerCreationError, match="does not fit in int32"):
            TextPreprocessor(engine, [0])

    def test_float_buffer_without_unit_is_not_a_type_error(
        self, regex_metadata: Callable[..., ModelMetadata]
    ) -> None:
        engine = InputEngine.from_metadata(
            regex_metadata(tensor_type="float32", attach_unit=False)
        )
        with pytest.raises(TokenizerCreationError):
            TextPreprocessor(engine, [0])


class TestConstruction:
    @pytest.mark.parametrize("indices", [[], [0, 1], [0, 1, 2, 0]])
    def test_wrong_buffer_count_is_rejected(
        self,
        indices: list[int],
        bert_metadata: Callable[..., ModelMetadata],
    ) -> None:
        engine = InputEngine.from_metadata(bert_metadata())
        with pytest.raises(InvalidConfigurationError, match=f"got {len(indices)} tensors"):
            TextPreprocessor(engine, indices)

    def test_out_of_range_index_is_rejected(self, string_engine: InputEngine) -> None:
        with pytest.raises(InvalidConfigurationError, match="Invalid input tensor index 3"):
            TextPreprocessor(string_engine, [3])

    def test_corrupted_type_is_internal_error(self, string_engine: InputEngine) -> None:
        preprocessor = TextPreprocessor(string_engine, [0])
        preprocessor._tokenizer_type = None
        with pytest.raises(InternalPreprocessorError):
            preprocessor.preprocess("hello")
