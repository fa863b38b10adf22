# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Text preprocessor: turns one string into the input buffers of a sequence model.

The preprocessor looks at the buffers it was given once, at construction,
and commits to one of three encodings:

  1 string buffer             NONE   the text is written as-is
  1 numeric buffer            REGEX  one int32 array: <START>? t1 t2 ... <PAD> ...
  3 buffers                   BERT   ids / mask / segment_ids arrays

After that, `preprocess(text)` always takes the same path and fills the
same buffers. Nothing carries over between calls except the committed type
and the tokenizer, so the same text always produces the same buffers.

Bert layout, for a max sequence length L:

                   |<------------------- L ------------------->|
    ids            [CLS]  s1  s2 ... sn  [SEP]   0   0  ...   0
    mask             1     1   1 ...  1    1     0   0  ...   0
    segment_ids      0     0   0 ...  0    0     0   0  ...   0

where s1..sn are the first (at most) L - 2 subwords of the lowercased text.
Subwords missing from the vocabulary stay 0 in `ids`; they are not replaced
with the unknown id.

Regex layout, for a buffer whose last dimension is N:

                   |<------------------- N ------------------->|
    input          <START>  t1  t2 ... tk  <PAD>  <PAD>  ...

<START> only appears when the vocabulary defines it. Subwords missing from
the vocabulary become <UNKNOWN>, and whatever doesn't fit is dropped.

Instances own their tokenizer and are not safe to share between threads.
"""

import logging
import string
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from seqprep.engine.buffer import InputBuffer
from seqprep.engine.core import InputEngine
from seqprep.logging.logger import get_logger
from seqprep.metadata.extractor import find_index_by_tensor_name
from seqprep.metadata.schema import RegexTokenizerOptions, TensorType
from seqprep.processor.exceptions import (
    InternalPreprocessorError,
    InvalidConfigurationError,
    ShapeMismatchError,
    TypeMismatchError,
)
from seqprep.tokenizer.base import RegexTokenizer, Tokenizer
from seqprep.tokenizer.factory import create_regex_tokenizer, create_tokenizer_from_process_unit

logger: logging.Logger = get_logger(__name__)

TOKENIZER_PROCESS_UNIT_INDEX = 0
IDS_TENSOR_NAME = "ids"
MASK_TENSOR_NAME = "mask"
SEGMENT_IDS_TENSOR_NAME = "segment_ids"
CLASSIFICATION_TOKEN = "[CLS]"
SEPARATOR_TOKEN = "[SEP]"

_ASCII_TO_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


class TokenizerType(Enum):
    """Which encoding a preprocessor committed to."""

    NONE = "none"
    REGEX = "regex"
    BERT = "bert"


@dataclass(frozen=True)
class BertLayout:
    """Engine input indices for the three Bert roles, plus their shared length."""

    ids_index: int
    mask_index: int
    segment_ids_index: int
    max_seq_len: int


def _invalid_count_message(count: int) -> str:
    return (
        "TextPreprocessor accepts either 1 input tensor (for Regex tokenizer or "
        "String tensor) or 3 input tensors (for Bert tokenizer), "
        f"but got {count} tensors."
    )


class TextPreprocessor:
    """
    Fills a model's text input buffers from raw strings.

    Args:
        engine: Owner of the input buffers and the model metadata.
        input_indices: 1 or 3 engine input indices this preprocessor manages.

    Raises:
        InvalidConfigurationError: Wrong number of indices, or an index the
            engine doesn't have.
        TypeMismatchError: A regex tokenizer is attached to a non-int32 buffer.
        ShapeMismatchError: The Bert buffers disagree on sequence length.
        TokenizerCreationError: The tokenizer couldn't be built.
    """

    def __init__(self, engine: InputEngine, input_indices: Sequence[int]) -> None:
        indices = list(input_indices)
        if len(indices) not in (1, 3):
            raise InvalidConfigurationError(_invalid_count_message(len(indices)))

        for index in indices:
            if not 0 <= index < engine.input_count():
                raise InvalidConfigurationError(
                    f"Invalid input tensor index {index}: the model has "
                    f"{engine.input_count()} input tensors."
                )

        self._engine = engine
        self._input_indices = indices
        self._tokenizer_type: Optional[TokenizerType] = None
        self._tokenizer: Optional[Tokenizer] = None
        self._regex_tokenizer: Optional[RegexTokenizer] = None
        self._bert_layout: Optional[BertLayout] = None

        self._init()

        logger.info(
            "Text preprocessor ready",
            extra={
                "tokenizer_type": self._tokenizer_type.value,
                "input_indices": indices,
                "max_seq_len": self._bert_layout.max_seq_len if self._bert_layout else None,
            },
        )

    @property
    def tokenizer_type(self) -> Optional[TokenizerType]:
        return self._tokenizer_type

    @property
    def bert_layout(self) -> Optional[BertLayout]:
        return self._bert_layout

    def preprocess(self, text: str) -> None:
        """
        Encode `text` into the managed buffers.

        Raises:
            BufferWriteError: A buffer rejected the encoded values. The
                buffers may be partially written.
            InternalPreprocessorError: The committed tokenizer type is not one
                this class knows how to run.
        """
        if self._tokenizer_type is TokenizerType.NONE:
            self._get_buffer().populate_string(text)
            return
        if self._tokenizer_type is TokenizerType.REGEX:
            self._regex_preprocess(text)
            return
        if self._tokenizer_type is TokenizerType.BERT:
            self._bert_preprocess(text)
            return

        # Should never happen, __init__ always commits a type.
        raise InternalPreprocessorError(
            f"The tokenizer type is unsupported: {self._tokenizer_type}"
        )

    def _init(self) -> None:
        extractor = self._engine.metadata_extractor

        if len(self._input_indices) == 1:
            buffer = self._get_buffer()
            if buffer.tensor_type is TensorType.STRING:
                self._tokenizer_type = TokenizerType.NONE
                return

            options = self._find_regex_tokenizer_unit()
            self._tokenizer_type = TokenizerType.REGEX
            self._regex_tokenizer = create_regex_tokenizer(options, extractor)
            self._tokenizer = self._regex_tokenizer
            return

        if len(self._input_indices) == 3:
            # Bert tokenizers live in the model-wide input process units
            # because they feed all three tensors.
            unit = None
            if extractor is not None:
                unit = extractor.get_input_process_unit(TOKENIZER_PROCESS_UNIT_INDEX)
            self._tokenizer_type = TokenizerType.BERT
            self._bert_layout = self._resolve_bert_layout()
            self._tokenizer = create_tokenizer_from_process_unit(unit, extractor)
            return

        # __init__ already rejects other counts.
        raise InvalidConfigurationError(_invalid_count_message(len(self._input_indices)))

    def _find_regex_tokenizer_unit(self) -> Optional[RegexTokenizerOptions]:
        """
        Look for a regex tokenizer attached to the single input buffer.

        Finding nothing is not an error, it just means the model didn't
        attach one. Finding one on a buffer that isn't int32 is.
        """
        extractor = self._engine.metadata_extractor
        if extractor is None:
            return None

        tensor_metadata = extractor.get_input_tensor_metadata_at(self._input_indices[0])
        if tensor_metadata is None:
            return None

        unit = extractor.find_first_process_unit(tensor_metadata, "regex_tokenizer")
        if unit is None:
            return None

        buffer = self._get_buffer()
        if buffer.tensor_type is not TensorType.INT32:
            raise TypeMismatchError(buffer.name, buffer.tensor_type.value)
        return unit

    def _resolve_bert_layout(self) -> BertLayout:
        extractor = self._engine.metadata_extractor
        tensors = extractor.get_input_tensor_metadata() if extractor is not None else []

        def resolve(name: str, fallback: int) -> int:
            index = find_index_by_tensor_name(tensors, name)
            return fallback if index == -1 else index

        ids_index = resolve(IDS_TENSOR_NAME, self._input_indices[0])
        mask_index = resolve(MASK_TENSOR_NAME, self._input_indices[1])
        segment_ids_index = resolve(SEGMENT_IDS_TENSOR_NAME, self._input_indices[2])

        ids_len = self._last_dim_size(ids_index)
        mask_len = self._last_dim_size(mask_index)
        segment_ids_len = self._last_dim_size(segment_ids_index)
        if ids_len != mask_len or ids_len != segment_ids_len:
            raise ShapeMismatchError(ids_len, mask_len, segment_ids_len)
        if ids_len < 2:
            raise InvalidConfigurationError(
                f"Bert input tensors need room for [CLS] and [SEP], but their length is {ids_len}."
            )

        return BertLayout(
            ids_index=ids_index,
            mask_index=mask_index,
            segment_ids_index=segment_ids_index,
            max_seq_len=ids_len,
        )

    def _bert_preprocess(self, text: str) -> None:
        layout = self._bert_layout
        tokenizer = self._tokenizer
        if layout is None or tokenizer is None:
            raise InternalPreprocessorError("Bert preprocessing used before initialization")

        max_seq_len = layout.max_seq_len
        subwords = tokenizer.tokenize(text.translate(_ASCII_TO_LOWER))

        # 2 accounts for [CLS] and [SEP].
        query_tokens = subwords[: max_seq_len - 2]
        tokens = [CLASSIFICATION_TOKEN, *query_tokens, SEPARATOR_TOKEN]

        input_ids = [0] * max_seq_len
        input_mask = [0] * max_seq_len
        for position, token in enumerate(tokens):
            token_id = tokenizer.lookup_id(token)
            if token_id is not None:
                input_ids[position] = token_id
            input_mask[position] = 1

        logger.debug(
            "Bert encoding",
            extra={
                "subwords": len(subwords),
                "kept": len(query_tokens),
                "dropped": len(subwords) - len(query_tokens),
            },
        )

        self._engine.get_input(layout.ids_index).populate_ints(input_ids)
        self._engine.get_input(layout.mask_index).populate_ints(input_mask)
        self._engine.get_input(layout.segment_ids_index).populate_ints([0] * max_seq_len)

    def _regex_preprocess(self, text: str) -> None:
        tokenizer = self._regex_tokenizer
        if tokenizer is None:
            raise InternalPreprocessorError("Regex preprocessing used before initialization")

        buffer = self._get_buffer()
        subwords = tokenizer.tokenize(text)
        max_sentence_length = buffer.last_dim_size()
        unknown_id = tokenizer.unknown_id()

        input_tokens = [tokenizer.pad_id()] * max_sentence_length
        position = 0
        start_id = tokenizer.start_id()
        if start_id is not None:
            input_tokens[0] = start_id
            position = 1

        written = 0
        for token in subwords:
            if position >= max_sentence_length:
                break
            token_id = tokenizer.lookup_id(token)
            input_tokens[position] = unknown_id if token_id is None else token_id
            position += 1
            written += 1

        logger.debug(
            "Regex encoding",
            extra={"subwords": len(subwords), "kept": written},
        )

        buffer.populate_ints(input_tokens)

    def _get_buffer(self, position: int = 0) -> InputBuffer:
        return self._engine.get_input(self._input_indices[position])

    def _last_dim_size(self, index: int) -> int:
        return self._engine.get_input(index).last_dim_size()
