# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Build tokenizers from process units.

`create_tokenizer_from_process_unit` takes whatever process unit it's
given and builds the matching tokenizer. `create_regex_tokenizer` is the
narrow version for callers that need the regex special ids: it only
accepts regex options and returns the RegexTokenizer capability, so no
caller ever has to check what kind of tokenizer came back.

Every failure, whether a missing unit, an unreadable vocab or model file, or an
unsupported options type, comes out as TokenizerCreationError.
"""

import logging
from typing import Optional

from seqprep.logging.logger import get_logger
from seqprep.metadata.exceptions import MetadataError
from seqprep.metadata.extractor import MetadataExtractor
from seqprep.metadata.schema import (
    BertTokenizerOptions,
    ProcessUnit,
    RegexTokenizerOptions,
    SentencePieceTokenizerOptions,
)
from seqprep.processor.exceptions import TokenizerCreationError
from seqprep.tokenizer.base import RegexTokenizer as RegexTokenizerCapability
from seqprep.tokenizer.base import Tokenizer
from seqprep.tokenizer.bert.core import BertTokenizer
from seqprep.tokenizer.regex.core import RegexTokenizer
from seqprep.tokenizer.sentencepiece.core import SentencePieceTokenizer
from seqprep.tokenizer.vocab.core import load_vocab, load_vocab_and_index

logger: logging.Logger = get_logger(__name__)

_MISSING_UNIT_MESSAGE = "No metadata or input process unit found."


def _read_vocab_file(extractor: Optional[MetadataExtractor], filename: str) -> bytes:
    if extractor is None:
        raise TokenizerCreationError(
            f"Model has no metadata, cannot read vocab file '{filename}'"
        )
    try:
        return extractor.get_associated_file(filename)
    except MetadataError as err:
        raise TokenizerCreationError(f"Cannot load vocab file '{filename}': {err}") from err


def create_regex_tokenizer(
    options: Optional[RegexTokenizerOptions],
    extractor: Optional[MetadataExtractor],
) -> RegexTokenizerCapability:
    """Build a regex tokenizer, or fail when no regex options were found."""
    if options is None:
        raise TokenizerCreationError(_MISSING_UNIT_MESSAGE)

    content = _read_vocab_file(extractor, options.vocab_file)
    vocab = load_vocab_and_index(content, source=options.vocab_file)
    tokenizer = RegexTokenizer(options.delim_regex_pattern, vocab)
    logger.debug(
        "Built regex tokenizer",
        extra={"vocab_file": options.vocab_file, "vocab_size": len(vocab)},
    )
    return tokenizer


def create_bert_tokenizer(
    options: BertTokenizerOptions,
    extractor: Optional[MetadataExtractor],
) -> Tokenizer:
    content = _read_vocab_file(extractor, options.vocab_file)
    vocab = load_vocab(content, source=options.vocab_file)
    tokenizer = BertTokenizer(vocab)
    logger.debug(
        "Built WordPiece tokenizer",
        extra={"vocab_file": options.vocab_file, "vocab_size": len(vocab)},
    )
    return tokenizer


def create_sentencepiece_tokenizer(
    options: SentencePieceTokenizerOptions,
    extractor: Optional[MetadataExtractor],
) -> Tokenizer:
    content = _read_vocab_file(extractor, options.sentencepiece_model)
    tokenizer = SentencePieceTokenizer(content)
    logger.debug(
        "Built SentencePiece tokenizer",
        extra={"model_file": options.sentencepiece_model, "vocab_size": tokenizer.vocab_size()},
    )
    return tokenizer


def create_tokenizer_from_process_unit(
    unit: Optional[ProcessUnit],
    extractor: Optional[MetadataExtractor],
) -> Tokenizer:
    """
    Build whichever tokenizer `unit` describes.

    Raises:
        TokenizerCreationError: unit is None, its options type can't be
            built here, or its vocab or model file can't be read or parsed.
    """
    if unit is None:
        raise TokenizerCreationError(_MISSING_UNIT_MESSAGE)

    if isinstance(unit, BertTokenizerOptions):
        return create_bert_tokenizer(unit, extractor)
    if isinstance(unit, RegexTokenizerOptions):
        return create_regex_tokenizer(unit, extractor)
    if isinstance(unit, SentencePieceTokenizerOptions):
        return create_sentencepiece_tokenizer(unit, extractor)

    raise TokenizerCreationError(f"Incorrect options_type: {unit.options_type}")
