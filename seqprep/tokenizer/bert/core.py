# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
WordPiece tokenizer for Bert-style models.

Built on the HuggingFace `tokenizers` WordPiece model with the Bert
normalizer and pre-tokenizer: text is cleaned, split on whitespace and
punctuation, then each word is broken into the longest vocabulary pieces,
continuation pieces carrying the `##` prefix. Words that can't be pieced
together come out as `[UNK]`.

No post-processor is attached, so `tokenize` never inserts [CLS]/[SEP].
The preprocessor adds those itself, after truncation. Lowercasing is also
left to the caller; the normalizer here keeps case.
"""

from typing import Optional

from tokenizers import Tokenizer as HFTokenizer
from tokenizers import normalizers, pre_tokenizers
from tokenizers.models import WordPiece

from seqprep.processor.exceptions import TokenizerCreationError
from seqprep.tokenizer.base import Tokenizer

UNKNOWN_TOKEN = "[UNK]"
CONTINUING_SUBWORD_PREFIX = "##"
MAX_INPUT_CHARS_PER_WORD = 100


class BertTokenizer(Tokenizer):
    """WordPiece tokenization over a fixed vocabulary."""

    def __init__(self, vocab: dict[str, int]) -> None:
        if UNKNOWN_TOKEN not in vocab:
            raise TokenizerCreationError(
                f"WordPiece vocabulary must contain the unknown token {UNKNOWN_TOKEN}"
            )

        model = WordPiece(
            vocab=dict(vocab),
            unk_token=UNKNOWN_TOKEN,
            continuing_subword_prefix=CONTINUING_SUBWORD_PREFIX,
            max_input_chars_per_word=MAX_INPUT_CHARS_PER_WORD,
        )
        tokenizer = HFTokenizer(model)
        tokenizer.normalizer = normalizers.BertNormalizer(
            clean_text=True,
            handle_chinese_chars=True,
            strip_accents=False,
            lowercase=False,
        )
        tokenizer.pre_tokenizer = pre_tokenizers.BertPreTokenizer()
        self._tokenizer = tokenizer

    def tokenize(self, text: str) -> list[str]:
        return self._tokenizer.encode(text, add_special_tokens=False).tokens

    def lookup_id(self, token: str) -> Optional[int]:
        return self._tokenizer.token_to_id(token)

    def lookup_word(self, token_id: int) -> Optional[str]:
        return self._tokenizer.id_to_token(token_id)

    def vocab_size(self) -> int:
        return self._tokenizer.get_vocab_size()
