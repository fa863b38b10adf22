# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Delimiter-regex tokenizer.

Text is cut at every match of the delimiter pattern, delimiters are
thrown away and so are the empty pieces between adjacent delimiters.
What's left is looked up verbatim in a `token index` vocabulary, with no
case folding and no subword splitting.

The split itself is a `tokenizers` Split pre-tokenizer, so the pattern uses
the same regex dialect as every other tokenizer in the package.
"""

from typing import Optional

from tokenizers import Regex, pre_tokenizers

from seqprep.processor.exceptions import TokenizerCreationError
from seqprep.tokenizer.base import RegexTokenizer as RegexTokenizerBase


class RegexTokenizer(RegexTokenizerBase):
    """Splits on a delimiter regex and maps pieces through a fixed vocab."""

    def __init__(self, delim_regex_pattern: str, vocab: dict[str, int]) -> None:
        try:
            pattern = Regex(delim_regex_pattern)
        except Exception as err:
            raise TokenizerCreationError(
                f"Invalid delimiter regex {delim_regex_pattern!r}: {err}"
            ) from err

        self._splitter = pre_tokenizers.Split(pattern=pattern, behavior="removed")
        self._delim_regex_pattern = delim_regex_pattern
        self._vocab = dict(vocab)
        self._index_to_word = {index: word for word, index in reversed(list(self._vocab.items()))}

    @property
    def delim_regex_pattern(self) -> str:
        return self._delim_regex_pattern

    def tokenize(self, text: str) -> list[str]:
        pieces = self._splitter.pre_tokenize_str(text)
        return [piece for piece, _offsets in pieces if piece]

    def lookup_id(self, token: str) -> Optional[int]:
        return self._vocab.get(token)

    def lookup_word(self, token_id: int) -> Optional[str]:
        return self._index_to_word.get(token_id)
