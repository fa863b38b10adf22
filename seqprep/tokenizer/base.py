# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tokenizer capabilities the preprocessor depends on.

Two contracts:

  Tokenizer       tokenize + vocabulary lookups. Enough for Bert encoding.
  RegexTokenizer  the same plus the start/pad/unknown special ids the
                  regex encoder needs to lay out its single input.

The factory hands back an instance of the exact contract the chosen
encoding needs, so the preprocessor never has to check or cast what it got.

Lookups return None for tokens outside the vocabulary. Deciding what an
unresolved token turns into is the encoder's call, not the tokenizer's.
"""

from abc import ABC, abstractmethod
from typing import Optional


class Tokenizer(ABC):
    """Subword tokenization plus vocabulary lookups."""

    @abstractmethod
    def tokenize(self, text: str) -> list[str]:
        """Split text into an ordered list of subword strings."""
        ...

    @abstractmethod
    def lookup_id(self, token: str) -> Optional[int]:
        """Vocabulary id of `token`, or None if it isn't in the vocabulary."""
        ...

    @abstractmethod
    def lookup_word(self, token_id: int) -> Optional[str]:
        """Inverse of lookup_id."""
        ...


class RegexTokenizer(Tokenizer):
    """Tokenizer that also knows its start, pad and unknown special ids."""

    START_TOKEN = "<START>"
    PAD_TOKEN = "<PAD>"
    UNKNOWN_TOKEN = "<UNKNOWN>"

    def start_id(self) -> Optional[int]:
        """Id of <START>, or None when the vocabulary has no start token."""
        return self.lookup_id(self.START_TOKEN)

    def pad_id(self) -> int:
        """Id of <PAD>, 0 when the vocabulary doesn't define one."""
        token_id = self.lookup_id(self.PAD_TOKEN)
        return 0 if token_id is None else token_id

    def unknown_id(self) -> int:
        """Id of <UNKNOWN>, 0 when the vocabulary doesn't define one."""
        token_id = self.lookup_id(self.UNKNOWN_TOKEN)
        return 0 if token_id is None else token_id
