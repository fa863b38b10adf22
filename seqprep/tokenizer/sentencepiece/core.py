# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
SentencePiece tokenizer.

Loads a serialized SentencePiece model straight from the associated file
bytes. `tokenize` returns the model's pieces as strings. The processor
maps pieces it doesn't know to its own unknown id, so `lookup_id` turns
that back into None unless the piece really is the unknown piece.
"""

from typing import Optional

import sentencepiece as spm

from seqprep.processor.exceptions import TokenizerCreationError
from seqprep.tokenizer.base import Tokenizer


class SentencePieceTokenizer(Tokenizer):
    """Tokenization with a trained SentencePiece model."""

    def __init__(self, model_proto: bytes) -> None:
        try:
            self._sp = spm.SentencePieceProcessor(model_proto=model_proto)
        except (RuntimeError, OSError) as err:
            raise TokenizerCreationError(f"Cannot load SentencePiece model: {err}") from err
        self._unk_id = self._sp.unk_id()

    def tokenize(self, text: str) -> list[str]:
        return self._sp.encode(text, out_type=str)

    def lookup_id(self, token: str) -> Optional[int]:
        token_id = self._sp.piece_to_id(token)
        if token_id == self._unk_id and token != self._sp.id_to_piece(self._unk_id):
            return None
        return token_id

    def lookup_word(self, token_id: int) -> Optional[str]:
        if not 0 <= token_id < self._sp.get_piece_size():
            return None
        return self._sp.id_to_piece(token_id)

    def vocab_size(self) -> int:
        return self._sp.get_piece_size()
