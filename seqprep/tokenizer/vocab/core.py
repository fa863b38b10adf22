# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Vocabulary file parsing.

Two on-disk formats show up in model descriptors:

  WordPiece (Bert)   one token per line, the id is the 0-based line number
  Regex              "token index" per line, ids are explicit

Both parsers return a dict mapping token to id, in file order. When a
token appears twice the first occurrence wins, which keeps ids stable no
matter how a vocab file got concatenated.
"""

from seqprep.processor.exceptions import TokenizerCreationError

# Ids end up in int32 input buffers.
INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


def _decode(content: bytes, source: str) -> list[str]:
    try:
        text = content.decode("utf-8")
    except UnicodeDecodeError as err:
        raise TokenizerCreationError(f"Vocab file {source} is not valid UTF-8: {err}") from err
    return text.splitlines()


def load_vocab(content: bytes, source: str = "<memory>") -> dict[str, int]:
    """Parse a one-token-per-line WordPiece vocabulary."""
    vocab: dict[str, int] = {}
    for line_number, line in enumerate(_decode(content, source)):
        token = line.strip()
        vocab.setdefault(token, line_number)
    if not vocab:
        raise TokenizerCreationError(f"Vocab file {source} is empty")
    return vocab


def load_vocab_and_index(content: bytes, source: str = "<memory>") -> dict[str, int]:
    """
    Parse a "token index" vocabulary.

    Blank lines are skipped. Anything else that isn't exactly a token
    followed by an integer is a format error, reported with its line number.
    """
    vocab: dict[str, int] = {}
    for line_number, line in enumerate(_decode(content, source), start=1):
        if not line.strip():
            continue
        fields = line.split()
        if len(fields) != 2:
            raise TokenizerCreationError(
                f"Vocab file {source} line {line_number}: expected 'token index', got {line!r}"
            )
        token, raw_index = fields
        try:
            index = int(raw_index)
        except ValueError as err:
            raise TokenizerCreationError(
                f"Vocab file {source} line {line_number}: index {raw_index!r} is not an integer"
            ) from err
        if not INT32_MIN <= index <= INT32_MAX:
            raise TokenizerCreationError(
                f"Vocab file {source} line {line_number}: index {index} does not fit in int32"
            )
        vocab.setdefault(token, index)
    if not vocab:
        raise TokenizerCreationError(f"Vocab file {source} is empty")
    return vocab
