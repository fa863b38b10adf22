# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
seqprep: turn raw text into the fixed-size input buffers of a sequence model.

Subsystems:
  - engine: model input buffers and the engine that owns them
  - metadata: model descriptor schema and the extractor over it
  - tokenizer: WordPiece and regex tokenizers built from process units
  - processor: the text preprocessor (passthrough, regex and Bert encodings)
  - config: YAML config loading and validation
  - cli: the `seqprep` command
"""
