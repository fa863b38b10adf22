# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Schema for the model descriptor attached to a compiled sequence model.

A descriptor declares the model's input tensors (name, element type,
shape) and the process units that tell a preprocessor how to turn text into
those inputs. Process units show up in two places:

  - on an individual input tensor, e.g. a regex tokenizer attached to the
    single int32 input of a text classifier
  - in the model-wide `input_process_units` list, which is where Bert-style
    models keep their tokenizer because it feeds three tensors at once

Like the config models, everything here is frozen and rejects unknown keys.
Process units are a discriminated union on `options_type`, so a typo in the
type name fails validation instead of silently matching nothing.
"""

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class TensorType(str, Enum):
    """Element types an input buffer can declare."""

    STRING = "string"
    INT32 = "int32"
    INT64 = "int64"
    FLOAT32 = "float32"
    UINT8 = "uint8"
    BOOL = "bool"


class BertTokenizerOptions(BaseModel):
    """WordPiece tokenizer backed by a one-token-per-line vocab file."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    options_type: Literal["bert_tokenizer"] = "bert_tokenizer"
    vocab_file: str = Field(description="Associated file name of the WordPiece vocab")


class RegexTokenizerOptions(BaseModel):
    """Delimiter-regex tokenizer backed by a `token index` vocab file."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    options_type: Literal["regex_tokenizer"] = "regex_tokenizer"
    delim_regex_pattern: str = Field(
        description="Regex matching the delimiters between tokens; matches are dropped",
    )
    vocab_file: str = Field(description="Associated file name of the `token index` vocab")


class SentencePieceTokenizerOptions(BaseModel):
    """Tokenizer backed by a serialized SentencePiece model file."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    options_type: Literal["sentencepiece_tokenizer"] = "sentencepiece_tokenizer"
    sentencepiece_model: str = Field(description="Associated file name of the SentencePiece model")


ProcessUnit = Annotated[
    Union[BertTokenizerOptions, RegexTokenizerOptions, SentencePieceTokenizerOptions],
    Field(discriminator="options_type"),
]


class TensorMetadata(BaseModel):
    """One declared model input."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    name: str = Field(description="Tensor name, used to resolve Bert input roles")
    tensor_type: TensorType = Field(description="Element type of the input buffer")
    shape: list[Annotated[int, Field(gt=0)]] = Field(
        min_length=1,
        description="Dimension sizes; the last one is the sequence length",
    )
    process_units: list[ProcessUnit] = Field(
        default_factory=list,
        description="Process units attached to this tensor only",
    )


class ModelMetadata(BaseModel):
    """
    The full descriptor for one model.

    `input_tensors` is ordered: position i describes engine input i.
    `associated_files_directory` is where vocab files named by process units
    live. The config loader resolves it against the config file's folder
    when it's relative.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    config_version: str = Field(description="Schema version for compatibility tracking")
    input_tensors: list[TensorMetadata] = Field(
        min_length=1,
        description="Declared model inputs, in engine order",
    )
    input_process_units: list[ProcessUnit] = Field(
        default_factory=list,
        description="Model-wide process units; Bert tokenizers live at index 0",
    )
    associated_files_directory: Optional[str] = Field(
        default=None,
        description="Folder holding associated files such as vocabularies",
    )
