# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Type-safe configuration schemas for seqprep.

A config file has three sections:

  global:        logging and project identity
  model:         the model descriptor (inputs, process units, vocab folder)
  preprocessor:  which engine inputs the text preprocessor manages

All models are frozen pydantic v2 models with:
  - frozen=True: no mutation after loading
  - extra="forbid": unknown keys fail loudly
  - validate_default=True: defaults go through validation too
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from seqprep.metadata.schema import ModelMetadata


class GlobalConfig(BaseModel):
    """Cross-cutting settings, applied before anything else runs."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    config_version: str = Field(
        description="Schema version for compatibility tracking, e.g. '1.0.0'"
    )
    project_name: str = Field(
        default="seqprep", description="Human-readable project identifier"
    )
    log_level: str = Field(
        default="INFO",
        description="One of DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional path for file-based log output",
    )

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        upper = value.upper()
        if upper not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level '{value}'")
        return upper


class PreprocessorConfig(BaseModel):
    """
    Which engine inputs the text preprocessor fills.

    One index for a string or regex-tokenized input, three for Bert models.
    The count is checked again when the preprocessor is built, but catching
    it here gives a config error instead of a runtime one.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    input_indices: list[int] = Field(
        default_factory=lambda: [0],
        description="Engine input indices, 1 (string/regex) or 3 (bert) of them",
    )

    @field_validator("input_indices")
    @classmethod
    def _check_input_indices(cls, value: list[int]) -> list[int]:
        if len(value) not in (1, 3):
            raise ValueError(
                f"expected 1 or 3 input indices, got {len(value)}"
            )
        if any(index < 0 for index in value):
            raise ValueError(f"input indices must be non-negative, got {value}")
        return value


class SeqprepConfig(BaseModel):
    """
    Top-level config container.

    `model` is optional so a bare `global:` file still loads. Commands that
    need a model check for it and report a config error when it's missing.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    global_config: GlobalConfig = Field(alias="global")
    model: Optional[ModelMetadata] = Field(default=None)
    preprocessor: PreprocessorConfig = Field(default_factory=PreprocessorConfig)
