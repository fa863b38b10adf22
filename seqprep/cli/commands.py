# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Subcommand handlers for the seqprep CLI.

Each handler takes the parsed argparse namespace and returns an exit code.
Results are reported through the structured logger, never print(), so the
output of every command is a stream of JSON lines.

Error mapping:
  - config file problems, or a config without a `model` section  -> CONFIG_ERROR
  - buffers that don't fit the tokenizer (count, type, shape)     -> VALIDATION_ERROR
  - tokenizer construction or buffer write failures               -> RUNTIME_ERROR
"""

import argparse
import logging
from pathlib import Path
from typing import Optional

from seqprep.cli.exit_codes import CONFIG_ERROR, RUNTIME_ERROR, SUCCESS, USER_ERROR, VALIDATION_ERROR
from seqprep.config.exceptions import ConfigError
from seqprep.config.loader import load_config
from seqprep.config.schema import SeqprepConfig
from seqprep.engine.core import InputEngine
from seqprep.logging.logger import get_logger
from seqprep.metadata.schema import ModelMetadata
from seqprep.processor.exceptions import (
    InvalidConfigurationError,
    PreprocessorError,
    ShapeMismatchError,
    TypeMismatchError,
)
from seqprep.processor.text_preprocessor import TextPreprocessor

_VALIDATION_ERRORS = (InvalidConfigurationError, TypeMismatchError, ShapeMismatchError)


def _configure_logging(log_level: str) -> None:
    """Push the chosen level onto every seqprep logger created so far."""
    for name in list(logging.Logger.manager.loggerDict):
        if name == "seqprep" or name.startswith("seqprep."):
            get_logger(name, log_level=log_level)


def _load(
    args: argparse.Namespace,
    command_name: str,
) -> tuple[int, Optional[SeqprepConfig], logging.Logger]:
    """
    Shared setup: load the config and settle the log level.

    The --log-level flag wins over the config's `global.log_level`.
    Returns (exit_code, config, logger); anything but SUCCESS means the
    caller should return straight away.
    """
    log_level = args.log_level or "INFO"
    logger = get_logger(f"seqprep.cli.{command_name}", log_level=log_level)

    if args.config is None:
        logger.error(
            "A config file with a model section is required",
            extra={"command": command_name},
        )
        return USER_ERROR, None, logger

    try:
        config = load_config(Path(args.config))
    except ConfigError as err:
        logger.error(
            "Configuration error",
            extra={"command": command_name, "error": str(err)},
        )
        return CONFIG_ERROR, None, logger

    if args.log_level is None:
        log_level = config.global_config.log_level
    log_file = config.global_config.log_file
    logger = get_logger(
        f"seqprep.cli.{command_name}",
        log_level=log_level,
        log_file=Path(log_file) if log_file is not None else None,
    )
    _configure_logging(log_level)

    if config.model is None:
        logger.error(
            "Config has no model section",
            extra={"command": command_name, "config": args.config},
        )
        return CONFIG_ERROR, None, logger

    return SUCCESS, config, logger


def _build(
    model: ModelMetadata,
    input_indices: list[int],
    config_path: Path,
) -> tuple[InputEngine, TextPreprocessor]:
    engine = InputEngine.from_metadata(model, base_directory=config_path.resolve().parent)
    preprocessor = TextPreprocessor(engine, input_indices)
    return engine, preprocessor


def _create_or_report(
    args: argparse.Namespace,
    command_name: str,
) -> tuple[int, Optional[InputEngine], Optional[TextPreprocessor], logging.Logger]:
    exit_code, config, logger = _load(args, command_name)
    if exit_code != SUCCESS or config is None or config.model is None:
        return exit_code, None, None, logger

    try:
        engine, preprocessor = _build(
            config.model, config.preprocessor.input_indices, Path(args.config)
        )
    except _VALIDATION_ERRORS as err:
        logger.error(
            "Input buffers don't fit the model's tokenizer",
            extra={"command": command_name, "error": str(err), "error_type": type(err).__name__},
        )
        return VALIDATION_ERROR, None, None, logger
    except PreprocessorError as err:
        logger.error(
            "Could not create text preprocessor",
            extra={"command": command_name, "error": str(err), "error_type": type(err).__name__},
        )
        return RUNTIME_ERROR, None, None, logger

    return SUCCESS, engine, preprocessor, logger


def handle_preprocess(args: argparse.Namespace) -> int:
    """Encode --text into the model's input buffers and log their contents."""
    exit_code, engine, preprocessor, logger = _create_or_report(args, "preprocess")
    if exit_code != SUCCESS or engine is None or preprocessor is None:
        return exit_code

    try:
        preprocessor.preprocess(args.text)
    except PreprocessorError as err:
        logger.error(
            "Preprocessing failed",
            extra={"command": "preprocess", "error": str(err), "error_type": type(err).__name__},
        )
        return RUNTIME_ERROR

    buffers = {}
    for index in range(engine.input_count()):
        buffer = engine.get_input(index)
        buffers[buffer.name] = buffer.read()

    logger.info(
        "Preprocess complete",
        extra={
            "command": "preprocess",
            "tokenizer_type": preprocessor.tokenizer_type.value,
            "buffers": buffers,
        },
    )
    return SUCCESS


def handle_info(args: argparse.Namespace) -> int:
    """Report which tokenizer type the preprocessor selects and the buffer layout."""
    exit_code, engine, preprocessor, logger = _create_or_report(args, "info")
    if exit_code != SUCCESS or engine is None or preprocessor is None:
        return exit_code

    inputs = [
        {
            "index": buffer.index,
            "name": buffer.name,
            "type": buffer.tensor_type.value,
            "shape": list(buffer.shape),
        }
        for buffer in (engine.get_input(i) for i in range(engine.input_count()))
    ]
    layout = preprocessor.bert_layout

    logger.info(
        "Preprocessor info",
        extra={
            "command": "info",
            "tokenizer_type": preprocessor.tokenizer_type.value,
            "inputs": inputs,
            "bert_layout": None if layout is None else {
                "ids": layout.ids_index,
                "mask": layout.mask_index,
                "segment_ids": layout.segment_ids_index,
                "max_seq_len": layout.max_seq_len,
            },
        },
    )
    return SUCCESS
