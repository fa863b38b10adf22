# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Shared pytest fixtures for seqprep tests.

Vocab files are written into a temp directory and descriptors point at it,
so every test runs the real tokenizers end to end. The factory fixtures
build ModelMetadata from a few knobs; tests that need something unusual
build their own.
"""

import textwrap
from pathlib import Path
from typing import Callable, Optional, Sequence

import pytest

from seqprep.engine.core import InputEngine
from seqprep.metadata.schema import ModelMetadata

# Line number is the id: [PAD]=0, [UNK]=1, [CLS]=2, [SEP]=3, a=4 ... g=10,
# hello=11, world=12, jump=13, ##s=14, !=15
BERT_VOCAB = [
    "[PAD]", "[UNK]", "[CLS]", "[SEP]",
    "a", "b", "c", "d", "e", "f", "g",
    "hello", "world", "jump", "##s", "!",
]

REGEX_VOCAB = {"<PAD>": 7, "<START>": 1, "<UNKNOWN>": 2, "t1": 3, "t3": 4}


def _write_index_vocab(path: Path, vocab: dict[str, int]) -> None:
    lines = [f"{token} {index}" for token, index in vocab.items()]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


@pytest.fixture()
def vocab_dir(tmp_path: Path) -> Path:
    """
    A folder with every vocab file the tests use:
      vocab.txt                 WordPiece vocab (BERT_VOCAB)
      vocab_no_specials.txt     WordPiece vocab without [CLS]/[SEP]
      regex_vocab.txt           REGEX_VOCAB
      regex_vocab_no_start.txt  REGEX_VOCAB minus <START>
      regex_vocab_bare.txt      only t1/t3, no special tokens at all
    """
    (tmp_path / "vocab.txt").write_text("\n".join(BERT_VOCAB) + "\n", encoding="utf-8")
    no_specials = [token for token in BERT_VOCAB if token not in ("[CLS]", "[SEP]")]
    (tmp_path / "vocab_no_specials.txt").write_text(
        "\n".join(no_specials) + "\n", encoding="utf-8"
    )

    _write_index_vocab(tmp_path / "regex_vocab.txt", REGEX_VOCAB)
    _write_index_vocab(
        tmp_path / "regex_vocab_no_start.txt",
        {token: index for token, index in REGEX_VOCAB.items() if token != "<START>"},
    )
    _write_index_vocab(tmp_path / "regex_vocab_bare.txt", {"t1": 3, "t3": 4})
    return tmp_path


@pytest.fixture()
def bert_metadata(vocab_dir: Path) -> Callable[..., ModelMetadata]:
    """Factory for a three-input Bert descriptor."""

    def build(
        lengths: Sequence[int] = (8, 8, 8),
        names: Sequence[str] = ("ids", "mask", "segment_ids"),
        tensor_type: str = "int32",
        vocab_file: Optional[str] = "vocab.txt",
    ) -> ModelMetadata:
        units = []
        if vocab_file is not None:
            units.append({"options_type": "bert_tokenizer", "vocab_file": vocab_file})
        return ModelMetadata.model_validate(
            {
                "config_version": "1.0.0",
                "associated_files_directory": str(vocab_dir),
                "input_tensors": [
                    {"name": name, "tensor_type": tensor_type, "shape": [1, length]}
                    for name, length in zip(names, lengths)
                ],
                "input_process_units": units,
            }
        )

    return build


@pytest.fixture()
def regex_metadata(vocab_dir: Path) -> Callable[..., ModelMetadata]:
    """Factory for a single-input descriptor with a regex tokenizer attached."""

    def build(
        length: int = 5,
        tensor_type: str = "int32",
        vocab_file: str = "regex_vocab.txt",
        pattern: str = r"\s+",
        attach_unit: bool = True,
    ) -> ModelMetadata:
        units = []
        if attach_unit:
            units.append(
                {
                    "options_type": "regex_tokenizer",
                    "delim_regex_pattern": pattern,
                    "vocab_file": vocab_file,
                }
            )
        return ModelMetadata.model_validate(
            {
                "config_version": "1.0.0",
                "associated_files_directory": str(vocab_dir),
                "input_tensors": [
                    {
                        "name": "input_text",
                        "tensor_type": tensor_type,
                        "shape": [1, length],
                        "process_units": units,
                    }
                ],
            }
        )

    return build


@pytest.fixture()
def string_engine() -> InputEngine:
    """One string input, no process units."""
    metadata = ModelMetadata.model_validate(
        {
            "config_version": "1.0.0",
            "input_tensors": [{"name": "text", "tensor_type": "string", "shape": [1]}],
        }
    )
    return InputEngine.from_metadata(metadata)


@pytest.fixture()
def bert_config_file(vocab_dir: Path) -> Path:
    """A complete Bert config, vocab folder given relative to the config file."""
    config_content = textwrap.dedent("""\
        global:
          config_version: "1.0.0"
          project_name: "seqprep-test"
          log_level: "DEBUG"
        model:
          config_version: "1.0.0"
          associated_files_directory: "."
          input_tensors:
            - name: "ids"
              tensor_type: "int32"
              shape: [1, 8]
            - name: "mask"
              tensor_type: "int32"
              shape: [1, 8]
            - name: "segment_ids"
              tensor_type: "int32"
              shape: [1, 8]
          input_process_units:
            - options_type: "bert_tokenizer"
              vocab_file: "vocab.txt"
        preprocessor:
          input_indices: [0, 1, 2]
    """)
    config_file = vocab_dir / "bert.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def tmp_config_file(tmp_path: Path) -> Path:
    """The smallest config that passes validation: just a global section."""
    config_content = textwrap.dedent("""\
        global:
          config_version: "1.0.0"
          project_name: "seqprep-test"
          log_level: "DEBUG"
    """)
    config_file = tmp_path / "test_config.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def broken_yaml_file(tmp_path: Path) -> Path:
    """A file that isn't valid YAML at all."""
    config_file = tmp_path / "broken.yaml"
    config_file.write_text("{{not: yaml: at: all:::", encoding="utf-8")
    return config_file
