# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Read-only accessors over a validated ModelMetadata.

The preprocessor never touches the pydantic models directly. It asks the
extractor three kinds of question:

  - what is attached to input tensor i? (per-tensor process units)
  - what is at position i of the model-wide input process units?
  - give me the bytes of associated file X (vocab files)

plus the name lookup `find_index_by_tensor_name`, which maps a declared
tensor name to its position and returns -1 when the name isn't declared.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence

from seqprep.logging.logger import get_logger
from seqprep.metadata.exceptions import AssociatedFileError
from seqprep.metadata.schema import ModelMetadata, ProcessUnit, TensorMetadata

logger: logging.Logger = get_logger(__name__)


def find_index_by_tensor_name(tensors: Sequence[TensorMetadata], name: str) -> int:
    """Position of the first tensor called `name`, or -1."""
    for index, tensor in enumerate(tensors):
        if tensor.name == name:
            return index
    return -1


class MetadataExtractor:
    """Query interface over one model's descriptor."""

    def __init__(self, metadata: ModelMetadata, base_directory: Optional[Path] = None) -> None:
        self._metadata = metadata
        if metadata.associated_files_directory is not None:
            files_dir = Path(metadata.associated_files_directory)
            if not files_dir.is_absolute() and base_directory is not None:
                files_dir = base_directory / files_dir
        else:
            files_dir = base_directory
        self._files_directory = files_dir

    @property
    def metadata(self) -> ModelMetadata:
        return self._metadata

    def get_input_tensor_metadata(self) -> list[TensorMetadata]:
        return list(self._metadata.input_tensors)

    def get_input_tensor_metadata_at(self, index: int) -> Optional[TensorMetadata]:
        if 0 <= index < len(self._metadata.input_tensors):
            return self._metadata.input_tensors[index]
        return None

    def get_input_process_unit(self, index: int) -> Optional[ProcessUnit]:
        """Model-wide input process unit at `index`, None when out of range."""
        units = self._metadata.input_process_units
        if 0 <= index < len(units):
            return units[index]
        return None

    def get_input_process_units_count(self) -> int:
        return len(self._metadata.input_process_units)

    @staticmethod
    def find_first_process_unit(
        tensor: TensorMetadata,
        options_type: str,
    ) -> Optional[ProcessUnit]:
        """First unit on `tensor` whose options_type matches, None otherwise."""
        for unit in tensor.process_units:
            if unit.options_type == options_type:
                return unit
        return None

    def get_associated_file(self, filename: str) -> bytes:
        """
        Read an associated file by the name a process unit gave for it.

        Raises:
            AssociatedFileError: No files directory is configured, or the file
                is missing or unreadable.
        """
        if self._files_directory is None:
            raise AssociatedFileError(
                f"No associated files directory configured, cannot read '{filename}'"
            )

        path = self._files_directory / filename
        if not path.is_file():
            raise AssociatedFileError(f"Associated file not found: {path}")

        try:
            content = path.read_bytes()
        except OSError as err:
            raise AssociatedFileError(f"Cannot read associated file {path}: {err}") from err

        logger.debug(
            "Read associated file",
            extra={"associated_file": filename, "bytes": len(content)},
        )
        return content
