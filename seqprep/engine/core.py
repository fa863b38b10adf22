# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Input side of the inference engine.

The engine owns the model's input buffers and, when the model ships with
one, the metadata extractor for its descriptor. Preprocessors only get to
resolve a buffer by index and ask for the extractor. They never allocate,
resize or replace buffers.

Buffers are allocated once, zero-filled, from the shapes the descriptor
declares. Running the compiled graph is somebody else's job.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence

from seqprep.engine.buffer import InputBuffer
from seqprep.logging.logger import get_logger
from seqprep.metadata.extractor import MetadataExtractor
from seqprep.metadata.schema import ModelMetadata

logger: logging.Logger = get_logger(__name__)


class InputEngine:
    """Holds the ordered input buffers of one model."""

    def __init__(
        self,
        inputs: Sequence[InputBuffer],
        metadata_extractor: Optional[MetadataExtractor] = None,
    ) -> None:
        self._inputs = list(inputs)
        self._metadata_extractor = metadata_extractor

    @classmethod
    def from_metadata(
        cls,
        metadata: ModelMetadata,
        base_directory: Optional[Path] = None,
    ) -> "InputEngine":
        """
        Allocate one buffer per declared input tensor.

        `base_directory` anchors a relative associated files directory,
        normally the folder the descriptor was loaded from.
        """
        inputs = [
            InputBuffer(
                index=index,
                name=tensor.name,
                tensor_type=tensor.tensor_type,
                shape=tensor.shape,
            )
            for index, tensor in enumerate(metadata.input_tensors)
        ]
        logger.debug(
            "Allocated input buffers",
            extra={"buffers": [repr(buffer) for buffer in inputs]},
        )
        return cls(inputs, MetadataExtractor(metadata, base_directory))

    @property
    def metadata_extractor(self) -> Optional[MetadataExtractor]:
        return self._metadata_extractor

    def input_count(self) -> int:
        return len(self._inputs)

    def get_input(self, index: int) -> InputBuffer:
        if not 0 <= index < len(self._inputs):
            raise IndexError(
                f"Input index {index} out of range, engine has {len(self._inputs)} inputs"
            )
        return self._inputs[index]
