# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Fixed-capacity input buffers.

An InputBuffer is one model input: a name, an element type and a shape
that never change after allocation. Numeric buffers are backed by a torch
tensor of the matching dtype; string buffers just hold the last text
written to them.

Writes are strict, the same way the inference runtime is strict about
tensor bytes: integer writes need an int32 buffer and exactly as many
values as the buffer has elements. Anything else is a BufferWriteError,
and the buffer keeps its previous contents.
"""

import math
from typing import Sequence, Union

import torch

from seqprep.metadata.schema import TensorType
from seqprep.processor.exceptions import BufferWriteError

_TORCH_DTYPES: dict[TensorType, torch.dtype] = {
    TensorType.INT32: torch.int32,
    TensorType.INT64: torch.int64,
    TensorType.FLOAT32: torch.float32,
    TensorType.UINT8: torch.uint8,
    TensorType.BOOL: torch.bool,
}


class InputBuffer:
    """One engine-owned model input that preprocessors write into."""

    def __init__(
        self,
        index: int,
        name: str,
        tensor_type: TensorType,
        shape: Sequence[int],
    ) -> None:
        if not shape:
            raise ValueError(f"Buffer '{name}' needs at least one dimension")
        if any(dim <= 0 for dim in shape):
            raise ValueError(f"Buffer '{name}' has a non-positive dimension: {list(shape)}")

        self._index = index
        self._name = name
        self._tensor_type = tensor_type
        self._shape = tuple(shape)
        self._data: Union[torch.Tensor, str]
        if tensor_type is TensorType.STRING:
            self._data = ""
        else:
            self._data = torch.zeros(self._shape, dtype=_TORCH_DTYPES[tensor_type])

    @property
    def index(self) -> int:
        return self._index

    @property
    def name(self) -> str:
        return self._name

    @property
    def tensor_type(self) -> TensorType:
        return self._tensor_type

    @property
    def shape(self) -> tuple[int, ...]:
        return self._shape

    @property
    def data(self) -> Union[torch.Tensor, str]:
        return self._data

    def last_dim_size(self) -> int:
        return self._shape[-1]

    def num_elements(self) -> int:
        return math.prod(self._shape)

    def populate_ints(self, values: Sequence[int]) -> None:
        """
        Overwrite the whole buffer with int32 values.

        Raises:
            BufferWriteError: The buffer isn't int32, len(values) doesn't
                match its element count, or a value doesn't fit in int32.
        """
        self._require_type(TensorType.INT32)
        expected = self.num_elements()
        if len(values) != expected:
            raise BufferWriteError(
                f"Size mismatch for tensor {self._name}: it holds {expected} "
                f"elements but got {len(values)} values."
            )
        try:
            data = torch.tensor(list(values), dtype=torch.int32)
        except (RuntimeError, OverflowError, TypeError) as err:
            raise BufferWriteError(
                f"Value out of range for tensor {self._name}: {err}"
            ) from err
        self._data = data.reshape(self._shape)

    def populate_string(self, text: str) -> None:
        """Store `text` as-is. Only valid on string buffers."""
        self._require_type(TensorType.STRING)
        self._data = text

    def read(self) -> Union[list, str]:
        """Current contents: the string, or the numeric values flattened."""
        if isinstance(self._data, str):
            return self._data
        return self._data.flatten().tolist()

    def _require_type(self, requested: TensorType) -> None:
        if self._tensor_type is not requested:
            raise BufferWriteError(
                f"Type mismatch for tensor {self._name}. "
                f"Requested {requested.value.upper()}, got {self._tensor_type.value.upper()}."
            )

    def __repr__(self) -> str:
        return (
            f"InputBuffer(index={self._index}, name={self._name!r}, "
            f"type={self._tensor_type.value}, shape={list(self._shape)})"
        )
