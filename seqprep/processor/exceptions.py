# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Exceptions for the text preprocessing path.

Construction-time failures (bad buffer count, wrong element type, Bert
buffers that disagree on length, tokenizer that can't be built) leave no
usable preprocessor behind. Per-call failures (a buffer rejecting the
encoded values) mean that request failed and the buffers may be partially
written. Nothing in here is retried.
"""


class PreprocessorError(Exception):
    """Base for all preprocessing errors."""


class InvalidConfigurationError(PreprocessorError):
    """Wrong number of input buffers, or an index the engine doesn't have."""


class TypeMismatchError(PreprocessorError):
    """A buffer's declared element type doesn't fit the selected tokenizer."""

    def __init__(self, buffer_name: str, actual_type: str, expected_type: str = "int32") -> None:
        self.buffer_name = buffer_name
        self.actual_type = actual_type
        self.expected_type = expected_type
        super().__init__(
            f"Type mismatch for input tensor {buffer_name}. "
            f"Requested {expected_type.upper()} for RegexTokenizer, got {actual_type.upper()}."
        )


class ShapeMismatchError(PreprocessorError):
    """The three Bert input buffers don't share one sequence length."""

    def __init__(self, ids_length: int, mask_length: int, segment_ids_length: int) -> None:
        self.ids_length = ids_length
        self.mask_length = mask_length
        self.segment_ids_length = segment_ids_length
        super().__init__(
            "The three input tensors in Bert models are expected to have same length, "
            f"but got ids_tensor ({ids_length}), mask_tensor ({mask_length}), "
            f"segment_ids_tensor ({segment_ids_length})."
        )


class TokenizerCreationError(PreprocessorError):
    """The tokenizer described by a process unit couldn't be built."""


class BufferWriteError(PreprocessorError):
    """An input buffer refused the values written into it."""


class InternalPreprocessorError(PreprocessorError):
    """The preprocessor ended up in a state construction should have ruled out."""
