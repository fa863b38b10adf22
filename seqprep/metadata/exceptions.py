# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Errors raised while reading model metadata."""


class MetadataError(Exception):
    """Base for all metadata errors."""


class AssociatedFileError(MetadataError):
    """Raised when a process unit names an associated file that can't be read."""
