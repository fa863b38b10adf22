# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Configuration errors.

Kept apart from the loader so the CLI can catch config failures without
pulling in pydantic or PyYAML.
"""


class ConfigError(Exception):
    """Base for all configuration errors."""


class ConfigLoadError(ConfigError):
    """The config file is missing, unreadable, or not a YAML mapping."""


class ConfigValidationError(ConfigError):
    """
    The YAML parsed but doesn't fit the schema: missing sections, wrong
    types, unknown keys, or a process unit with an unknown options_type.
    """
