# Copyright 2026 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""Structured errors for updatekit.

Every error carries a unique ``UK-NAMED-KEY`` code, a human-readable
message, and an optional hint with a suggested fix. Two subclasses exist
for the failures callers are expected to catch by type:

- :class:`InvalidGroupConfigurationError`: a dependency group was
  declared with an unusable rule value (raised at construction).
- :class:`ConfigurationError`: the grouping engine was used out of
  order (raised at call time).

Code categories::

    UK-CONFIG-*        Job configuration errors
    UK-GROUP-*         Dependency group errors
    UK-REQUIREMENT-*   Version requirement errors
    UK-ALL-VERSIONS-*  Candidate filtering errors

Usage::

    from updatekit.errors import E, UpdateKitError

    raise UpdateKitError(
        code=E.CONFIG_INVALID_VALUE,
        message="'groups' must be a mapping, got list",
        hint='Declare each group as a key under groups:.',
    )
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from enum import Enum
from typing import TextIO

from rich.console import Console
from rich.markup import escape as rich_escape


class ErrorCode(str, Enum):
    """All updatekit diagnostic codes."""

    # Job configuration
    CONFIG_NOT_FOUND = 'UK-CONFIG-NOT-FOUND'
    CONFIG_PARSE_ERROR = 'UK-CONFIG-PARSE-ERROR'
    CONFIG_INVALID_KEY = 'UK-CONFIG-INVALID-KEY'
    CONFIG_INVALID_VALUE = 'UK-CONFIG-INVALID-VALUE'
    CONFIG_MISSING_REQUIRED = 'UK-CONFIG-MISSING-REQUIRED'

    # Dependency groups
    GROUP_INVALID_CEILING = 'UK-GROUP-INVALID-CEILING'
    GROUP_ALREADY_ASSIGNED = 'UK-GROUP-ALREADY-ASSIGNED'

    # Requirements and candidates
    REQUIREMENT_INVALID = 'UK-REQUIREMENT-INVALID'
    ALL_VERSIONS_IGNORED = 'UK-ALL-VERSIONS-IGNORED'


# Convenience alias for shorter imports.
E = ErrorCode


@dataclass(frozen=True)
class ErrorInfo:
    """Code, message and hint for a single diagnostic.

    Attributes:
        code: The ``UK-NAMED-KEY`` error code.
        message: Human-readable description of what went wrong.
        hint: Optional suggestion for how to fix the error.
    """

    code: ErrorCode
    message: str
    hint: str = ''


class UpdateKitError(Exception):
    """Base exception for all updatekit errors.

    Args:
        code: The error code from :class:`ErrorCode`.
        message: Human-readable description of what went wrong.
        hint: Optional suggestion for how to fix the error.
    """

    def __init__(self, code: ErrorCode, message: str, hint: str = '') -> None:
        """Initialize with an error code, message, and optional hint."""
        self.info = ErrorInfo(code=code, message=message, hint=hint)
        super().__init__(message)

    @property
    def code(self) -> ErrorCode:
        """The error code."""
        return self.info.code

    @property
    def hint(self) -> str:
        """Suggestion for fixing this error, or empty string."""
        return self.info.hint

    def __str__(self) -> str:
        """Return the bare message so callers can match on its text."""
        return self.info.message


class InvalidGroupConfigurationError(UpdateKitError, ValueError):
    """A dependency group rule holds a value outside its allowed set."""


class ConfigurationError(UpdateKitError):
    """The grouping engine was configured more than once."""


ERRORS: dict[ErrorCode, ErrorInfo] = {
    E.CONFIG_NOT_FOUND: ErrorInfo(
        code=E.CONFIG_NOT_FOUND,
        message='The job configuration file could not be read.',
        hint="Pass --config with the path to an updatekit.yml file.",
    ),
    E.CONFIG_PARSE_ERROR: ErrorInfo(
        code=E.CONFIG_PARSE_ERROR,
        message='The job configuration is not valid YAML.',
        hint='Quote values that start with "*" or ">", and check indentation.',
    ),
    E.CONFIG_INVALID_KEY: ErrorInfo(
        code=E.CONFIG_INVALID_KEY,
        message='The job configuration contains a key updatekit does not recognize.',
        hint='Check the spelling; the error message suggests the closest valid key.',
    ),
    E.CONFIG_INVALID_VALUE: ErrorInfo(
        code=E.CONFIG_INVALID_VALUE,
        message='A job configuration value has the wrong type or an unsupported value.',
        hint='The error message names the key and the expected type.',
    ),
    E.CONFIG_MISSING_REQUIRED: ErrorInfo(
        code=E.CONFIG_MISSING_REQUIRED,
        message='A required job configuration key is missing.',
        hint='Every ignore entry needs a dependency-name.',
    ),
    E.GROUP_INVALID_CEILING: ErrorInfo(
        code=E.GROUP_INVALID_CEILING,
        message='A group declares highest-semver-allowed with a value other than major, minor or patch.',
        hint='Use one of: major, minor, patch.',
    ),
    E.GROUP_ALREADY_ASSIGNED: ErrorInfo(
        code=E.GROUP_ALREADY_ASSIGNED,
        message='Dependencies were assigned to groups twice on the same engine.',
        hint='Build a new DependencyGroupEngine for every update run.',
    ),
    E.REQUIREMENT_INVALID: ErrorInfo(
        code=E.REQUIREMENT_INVALID,
        message='A version requirement could not be parsed.',
        hint='Use comma-separated comparators such as ">= 1.2, < 2".',
    ),
    E.ALL_VERSIONS_IGNORED: ErrorInfo(
        code=E.ALL_VERSIONS_IGNORED,
        message='Every available version of a dependency is covered by an ignore range.',
        hint='Relax the ignore conditions or the group highest-semver-allowed rule.',
    ),
}


def explain(code: str) -> str | None:
    """Return a detailed explanation for an error code.

    Args:
        code: The error code string, e.g. ``"UK-GROUP-INVALID-CEILING"``.

    Returns:
        A formatted explanation string, or ``None`` if the code is unknown.
    """
    try:
        error_code = ErrorCode(code)
    except ValueError:
        return None

    info = ERRORS.get(error_code)
    if info is None:
        return f'{code}: No detailed explanation available.'

    lines = [f'{code}: {info.message}']
    if info.hint:
        lines.append(f'  Hint: {info.hint}')
    return '\n'.join(lines)


def render_error(exc: UpdateKitError, *, file: TextIO | None = None) -> None:
    """Render an error as a compiler-style diagnostic.

    Output format::

        error[UK-GROUP-INVALID-CEILING]: The deps group has an unexpected ...
          |
          = hint: Use one of: major, minor, patch.

    Args:
        exc: The error to render.
        file: Output stream (defaults to ``sys.stderr``).
    """
    out = file or sys.stderr

    if out.isatty():
        console = Console(file=out, highlight=False)
        console.print(
            f'[bold red]error\\[{exc.code.value}][/bold red][bold]: {rich_escape(exc.info.message)}[/bold]',
        )
        if exc.hint:
            console.print('  [dim]|[/dim]')
            console.print(f'  [dim]=[/dim] [cyan]hint[/cyan]: {rich_escape(exc.hint)}')
        return

    print(f'error[{exc.code.value}]: {exc.info.message}', file=out)  # noqa: T201 - CLI output
    if exc.hint:
        print('  |', file=out)  # noqa: T201 - CLI output
        print(f'  = hint: {exc.hint}', file=out)  # noqa: T201 - CLI output


__all__ = [
    'E',
    'ERRORS',
    'ConfigurationError',
    'ErrorCode',
    'ErrorInfo',
    'InvalidGroupConfigurationError',
    'UpdateKitError',
    'explain',
    'render_error',
]
