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

"""Version requirements: conjunctions of ``operator version`` pairs.

Ignore ranges are plain strings such as ``">= 1.2.3.1.a, < 1.3"`` so that
they can be logged, stored in job configuration and handed to registry
adapters unchanged. This module turns such a string into something that
can answer "is this version inside the range?".

Grammar::

    requirement := constraint ("," constraint)*
    constraint  := [operator] version
    operator    := "=" | "!=" | ">" | "<" | ">=" | "<=" | "~>"

A constraint without an operator means ``=``. A requirement with no
constraints at all means ``>= 0`` (every version).

``~> X.Y.Z`` is the pessimistic operator: ``>= X.Y.Z`` and below the
next bump of the second-to-last segment (``< X.(Y+1)``).
"""

from __future__ import annotations

import operator
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from updatekit.errors import E, UpdateKitError
from updatekit.version import Version, parse_version

_CONSTRAINT_RE = re.compile(r'^\s*(=|!=|>=|<=|>|<|~>)?\s*([0-9A-Za-z][\w.+-]*)\s*$')

_OPERATORS: dict[str, Callable[[Version, Version], bool]] = {
    '=': operator.eq,
    '!=': operator.ne,
    '>': operator.gt,
    '<': operator.lt,
    '>=': operator.ge,
    '<=': operator.le,
    '~>': lambda v, r: v >= r and v.release() < r.bump(),
}


@dataclass(frozen=True)
class Constraint:
    """A single ``operator version`` pair."""

    op: str
    version: Version

    def satisfied_by(self, version: Version) -> bool:
        """Return whether ``version`` meets this constraint."""
        return _OPERATORS[self.op](version, self.version)

    def __str__(self) -> str:
        """Render as ``op version``."""
        return f'{self.op} {self.version}'


def _parse_constraint(text: str, package_manager: str) -> Constraint:
    match = _CONSTRAINT_RE.match(text)
    if match is None:
        raise UpdateKitError(
            code=E.REQUIREMENT_INVALID,
            message=f'Illformed requirement {text.strip()!r}',
            hint='Each comparator must look like ">= 1.2.3"; operators are =, !=, >, <, >=, <=, ~>.',
        )
    op, version = match.groups()
    return Constraint(op=op or '=', version=parse_version(version, package_manager))


@dataclass(frozen=True)
class Requirement:
    """A conjunction of constraints, satisfied when all of them are.

    Attributes:
        constraints: The parsed constraints, in written order.
    """

    constraints: tuple[Constraint, ...]

    def satisfied_by(self, version: str | Version, *, package_manager: str = '') -> bool:
        """Return whether ``version`` satisfies every constraint.

        Args:
            version: A :class:`Version`, or a raw string parsed with the
                version class of ``package_manager``.
            package_manager: Selects the version class for raw strings.
        """
        if not isinstance(version, Version):
            version = parse_version(version, package_manager)
        return all(c.satisfied_by(version) for c in self.constraints)

    def __str__(self) -> str:
        """Render in the same comma-separated form it was parsed from."""
        return ', '.join(str(c) for c in self.constraints)


def parse_requirement(text: str | Iterable[str], package_manager: str = '') -> Requirement:
    """Parse a requirement string (or a list of constraint strings).

    Versions in the constraints are parsed with the version class of
    ``package_manager``, so ``>= 1.8.0_250`` keeps its update number for
    docker.

    Raises:
        UpdateKitError: With ``UK-REQUIREMENT-INVALID`` if any constraint
            is malformed.
    """
    pieces = text.split(',') if isinstance(text, str) else list(text)
    constraints = tuple(_parse_constraint(p, package_manager) for p in pieces if p.strip())
    if not constraints:
        constraints = (Constraint(op='>=', version=Version('0')),)
    return Requirement(constraints=constraints)


def any_satisfied(ranges: Iterable[str], version: str | Version, *, package_manager: str = '') -> bool:
    """Return whether ``version`` falls inside any of ``ranges``."""
    if not isinstance(version, Version):
        version = parse_version(version, package_manager)
    return any(parse_requirement(r, package_manager).satisfied_by(version) for r in ranges)


__all__ = [
    'Constraint',
    'Requirement',
    'any_satisfied',
    'parse_requirement',
]
