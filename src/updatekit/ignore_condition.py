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

"""Ignore conditions: which versions of a dependency to never update to.

An ignore condition comes from job configuration and says either "ignore
these explicit ranges" or "ignore this class of update". The engine turns
the second form into concrete ranges around the dependency's current
version, so that registry adapters only ever deal with range strings.

Key Concepts (ELI5)::

    ┌─────────────────────┬────────────────────────────────────────────────┐
    │ Concept             │ Explanation                                    │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ Explicit versions   │ Ranges the user wrote, e.g. ">= 2.0.0". Always │
    │                     │ applied, even for security updates.            │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ Update types        │ "Ignore patch/minor/major updates". Turned     │
    │                     │ into ranges relative to the current version.   │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ No criteria         │ Ignore every version: ">= 0".                  │
    └─────────────────────┴────────────────────────────────────────────────┘

Ranges for current version ``1.2.3``::

    semver-patch  ->  ">= 1.2.3.1.a, < 1.3"   (1.2.4, 1.2.4-rc0, 1.2.3.1)
    semver-minor  ->  ">= 1.3.a, < 2"         (1.3, 1.4.0)
    semver-major  ->  ">= 2.a, < 3"           (2, 2.0.0)

Every lower bound ends in ``.a`` so that pre-releases of the first
ignored version are ignored too, while the current version stays allowed.
A patch range needs at least a ``major.minor`` version; for a bare
major version such as ``1`` it contributes nothing.

Non-numeric versions (``Finchley.SR3``) cannot be incremented, so their
upper bounds append :data:`~updatekit.version.OPAQUE_CEILING` instead.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from updatekit.dependency import Dependency
from updatekit.logging import get_logger
from updatekit.version import (
    OPAQUE_CEILING,
    boundary_parts,
    next_segment_boundary,
    next_segment_floor,
)

log = get_logger(__name__)

# Range matching every version.
ALL_VERSIONS = '>= 0'


class UpdateType(str, Enum):
    """Update classes an ignore condition can exclude."""

    PATCH = 'version-update:semver-patch'
    MINOR = 'version-update:semver-minor'
    MAJOR = 'version-update:semver-major'


def _patch_range(version: str) -> str | None:
    if len(boundary_parts(version)) < 2:
        return None
    parts = boundary_parts(version, width=3)
    return f'>= {next_segment_floor(parts, 3)}, < {next_segment_boundary(parts, 1)}'


def _minor_range(version: str) -> str:
    parts = boundary_parts(version, width=2)
    return f'>= {next_segment_floor(parts, 1)}, < {next_segment_boundary(parts, 0)}'


def _major_range(version: str, *, open_ended: bool) -> str:
    parts = boundary_parts(version)
    if parts[0].isdigit():
        lower = next_segment_floor(parts, 0)
        upper = str(int(parts[0]) + 2)
    else:
        lower = next_segment_boundary(parts, 0)
        upper = str(OPAQUE_CEILING)
    if open_ended:
        return f'>= {lower}'
    return f'>= {lower}, < {upper}'


@dataclass(frozen=True)
class IgnoreCondition:
    """Versions of one dependency to leave alone.

    Immutable once built; :meth:`ignored_versions` may be called any number
    of times, from any thread.

    Attributes:
        dependency_name: Name (or glob pattern) of the dependency.
        versions: Explicit ignore ranges. A single string is accepted.
        update_types: Update classes to ignore, as ``UpdateType`` values
            or their strings. Unknown strings contribute nothing.
        for_security_updates: Whether this condition also applies when
            the run only performs security updates.
        open_ended_major: Make the major range cover every later major
            release instead of only the next one.
    """

    dependency_name: str
    versions: tuple[str, ...] | None = None
    update_types: tuple[str, ...] | None = None
    for_security_updates: bool = False
    open_ended_major: bool = False

    def __post_init__(self) -> None:
        """Normalize ``versions`` and ``update_types`` to tuples."""
        if isinstance(self.versions, str):
            object.__setattr__(self, 'versions', (self.versions,))
        elif self.versions is not None:
            object.__setattr__(self, 'versions', tuple(self.versions))
        if self.update_types is not None:
            types = tuple(t.value if isinstance(t, UpdateType) else t for t in self.update_types)
            object.__setattr__(self, 'update_types', types)

    def ignored_versions(self, dependency: Dependency, security_updates_only: bool = False) -> list[str]:
        """Return the ranges of versions of ``dependency`` to ignore.

        Args:
            dependency: The dependency being updated. Only its ``version``
                is read.
            security_updates_only: Whether the run only performs security
                updates. Update-type policy does not apply in that mode
                unless the condition is marked ``for_security_updates``;
                explicit ``versions`` always apply.

        Returns:
            Range strings, in the order the update types were given.
        """
        if self.versions:
            return list(self.versions)
        if security_updates_only and not self.for_security_updates:
            return []
        if not self.update_types:
            return [ALL_VERSIONS]
        if not dependency.version:
            return []
        ranges = self.ranges_for_version(dependency.version)
        log.debug(
            'ignored_versions',
            dependency=dependency.name,
            version=dependency.version,
            update_types=list(self.update_types),
            ranges=ranges,
        )
        return ranges

    def ranges_for_version(self, version: str) -> list[str]:
        """Return the update-type ranges around ``version``."""
        ranges: list[str] = []
        if not boundary_parts(version):
            return ranges
        for update_type in self.update_types or ():
            if update_type == UpdateType.PATCH.value:
                patch = _patch_range(version)
                if patch is not None:
                    ranges.append(patch)
            elif update_type == UpdateType.MINOR.value:
                ranges.append(_minor_range(version))
            elif update_type == UpdateType.MAJOR.value:
                ranges.append(_major_range(version, open_ended=self.open_ended_major))
            else:
                log.warning('unknown_update_type', dependency=self.dependency_name, update_type=update_type)
        return ranges


def update_types_from_strings(values: Sequence[str]) -> list[UpdateType]:
    """Convert configuration strings to :class:`UpdateType` members.

    Raises:
        ValueError: If a value is not a known update type.
    """
    return [UpdateType(v) for v in values]


__all__ = [
    'ALL_VERSIONS',
    'IgnoreCondition',
    'UpdateType',
    'update_types_from_strings',
]
