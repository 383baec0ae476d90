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

"""Partition a project's dependencies into the configured groups.

The engine owns the groups declared for one job and assigns
dependencies to them exactly once::

    engine = DependencyGroupEngine.from_job_config(job)
    engine.assign_to_groups(dependencies)

    for group in engine.dependency_groups:
        ...  # one grouped update per group
    for dep in engine.ungrouped_dependencies:
        ...  # one individual update per dependency

A dependency may land in several groups. Dependencies that match no
group are kept in :attr:`DependencyGroupEngine.ungrouped_dependencies`.
Assigning twice would duplicate membership, so the second call raises
:class:`~updatekit.errors.ConfigurationError`.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from updatekit.config import JobConfig
from updatekit.dependency import Dependency
from updatekit.dependency_group import DependencyGroup
from updatekit.errors import E, ConfigurationError
from updatekit.experiments import Experiments
from updatekit.logging import get_logger

log = get_logger(__name__)


class DependencyGroupEngine:
    """Owns a job's dependency groups and the ungrouped remainder.

    Args:
        dependency_groups: Groups in declaration order.
    """

    def __init__(self, dependency_groups: Sequence[DependencyGroup]) -> None:
        """Start unassigned with the given groups."""
        self.dependency_groups: list[DependencyGroup] = list(dependency_groups)
        self.ungrouped_dependencies: list[Dependency] = []
        self._groups_calculated = False

    @classmethod
    def from_job_config(cls, job: JobConfig) -> DependencyGroupEngine:
        """Build one group per ``{name, rules}`` entry of ``job``.

        Raises:
            InvalidGroupConfigurationError: If any group has an invalid
                ``highest-semver-allowed``.
        """
        return cls.from_definitions(job.dependency_groups, experiments=job.experiments)

    @classmethod
    def from_definitions(
        cls,
        definitions: Iterable[dict[str, object]],
        *,
        experiments: Experiments | None = None,
    ) -> DependencyGroupEngine:
        """Build groups from ``[{'name': ..., 'rules': {...}}]`` entries."""
        groups = [
            DependencyGroup(
                name=str(entry['name']),
                rules=entry.get('rules') or {},  # type: ignore[arg-type]
                experiments=experiments,
            )
            for entry in definitions
        ]
        return cls(groups)

    def find_group(self, name: str) -> DependencyGroup | None:
        """Return the group called ``name``, or ``None``."""
        for group in self.dependency_groups:
            if group.name == name:
                return group
        return None

    def assign_to_groups(self, dependencies: Iterable[Dependency]) -> None:
        """Add each dependency to every group that contains it.

        Raises:
            ConfigurationError: If dependencies were already assigned.
        """
        if self._groups_calculated:
            raise ConfigurationError(
                code=E.GROUP_ALREADY_ASSIGNED,
                message='dependency groups have already been configured!',
                hint='Create a new DependencyGroupEngine for each set of dependencies.',
            )
        self._groups_calculated = True

        if not self.dependency_groups:
            self.ungrouped_dependencies.extend(dependencies)
            log.info('groups_assigned', groups=0, ungrouped=len(self.ungrouped_dependencies))
            return

        for dependency in dependencies:
            matched = [group for group in self.dependency_groups if group.contains(dependency)]
            for group in matched:
                group.dependencies.append(dependency)
            if not matched:
                self.ungrouped_dependencies.append(dependency)
            log.debug('dependency_assigned', dependency=dependency.name, groups=[g.name for g in matched])

        log.info(
            'groups_assigned',
            groups={group.name: len(group.dependencies) for group in self.dependency_groups},
            ungrouped=len(self.ungrouped_dependencies),
        )


__all__ = [
    'DependencyGroupEngine',
]
