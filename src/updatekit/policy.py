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

"""Combine every source of ignore ranges for one dependency.

A dependency's update is constrained by the ignore conditions whose
``dependency_name`` matches it and, when it belongs to a group, by that
group's ``highest-semver-allowed`` ceiling. This module merges them into
the single list a registry adapter filters candidates with::

    ranges = collect_ignored_versions(dep, job.ignore_conditions, group=group)

Ranges keep the order they were produced in and duplicates are dropped.
"""

from __future__ import annotations

import fnmatch
from collections.abc import Iterable

from updatekit.dependency import Dependency
from updatekit.dependency_group import DependencyGroup
from updatekit.ignore_condition import IgnoreCondition
from updatekit.logging import get_logger

log = get_logger(__name__)


def condition_applies(condition: IgnoreCondition, name: str) -> bool:
    """Return whether ``condition`` targets the dependency called ``name``.

    ``dependency_name`` may be an exact name or a glob such as ``"aws-*"``.
    """
    return fnmatch.fnmatchcase(name, condition.dependency_name)


def collect_ignored_versions(
    dependency: Dependency,
    conditions: Iterable[IgnoreCondition],
    *,
    group: DependencyGroup | None = None,
    security_updates_only: bool = False,
) -> list[str]:
    """Return every range of versions of ``dependency`` to skip.

    Args:
        dependency: The dependency being updated.
        conditions: All ignore conditions of the job; the ones that do
            not match the dependency name are skipped.
        group: The group the dependency is being updated in, if any.
        security_updates_only: Whether the run only performs security
            updates.

    Returns:
        Condition ranges in declaration order, then the group ceiling
        ranges, without duplicates.
    """
    ranges: list[str] = []
    for condition in conditions:
        if not condition_applies(condition, dependency.name):
            continue
        ranges.extend(condition.ignored_versions(dependency, security_updates_only=security_updates_only))
    if group is not None:
        ranges.extend(group.ignored_versions_for(dependency))

    unique = list(dict.fromkeys(ranges))
    log.debug(
        'collected_ignored_versions',
        dependency=dependency.name,
        group=group.name if group is not None else None,
        ranges=unique,
    )
    return unique


__all__ = [
    'collect_ignored_versions',
    'condition_applies',
]
