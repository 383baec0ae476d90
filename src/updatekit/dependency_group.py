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

"""Dependency groups: named sets of dependencies updated together.

A group is declared in job configuration with glob patterns over
dependency names and, optionally, a dependency type and a ceiling on how
large an update the group may contain::

    groups:
      rails:
        patterns:
        - rails*
        - action*
        exclude-patterns:
        - actioncable
        dependency-type: production
        highest-semver-allowed: minor

Key Concepts (ELI5)::

    ┌─────────────────────────┬────────────────────────────────────────────┐
    │ Concept                 │ Explanation                                │
    ├─────────────────────────┼────────────────────────────────────────────┤
    │ patterns                │ Globs over the full dependency name. A     │
    │                         │ dependency must match at least one.        │
    ├─────────────────────────┼────────────────────────────────────────────┤
    │ exclude-patterns        │ Globs that veto membership. Always win.    │
    ├─────────────────────────┼────────────────────────────────────────────┤
    │ dependency-type         │ "production" or "development", decided by  │
    │                         │ the package manager's classifier.          │
    ├─────────────────────────┼────────────────────────────────────────────┤
    │ highest-semver-allowed  │ Largest update class the group may take:   │
    │                         │ "major", "minor" or "patch". Anything      │
    │                         │ bigger becomes an ignore range.            │
    └─────────────────────────┴────────────────────────────────────────────┘

Matching Decision::

    dependency
        │
        ▼
    excluded? ──yes──> not a member
        │no
        ▼
    already assigned? ──yes──> member
        │no
        ▼
    no patterns and no dependency-type? ──yes──> not a member
        │no
        ▼
    matches every criterion present? ──yes──> member

A group with no criteria captures nothing. Ignore conditions use the
opposite convention: no criteria ignores everything.

The ceiling is only honored when the
``grouped_updates_experimental_rules`` experiment is enabled; without it,
groups always target the highest version possible.
"""

from __future__ import annotations

import fnmatch
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

import yaml

from updatekit.dependency import Dependency
from updatekit.errors import E, InvalidGroupConfigurationError
from updatekit.experiments import GROUPED_UPDATES_EXPERIMENTAL_RULES, Experiments
from updatekit.ignore_condition import IgnoreCondition, UpdateType
from updatekit.logging import get_logger

log = get_logger(__name__)

_STR_TAG = 'tag:yaml.org,2002:str'


class _ConfigDumper(yaml.SafeDumper):
    """Safe dumper that double-quotes strings plain style cannot hold."""


def _represent_str(dumper: _ConfigDumper, data: str) -> yaml.ScalarNode:
    analysis = dumper.analyze_scalar(data)
    plain = (
        not analysis.empty
        and analysis.allow_block_plain
        and analysis.allow_flow_plain
        and dumper.resolve(yaml.ScalarNode, data, (True, False)) == _STR_TAG
    )
    return dumper.represent_scalar(_STR_TAG, data, style=None if plain else '"')


_ConfigDumper.add_representer(str, _represent_str)


class SemverLevel(str, Enum):
    """Values accepted by ``highest-semver-allowed``."""

    MAJOR = 'major'
    MINOR = 'minor'
    PATCH = 'patch'


class DependencyType(str, Enum):
    """Values understood by ``dependency-type``."""

    PRODUCTION = 'production'
    DEVELOPMENT = 'development'


# Update types each ceiling excludes, in the order their ranges are reported.
_EXCLUDED_BY_CEILING: dict[SemverLevel, tuple[UpdateType, ...]] = {
    SemverLevel.MAJOR: (),
    SemverLevel.MINOR: (UpdateType.MAJOR,),
    SemverLevel.PATCH: (UpdateType.MAJOR, UpdateType.MINOR),
}


def _as_tuple(value: object) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, Sequence):
        return tuple(str(v) for v in value)
    return ()


@dataclass(frozen=True)
class GroupRules:
    """Typed view of a group's rule mapping.

    Attributes:
        patterns: Name globs; at least one must match.
        exclude_patterns: Name globs that veto membership.
        dependency_type: ``"production"``, ``"development"``, or ``None``.
        highest_semver_allowed: Update ceiling, or ``None`` for no ceiling.
    """

    patterns: tuple[str, ...] = ()
    exclude_patterns: tuple[str, ...] = ()
    dependency_type: str | None = None
    highest_semver_allowed: SemverLevel | None = None

    @classmethod
    def from_mapping(cls, group_name: str, rules: Mapping[str, Any]) -> GroupRules:  # noqa: ANN401 - raw config
        """Read the rule keys this package understands; other keys are ignored.

        Raises:
            InvalidGroupConfigurationError: If ``highest-semver-allowed`` is
                present and not one of ``major``, ``minor``, ``patch``.
        """
        ceiling = rules.get('highest-semver-allowed')
        level: SemverLevel | None = None
        if ceiling is not None:
            try:
                level = SemverLevel(ceiling)
            except ValueError as exc:
                raise InvalidGroupConfigurationError(
                    code=E.GROUP_INVALID_CEILING,
                    message=f'The {group_name} group has an unexpected value for highest-semver-allowed: {ceiling}',
                    hint=f'Use one of: {", ".join(s.value for s in SemverLevel)}.',
                ) from exc

        dependency_type = rules.get('dependency-type')
        return cls(
            patterns=_as_tuple(rules.get('patterns')),
            exclude_patterns=_as_tuple(rules.get('exclude-patterns')),
            dependency_type=str(dependency_type) if dependency_type is not None else None,
            highest_semver_allowed=level,
        )

    def to_mapping(self) -> dict[str, Any]:  # noqa: ANN401 - YAML-ready values
        """Return the rules in configuration-file form, omitting unset keys."""
        mapping: dict[str, Any] = {}
        if self.patterns:
            mapping['patterns'] = list(self.patterns)
        if self.exclude_patterns:
            mapping['exclude-patterns'] = list(self.exclude_patterns)
        if self.dependency_type is not None:
            mapping['dependency-type'] = self.dependency_type
        if self.highest_semver_allowed is not None:
            mapping['highest-semver-allowed'] = self.highest_semver_allowed.value
        return mapping


class DependencyGroup:
    """A named, rule-matched set of dependencies.

    Args:
        name: Group name from configuration.
        rules: Raw rule mapping (``patterns``, ``exclude-patterns``,
            ``dependency-type``, ``highest-semver-allowed``).
        experiments: Feature flags for the run.

    Raises:
        InvalidGroupConfigurationError: If ``highest-semver-allowed`` is
            not one of ``major``, ``minor``, ``patch``.
    """

    def __init__(
        self,
        name: str,
        rules: Mapping[str, Any],  # noqa: ANN401 - raw config
        *,
        experiments: Experiments | None = None,
    ) -> None:
        """Validate the rules and start with no dependencies."""
        self.name = name
        self.rules: dict[str, Any] = dict(rules)  # noqa: ANN401
        self.group_rules = GroupRules.from_mapping(name, rules)
        self.experiments = experiments or Experiments()
        self.dependencies: list[Dependency] = []

    def contains(self, dependency: Dependency) -> bool:
        """Return whether ``dependency`` belongs to this group."""
        rules = self.group_rules
        if self._matches_any(dependency.name, rules.exclude_patterns):
            return False
        if any(d.name == dependency.name for d in self.dependencies):
            return True
        if not rules.patterns and rules.dependency_type is None:
            return False
        if rules.patterns and not self._matches_any(dependency.name, rules.patterns):
            return False
        if rules.dependency_type is not None and not self._matches_type(dependency):
            return False
        return True

    def ignored_versions_for(self, dependency: Dependency) -> list[str]:
        """Return ranges above this group's ceiling for ``dependency``.

        Empty when the experiment is off, when no ceiling is set, or when
        the ceiling is ``major``. A ``patch`` ceiling yields the major
        range first, then the minor range.
        """
        ceiling = self.group_rules.highest_semver_allowed
        if ceiling is None or not self.experiments.enabled(GROUPED_UPDATES_EXPERIMENTAL_RULES):
            return []
        excluded = _EXCLUDED_BY_CEILING[ceiling]
        if not excluded:
            return []
        condition = IgnoreCondition(
            dependency_name=dependency.name,
            update_types=excluded,
            open_ended_major=True,
        )
        return condition.ignored_versions(dependency)

    @property
    def targets_highest_versions_possible(self) -> bool:
        """Whether updates in this group may jump to the newest release."""
        if not self.experiments.enabled(GROUPED_UPDATES_EXPERIMENTAL_RULES):
            return True
        return self.group_rules.highest_semver_allowed in (None, SemverLevel.MAJOR)

    def to_config_yaml(self) -> str:
        """Render this group as a ``groups:`` configuration fragment."""
        document = {'groups': {self.name: self.group_rules.to_mapping()}}
        return yaml.dump(document, Dumper=_ConfigDumper, sort_keys=False, default_flow_style=False)

    def _matches_type(self, dependency: Dependency) -> bool:
        dependency_type = self.group_rules.dependency_type
        if dependency_type == DependencyType.PRODUCTION.value:
            return dependency.production()
        if dependency_type == DependencyType.DEVELOPMENT.value:
            return not dependency.production()
        log.warning('unknown_dependency_type', group=self.name, dependency_type=dependency_type)
        return False

    @staticmethod
    def _matches_any(name: str, patterns: Sequence[str]) -> bool:
        return any(fnmatch.fnmatchcase(name, pattern) for pattern in patterns)

    def __repr__(self) -> str:
        """Return a short representation with the member count."""
        return f'DependencyGroup(name={self.name!r}, dependencies={len(self.dependencies)})'


__all__ = [
    'DependencyGroup',
    'DependencyType',
    'GroupRules',
    'SemverLevel',
]
