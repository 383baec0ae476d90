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

"""Job configuration reader for updatekit.

Reads ``updatekit.yml`` and returns a validated :class:`JobConfig`. The
file declares the run's feature flags, its dependency groups and its
ignore conditions.

Key Concepts (ELI5)::

    ┌─────────────────────────┬────────────────────────────────────────────┐
    │ Concept                 │ Explanation                                │
    ├─────────────────────────┼────────────────────────────────────────────┤
    │ JobConfig               │ Everything one update run needs to know    │
    │                         │ about grouping and ignoring.               │
    ├─────────────────────────┼────────────────────────────────────────────┤
    │ groups                  │ Name -> rules. Declaration order is kept;  │
    │                         │ it decides the order groups are reported.  │
    ├─────────────────────────┼────────────────────────────────────────────┤
    │ ignore                  │ Per-dependency ignore conditions. The name │
    │                         │ may be a glob such as "aws-*".             │
    ├─────────────────────────┼────────────────────────────────────────────┤
    │ Fuzzy key matching      │ A typo in a key gets a "did you mean?"     │
    │                         │ hint with the closest valid key.           │
    └─────────────────────────┴────────────────────────────────────────────┘

Example::

    security-updates-only: false
    experiments:
      grouped_updates_experimental_rules: true
    groups:
      rails:
        patterns:
        - rails*
        highest-semver-allowed: minor
    ignore:
    - dependency-name: express
      versions:
      - '>= 5.0.0'
    - dependency-name: aws-*
      update-types:
      - version-update:semver-patch

Validation Pipeline::

    updatekit.yml
         │
         ▼
    1. YAML parse ──────────────> UK-CONFIG-PARSE-ERROR
         │
         ▼
    2. Unknown key detection ───> UK-CONFIG-INVALID-KEY ("Did you mean ...?")
         │
         ▼
    3. Type and value checks ───> UK-CONFIG-INVALID-VALUE
         │
         ▼
    4. Group ceilings ──────────> UK-GROUP-INVALID-CEILING
         │
         ▼
    JobConfig

Unknown keys inside a group's rules are not errors: they are logged and
left for the group to ignore.
"""

from __future__ import annotations

import difflib
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from updatekit.dependency_group import DependencyGroup, DependencyType, GroupRules
from updatekit.errors import E, UpdateKitError
from updatekit.experiments import Experiments
from updatekit.ignore_condition import IgnoreCondition, UpdateType, update_types_from_strings
from updatekit.logging import get_logger
from updatekit.policy import condition_applies
from updatekit.requirement import parse_requirement

log = get_logger(__name__)

CONFIG_FILENAME = 'updatekit.yml'

VALID_KEYS: frozenset[str] = frozenset({
    'experiments',
    'groups',
    'ignore',
    'security-updates-only',
})

VALID_IGNORE_KEYS: frozenset[str] = frozenset({
    'dependency-name',
    'update-types',
    'versions',
})

KNOWN_GROUP_RULE_KEYS: frozenset[str] = frozenset({
    'dependency-type',
    'exclude-patterns',
    'highest-semver-allowed',
    'patterns',
})


@dataclass(frozen=True)
class JobConfig:
    """Validated job configuration.

    Attributes:
        dependency_groups: ``[{'name': ..., 'rules': {...}}]`` in
            declaration order.
        ignore_conditions: Ignore conditions in declaration order.
        experiments: Enabled feature flags.
        security_updates_only: Whether the run only performs security
            updates.
        config_path: File the configuration was read from, if any.
    """

    dependency_groups: list[dict[str, Any]] = field(default_factory=list)  # noqa: ANN401 - raw rules
    ignore_conditions: list[IgnoreCondition] = field(default_factory=list)
    experiments: Experiments = field(default_factory=Experiments)
    security_updates_only: bool = False
    config_path: Path | None = None

    def ignore_conditions_for(self, name: str) -> list[IgnoreCondition]:
        """Return the ignore conditions whose name pattern matches ``name``."""
        return [c for c in self.ignore_conditions if condition_applies(c, name)]


def _suggest(unknown: str, candidates: Iterable[str]) -> str:
    matches = difflib.get_close_matches(unknown, list(candidates), n=1, cutoff=0.6)
    if matches:
        return f"Did you mean '{matches[0]}'?"
    return f'Valid keys: {", ".join(sorted(candidates))}.'


def _type_name(value: object) -> str:
    return type(value).__name__


def _check_keys(section: Mapping[str, Any], valid: frozenset[str], context: str) -> None:  # noqa: ANN401
    for key in section:
        if key not in valid:
            raise UpdateKitError(
                code=E.CONFIG_INVALID_KEY,
                message=f"Unknown key '{key}' in {context}",
                hint=_suggest(str(key), valid),
            )


def _string_list(key: str, value: object, context: str) -> list[str]:
    """Return ``value`` as a list of strings; a lone string is accepted."""
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        raise UpdateKitError(
            code=E.CONFIG_INVALID_VALUE,
            message=f"'{key}' must be a list of strings, got {_type_name(value)}",
            hint=f'Check {key} in {context}.',
        )
    for item in value:
        if not isinstance(item, str):
            raise UpdateKitError(
                code=E.CONFIG_INVALID_VALUE,
                message=f"'{key}' items must be strings, got {_type_name(item)}: {item!r}",
                hint=f'Quote each {key} entry in {context}.',
            )
    return list(value)


def _validate_group_rules(name: str, rules: object, source: str) -> dict[str, Any]:  # noqa: ANN401
    context = f'group {name!r} of {source}'
    if rules is None:
        return {}
    if not isinstance(rules, dict):
        raise UpdateKitError(
            code=E.CONFIG_INVALID_VALUE,
            message=f"Group '{name}' must be a mapping of rules, got {_type_name(rules)}",
            hint=f'Example:\n  groups:\n    {name}:\n      patterns:\n      - "*"',
        )

    validated: dict[str, Any] = {}  # noqa: ANN401
    for key, value in rules.items():
        if key not in KNOWN_GROUP_RULE_KEYS:
            log.warning('unknown_group_rule', group=name, key=key, hint=_suggest(str(key), KNOWN_GROUP_RULE_KEYS))
            validated[key] = value
        elif key in ('patterns', 'exclude-patterns'):
            validated[key] = _string_list(key, value, context)
        elif key == 'dependency-type':
            allowed = [t.value for t in DependencyType]
            if value not in allowed:
                raise UpdateKitError(
                    code=E.CONFIG_INVALID_VALUE,
                    message=f"dependency-type must be one of {allowed}, got {value!r} in {context}",
                    hint="Use 'production' or 'development'.",
                )
            validated[key] = value
        else:
            validated[key] = value

    # Raises InvalidGroupConfigurationError for a bad ceiling.
    GroupRules.from_mapping(name, validated)
    return validated


def _validate_groups(groups: object, source: str) -> list[dict[str, Any]]:  # noqa: ANN401
    if groups is None:
        return []
    if not isinstance(groups, dict):
        raise UpdateKitError(
            code=E.CONFIG_INVALID_VALUE,
            message=f"'groups' must be a mapping of group name to rules, got {_type_name(groups)}",
            hint='Declare each group as a key under groups:.',
        )
    definitions: list[dict[str, Any]] = []  # noqa: ANN401
    for name, rules in groups.items():
        if not isinstance(name, str):
            raise UpdateKitError(
                code=E.CONFIG_INVALID_VALUE,
                message=f'Group names must be strings, got {_type_name(name)}: {name!r}',
                hint='Quote numeric group names.',
            )
        definitions.append({'name': name, 'rules': _validate_group_rules(name, rules, source)})
    return definitions


def _parse_update_types(value: object, context: str) -> list[UpdateType]:
    names = _string_list('update-types', value, context)
    try:
        return update_types_from_strings(names)
    except ValueError as exc:
        known = [t.value for t in UpdateType]
        bad = next(n for n in names if n not in known)
        raise UpdateKitError(
            code=E.CONFIG_INVALID_VALUE,
            message=f"Unknown update type '{bad}' in {context}",
            hint=_suggest(bad, known),
        ) from exc


def _parse_versions(value: object, context: str) -> list[str]:
    versions = _string_list('versions', value, context)
    for text in versions:
        try:
            parse_requirement(text)
        except UpdateKitError as exc:
            raise UpdateKitError(
                code=E.CONFIG_INVALID_VALUE,
                message=f'Invalid ignore range {text!r} in {context}: {exc}',
                hint=exc.hint,
            ) from exc
    return versions


def _parse_ignore_entry(index: int, entry: object, source: str) -> IgnoreCondition:
    context = f'ignore[{index}] of {source}'
    if not isinstance(entry, dict):
        raise UpdateKitError(
            code=E.CONFIG_INVALID_VALUE,
            message=f'{context} must be a mapping, got {_type_name(entry)}',
            hint='Each ignore entry needs at least a dependency-name.',
        )
    _check_keys(entry, VALID_IGNORE_KEYS, context)

    name = entry.get('dependency-name')
    if name is None:
        raise UpdateKitError(
            code=E.CONFIG_MISSING_REQUIRED,
            message=f"{context} is missing 'dependency-name'",
            hint='Name the dependency (or a glob such as "aws-*") the entry applies to.',
        )
    if not isinstance(name, str):
        raise UpdateKitError(
            code=E.CONFIG_INVALID_VALUE,
            message=f"'dependency-name' must be str, got {_type_name(name)} in {context}",
        )

    versions = _parse_versions(entry['versions'], context) if 'versions' in entry else None
    update_types = _parse_update_types(entry['update-types'], context) if 'update-types' in entry else None
    return IgnoreCondition(
        dependency_name=name,
        versions=tuple(versions) if versions is not None else None,
        update_types=tuple(t.value for t in update_types) if update_types is not None else None,
    )


def _parse_ignore(value: object, source: str) -> list[IgnoreCondition]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise UpdateKitError(
            code=E.CONFIG_INVALID_VALUE,
            message=f"'ignore' must be a list of entries, got {_type_name(value)}",
            hint='Start each ignore entry with "- dependency-name: ...".',
        )
    return [_parse_ignore_entry(i, entry, source) for i, entry in enumerate(value)]


def _parse_experiments(value: object) -> Experiments:
    if value is None:
        return Experiments()
    if not isinstance(value, dict):
        raise UpdateKitError(
            code=E.CONFIG_INVALID_VALUE,
            message=f"'experiments' must be a mapping of flag name to bool, got {_type_name(value)}",
        )
    for flag, enabled in value.items():
        if not isinstance(enabled, bool):
            raise UpdateKitError(
                code=E.CONFIG_INVALID_VALUE,
                message=f"Experiment '{flag}' must be true or false, got {_type_name(enabled)}",
            )
    return Experiments.from_mapping(value)


def _load_yaml(text: str, source: str) -> Any:  # noqa: ANN401 - any YAML document
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise UpdateKitError(
            code=E.CONFIG_PARSE_ERROR,
            message=f'Failed to parse {source}: {exc}',
            hint='Check the YAML syntax (indentation, quoting of "*" and ">=").',
        ) from exc


def parse_job_config(text: str, *, source: str = CONFIG_FILENAME) -> JobConfig:
    """Parse and validate job configuration from YAML text.

    Args:
        text: YAML document.
        source: Name used in error messages.

    Raises:
        UpdateKitError: If the document is malformed or invalid.
        InvalidGroupConfigurationError: If a group has an invalid
            ``highest-semver-allowed``.
    """
    raw = _load_yaml(text, source)
    if raw is None:
        log.debug('empty_job_config', source=source)
        return JobConfig()
    if not isinstance(raw, dict):
        raise UpdateKitError(
            code=E.CONFIG_INVALID_VALUE,
            message=f'{source} must be a mapping, got {_type_name(raw)}',
        )

    _check_keys(raw, VALID_KEYS, source)

    security_only = raw.get('security-updates-only', False)
    if not isinstance(security_only, bool):
        raise UpdateKitError(
            code=E.CONFIG_INVALID_VALUE,
            message=f"'security-updates-only' must be bool, got {_type_name(security_only)}",
            hint=f'Use true or false in {source}.',
        )

    config = JobConfig(
        dependency_groups=_validate_groups(raw.get('groups'), source),
        ignore_conditions=_parse_ignore(raw.get('ignore'), source),
        experiments=_parse_experiments(raw.get('experiments')),
        security_updates_only=security_only,
    )
    log.debug(
        'job_config_parsed',
        source=source,
        groups=[g['name'] for g in config.dependency_groups],
        ignore_conditions=len(config.ignore_conditions),
        experiments=sorted(config.experiments.enabled_flags),
    )
    return config


def load_job_config(path: Path) -> JobConfig:
    """Load and validate ``updatekit.yml``.

    Args:
        path: The configuration file, or a directory containing
            ``updatekit.yml``.

    Raises:
        UpdateKitError: If the file is missing, unreadable or invalid.
    """
    config_path = path / CONFIG_FILENAME if path.is_dir() else path
    if not config_path.is_file():
        raise UpdateKitError(
            code=E.CONFIG_NOT_FOUND,
            message=f'No configuration file at {config_path}',
            hint=f'Create {CONFIG_FILENAME} or pass --config.',
        )
    try:
        text = config_path.read_text(encoding='utf-8')
    except OSError as exc:
        raise UpdateKitError(
            code=E.CONFIG_NOT_FOUND,
            message=f'Failed to read {config_path}: {exc}',
        ) from exc
    config = parse_job_config(text, source=str(config_path))
    return replace(config, config_path=config_path)


def parse_groups_yaml(text: str, *, experiments: Experiments | None = None) -> list[DependencyGroup]:
    """Read a ``groups:`` document back into groups.

    Accepts the output of :meth:`DependencyGroup.to_config_yaml`, so a
    rendered group can be parsed and rendered again unchanged.
    """
    raw = _load_yaml(text, 'groups document')
    if not isinstance(raw, dict) or 'groups' not in raw:
        raise UpdateKitError(
            code=E.CONFIG_MISSING_REQUIRED,
            message="Expected a document with a top-level 'groups' key",
        )
    definitions = _validate_groups(raw['groups'], 'groups document')
    return [DependencyGroup(d['name'], d['rules'], experiments=experiments) for d in definitions]


__all__ = [
    'CONFIG_FILENAME',
    'KNOWN_GROUP_RULE_KEYS',
    'VALID_IGNORE_KEYS',
    'VALID_KEYS',
    'JobConfig',
    'load_job_config',
    'parse_groups_yaml',
    'parse_job_config',
]
