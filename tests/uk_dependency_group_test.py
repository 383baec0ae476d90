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

"""Tests for dependency group matching, ceilings and rendering."""

from __future__ import annotations

import pytest
from updatekit.config import parse_groups_yaml
from updatekit.dependency import Dependency, DependencyRequirement
from updatekit.dependency_group import DependencyGroup, GroupRules, SemverLevel
from updatekit.errors import E, InvalidGroupConfigurationError
from updatekit.experiments import GROUPED_UPDATES_EXPERIMENTAL_RULES, Experiments
from updatekit.logging import configure_logging
from updatekit.requirement import any_satisfied

configure_logging(quiet=True)

EXPERIMENTAL = Experiments().register(GROUPED_UPDATES_EXPERIMENTAL_RULES)

# ── Helpers ──────────────────────────────────────────────────────────


def _dep(name: str, version: str = '1.8.0', groups: tuple[str, ...] = ()) -> Dependency:
    """A bundler dependency declared in the given Gemfile groups."""
    return Dependency(
        name=name,
        package_manager='bundler',
        version=version,
        requirements=[DependencyRequirement(file='Gemfile', requirement=f'~> {version}', groups=groups)],
    )


def _production(name: str) -> Dependency:
    return _dep(name, groups=('default',))


def _development(name: str) -> Dependency:
    return _dep(name, groups=('development', 'test'))


# ── Construction ─────────────────────────────────────────────────────


class TestConstruction:
    """Tests for DependencyGroup construction."""

    def test_name_and_rules(self) -> None:
        """Name and raw rules are kept; dependencies start empty."""
        rules = {'patterns': ['test-*']}
        group = DependencyGroup(name='test-group', rules=rules)
        assert group.name == 'test-group'
        assert group.rules == rules
        assert group.dependencies == []

    @pytest.mark.parametrize('level', ['major', 'minor', 'patch'])
    def test_valid_ceilings(self, level: str) -> None:
        """Every documented ceiling is accepted."""
        group = DependencyGroup(name='test-group', rules={'highest-semver-allowed': level})
        assert group.group_rules.highest_semver_allowed == SemverLevel(level)

    def test_invalid_ceiling_raises(self) -> None:
        """An unknown ceiling fails construction and names the group."""
        with pytest.raises(InvalidGroupConfigurationError) as exc_info:
            DependencyGroup(name='test-group', rules={'highest-semver-allowed': 'revision'})
        assert exc_info.value.code == E.GROUP_INVALID_CEILING
        assert str(exc_info.value) == (
            'The test-group group has an unexpected value for highest-semver-allowed: revision'
        )

    def test_invalid_ceiling_is_value_error(self) -> None:
        """Callers catching ValueError also see invalid ceilings."""
        with pytest.raises(ValueError, match='highest-semver-allowed'):
            DependencyGroup(name='test-group', rules={'highest-semver-allowed': 3})

    def test_unknown_rule_keys_tolerated(self) -> None:
        """Rule keys nobody reads do not fail construction."""
        group = DependencyGroup(name='test-group', rules={'patterns': ['*'], 'applies-to': 'version-updates'})
        assert group.contains(_dep('anything'))

    def test_rules_view(self) -> None:
        """GroupRules exposes typed rule values."""
        rules = GroupRules.from_mapping(
            'g',
            {'patterns': 'rails*', 'exclude-patterns': ['rails-html'], 'dependency-type': 'production'},
        )
        assert rules.patterns == ('rails*',)
        assert rules.exclude_patterns == ('rails-html',)
        assert rules.dependency_type == 'production'
        assert rules.highest_semver_allowed is None


# ── contains ─────────────────────────────────────────────────────────


class TestContains:
    """Tests for DependencyGroup.contains()."""

    def test_pattern_match(self) -> None:
        """A dependency matching a pattern is contained."""
        group = DependencyGroup(name='g', rules={'patterns': ['test-*']})
        assert group.contains(_dep('test-dependency'))
        assert not group.contains(_dep('another-dependency'))

    def test_exclusion_wins(self) -> None:
        """Excluded names are not contained even if a pattern matches."""
        group = DependencyGroup(name='g', rules={'patterns': ['test-*'], 'exclude-patterns': ['test-b']})
        assert group.contains(_dep('test-a'))
        assert not group.contains(_dep('test-b'))

    def test_exclusion_wins_over_existing_membership(self) -> None:
        """Already-added dependencies are still subject to exclusion."""
        group = DependencyGroup(name='g', rules={'exclude-patterns': ['pinned-*']})
        group.dependencies.append(_dep('pinned-thing'))
        assert not group.contains(_dep('pinned-thing'))

    def test_existing_member_matches(self) -> None:
        """A dependency already in the group is contained."""
        group = DependencyGroup(name='g', rules={'patterns': ['other-*']})
        group.dependencies.append(_dep('dummy-pkg-a'))
        assert group.contains(_dep('dummy-pkg-a'))

    def test_empty_rules_match_nothing(self) -> None:
        """A group with no criteria captures nothing."""
        group = DependencyGroup(name='g', rules={})
        assert not group.contains(_dep('anything'))

    def test_exclude_only_matches_nothing(self) -> None:
        """Exclusions alone do not make a group match anything."""
        group = DependencyGroup(name='g', rules={'exclude-patterns': ['x']})
        assert not group.contains(_dep('y'))

    def test_match_is_case_sensitive(self) -> None:
        """Globs are matched case-sensitively."""
        group = DependencyGroup(name='g', rules={'patterns': ['Rails*']})
        assert not group.contains(_dep('rails'))
        assert group.contains(_dep('Rails'))

    def test_full_name_with_scope(self) -> None:
        """Patterns see the scope of scoped packages."""
        group = DependencyGroup(name='g', rules={'patterns': ['@babel/*']})
        assert group.contains(Dependency(name='@babel/core', package_manager='npm_and_yarn', version='7.0.0'))
        assert not group.contains(Dependency(name='babel-core', package_manager='npm_and_yarn', version='7.0.0'))

    def test_maven_coordinates(self) -> None:
        """Patterns match group:artifact names."""
        group = DependencyGroup(name='g', rules={'patterns': ['org.slf4j:*']})
        assert group.contains(Dependency(name='org.slf4j:slf4j-api', package_manager='maven', version='2.0.0'))

    def test_dependency_type_production(self) -> None:
        """dependency-type: production selects runtime dependencies."""
        group = DependencyGroup(name='g', rules={'dependency-type': 'production'})
        assert group.contains(_production('rack'))
        assert not group.contains(_development('rspec'))

    def test_dependency_type_development(self) -> None:
        """dependency-type: development selects the rest."""
        group = DependencyGroup(name='g', rules={'dependency-type': 'development'})
        assert group.contains(_development('rspec'))
        assert not group.contains(_production('rack'))

    def test_patterns_and_dependency_type_both_required(self) -> None:
        """Patterns and dependency-type are combined with AND."""
        group = DependencyGroup(name='g', rules={'patterns': ['rspec*'], 'dependency-type': 'development'})
        assert group.contains(_development('rspec-core'))
        assert not group.contains(_production('rspec-core'))
        assert not group.contains(_development('rubocop'))

    def test_dependency_type_with_exclusion(self) -> None:
        """Exclusion also applies to dependency-type matches."""
        group = DependencyGroup(name='g', rules={'dependency-type': 'development', 'exclude-patterns': ['rubocop']})
        assert group.contains(_development('rspec'))
        assert not group.contains(_development('rubocop'))

    def test_unknown_dependency_type_matches_nothing(self) -> None:
        """An unrecognized dependency-type never matches."""
        group = DependencyGroup(name='g', rules={'dependency-type': 'optional'})
        assert not group.contains(_production('rack'))
        assert not group.contains(_development('rspec'))


# ── Ceilings ─────────────────────────────────────────────────────────


class TestIgnoredVersionsFor:
    """Tests for DependencyGroup.ignored_versions_for()."""

    def test_patch_ceiling(self) -> None:
        """A patch ceiling ignores major then minor updates."""
        group = DependencyGroup(name='g', rules={'highest-semver-allowed': 'patch'}, experiments=EXPERIMENTAL)
        assert group.ignored_versions_for(_dep('dummy', '1.8.0')) == ['>= 2.a', '>= 1.9.a, < 2']

    def test_minor_ceiling(self) -> None:
        """A minor ceiling ignores every later major."""
        group = DependencyGroup(name='g', rules={'highest-semver-allowed': 'minor'}, experiments=EXPERIMENTAL)
        assert group.ignored_versions_for(_dep('dummy', '1.8.0')) == ['>= 2.a']

    def test_major_ceiling(self) -> None:
        """A major ceiling ignores nothing."""
        group = DependencyGroup(name='g', rules={'highest-semver-allowed': 'major'}, experiments=EXPERIMENTAL)
        assert group.ignored_versions_for(_dep('dummy', '1.8.0')) == []

    def test_no_ceiling(self) -> None:
        """Without a ceiling nothing is ignored."""
        group = DependencyGroup(name='g', rules={'patterns': ['*']}, experiments=EXPERIMENTAL)
        assert group.ignored_versions_for(_dep('dummy', '1.8.0')) == []

    def test_experiment_disabled(self) -> None:
        """Ceilings are not honored unless the experiment is on."""
        group = DependencyGroup(name='g', rules={'highest-semver-allowed': 'patch'})
        assert group.ignored_versions_for(_dep('dummy', '1.8.0')) == []

    def test_patch_ceiling_semantics(self) -> None:
        """Patch releases stay allowed under a patch ceiling."""
        group = DependencyGroup(name='g', rules={'highest-semver-allowed': 'patch'}, experiments=EXPERIMENTAL)
        ranges = group.ignored_versions_for(_dep('dummy', '1.8.0'))
        assert not any_satisfied(ranges, '1.8.1')
        assert any_satisfied(ranges, '1.9.0')
        assert any_satisfied(ranges, '2.0.0')
        assert any_satisfied(ranges, '7.0.0')

    def test_without_current_version(self) -> None:
        """A dependency with no version gets no ceiling ranges."""
        group = DependencyGroup(name='g', rules={'highest-semver-allowed': 'minor'}, experiments=EXPERIMENTAL)
        assert group.ignored_versions_for(Dependency(name='dummy', package_manager='bundler')) == []


class TestTargetsHighestVersionsPossible:
    """Tests for DependencyGroup.targets_highest_versions_possible."""

    @pytest.mark.parametrize('level', [None, 'major', 'minor', 'patch'])
    def test_experiment_disabled(self, level: str | None) -> None:
        """Legacy behavior: always the highest version."""
        rules = {'highest-semver-allowed': level} if level else {}
        assert DependencyGroup(name='g', rules=rules).targets_highest_versions_possible

    @pytest.mark.parametrize(('level', 'expected'), [(None, True), ('major', True), ('minor', False), ('patch', False)])
    def test_experiment_enabled(self, level: str | None, expected: bool) -> None:
        """Only minor and patch ceilings hold a group back."""
        rules = {'highest-semver-allowed': level} if level else {}
        group = DependencyGroup(name='g', rules=rules, experiments=EXPERIMENTAL)
        assert group.targets_highest_versions_possible is expected


# ── YAML rendering ───────────────────────────────────────────────────


class TestToConfigYaml:
    """Tests for DependencyGroup.to_config_yaml()."""

    def test_patterns_and_exclusions(self) -> None:
        """Renders a groups fragment with block sequences."""
        group = DependencyGroup(
            name='test-group',
            rules={'patterns': ['test-*', 'nested/*'], 'exclude-patterns': ['test-excluded']},
        )
        assert group.to_config_yaml() == (
            'groups:\n'
            '  test-group:\n'
            '    patterns:\n'
            '    - test-*\n'
            '    - nested/*\n'
            '    exclude-patterns:\n'
            '    - test-excluded\n'
        )

    def test_all_rules(self) -> None:
        """Every known rule is rendered in a fixed order."""
        group = DependencyGroup(
            name='deps',
            rules={'highest-semver-allowed': 'minor', 'dependency-type': 'production', 'patterns': ['*']},
        )
        assert group.to_config_yaml() == (
            'groups:\n'
            '  deps:\n'
            '    patterns:\n'
            '    - "*"\n'
            '    dependency-type: production\n'
            '    highest-semver-allowed: minor\n'
        )

    def test_non_plain_strings_double_quoted(self) -> None:
        """Strings that cannot be written plain are double-quoted."""
        group = DependencyGroup(
            name='test-group',
            rules={'patterns': ['test-*', 'nested/*'], 'exclude-patterns': ['*-2']},
        )
        assert group.to_config_yaml() == (
            'groups:\n'
            '  test-group:\n'
            '    patterns:\n'
            '    - test-*\n'
            '    - nested/*\n'
            '    exclude-patterns:\n'
            '    - "*-2"\n'
        )

    def test_strings_read_as_other_types_double_quoted(self) -> None:
        """Pattern strings YAML would read as booleans or numbers keep their quotes."""
        group = DependencyGroup(name='g', rules={'patterns': ['true', '12']})
        assert group.to_config_yaml() == 'groups:\n  g:\n    patterns:\n    - "true"\n    - "12"\n'

    def test_unknown_keys_not_rendered(self) -> None:
        """Only the rules groups understand are written out."""
        group = DependencyGroup(name='g', rules={'patterns': ['a'], 'applies-to': 'security-updates'})
        assert 'applies-to' not in group.to_config_yaml()

    def test_round_trip_is_fixed_point(self) -> None:
        """Parsing the rendered YAML and rendering again gives the same text."""
        group = DependencyGroup(
            name='test-group',
            rules={'patterns': ['test-*', '*-2'], 'exclude-patterns': ['test-b'], 'highest-semver-allowed': 'patch'},
        )
        rendered = group.to_config_yaml()
        (parsed,) = parse_groups_yaml(rendered)
        assert parsed.name == 'test-group'
        assert parsed.group_rules == group.group_rules
        assert parsed.to_config_yaml() == rendered

    def test_repr(self) -> None:
        """repr shows the name and member count."""
        group = DependencyGroup(name='g', rules={})
        assert repr(group) == "DependencyGroup(name='g', dependencies=0)"
