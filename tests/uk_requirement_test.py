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

"""Tests for version requirement parsing and evaluation."""

from __future__ import annotations

import pytest
from updatekit.errors import E, UpdateKitError
from updatekit.requirement import Constraint, any_satisfied, parse_requirement
from updatekit.version import JavaVersion, Version


class TestParseRequirement:
    """Tests for parse_requirement()."""

    def test_single_constraint(self) -> None:
        """An operator and a version."""
        requirement = parse_requirement('>= 1.2.3')
        assert requirement.constraints == (Constraint(op='>=', version=Version('1.2.3')),)

    def test_comma_separated(self) -> None:
        """Commas join constraints."""
        requirement = parse_requirement('>= 1.2.3.1.a, < 1.3')
        assert [c.op for c in requirement.constraints] == ['>=', '<']
        assert str(requirement) == '>= 1.2.3.1.a, < 1.3'

    def test_list_input(self) -> None:
        """A list of constraint strings is accepted."""
        requirement = parse_requirement(['> 1', '< 2'])
        assert str(requirement) == '> 1, < 2'

    def test_bare_version_means_equal(self) -> None:
        """No operator means exact match."""
        assert parse_requirement('1.2').constraints[0].op == '='

    def test_no_whitespace_needed(self) -> None:
        """Whitespace between operator and version is optional."""
        assert parse_requirement('>=2.a').satisfied_by('2.0.0')

    @pytest.mark.parametrize('text', ['', '   ', ','])
    def test_empty_means_everything(self, text: str) -> None:
        """An empty requirement matches every version."""
        requirement = parse_requirement(text)
        assert str(requirement) == '>= 0'
        assert requirement.satisfied_by('0.0.1')

    @pytest.mark.parametrize('text', ['>>= 1', '=> 1', '>= ', '1.0 || 2.0', '~ 1.2'])
    def test_malformed_raises(self, text: str) -> None:
        """Malformed constraints are rejected."""
        with pytest.raises(UpdateKitError) as exc_info:
            parse_requirement(text)
        assert exc_info.value.code == E.REQUIREMENT_INVALID


class TestSatisfiedBy:
    """Tests for Requirement.satisfied_by()."""

    @pytest.mark.parametrize(
        ('text', 'version', 'expected'),
        [
            ('= 1.2', '1.2.0', True),
            ('!= 1.2', '1.2.0', False),
            ('> 1.2', '1.2.1', True),
            ('< 1.2', '1.2.0-rc1', True),
            ('<= 1.2', '1.2', True),
            ('>= 0', '0.0.0-alpha', False),
            ('~> 1.2.3', '1.2.9', True),
            ('~> 1.2.3', '1.3.0', False),
            ('~> 1.2.3', '1.2.2', False),
            ('~> 1.2', '1.9', True),
            ('~> 1.2', '2.0', False),
        ],
    )
    def test_operators(self, text: str, version: str, expected: bool) -> None:
        """Each operator follows version order."""
        assert parse_requirement(text).satisfied_by(version) is expected

    def test_all_constraints_must_hold(self) -> None:
        """Constraints are combined with AND."""
        requirement = parse_requirement('>= 1.3.a, < 2')
        assert requirement.satisfied_by('1.5')
        assert not requirement.satisfied_by('2.0')
        assert not requirement.satisfied_by('1.2.9')

    def test_package_manager_selects_version_class(self) -> None:
        """Raw strings are parsed with the package manager's version class."""
        requirement = parse_requirement('> 1.8.0')
        assert requirement.satisfied_by('1.8.0_202', package_manager='docker')
        assert requirement.satisfied_by(JavaVersion('1.8.0_202'))

    def test_package_manager_parses_bounds(self) -> None:
        """Constraint versions are parsed with the package manager's version class."""
        requirement = parse_requirement('>= 1.8.0_250', package_manager='docker')
        assert isinstance(requirement.constraints[0].version, JavaVersion)
        assert requirement.satisfied_by('1.8.0_301', package_manager='docker')
        assert not requirement.satisfied_by('1.8.0_202', package_manager='docker')
        assert str(requirement) == '>= 1.8.0_250'

    def test_version_objects(self) -> None:
        """Version objects are used as-is."""
        assert parse_requirement('< 2').satisfied_by(Version('1.9'))


class TestAnySatisfied:
    """Tests for any_satisfied()."""

    def test_any_range(self) -> None:
        """True when any range matches."""
        ranges = ['>= 2.a, < 3', '>= 1.3.a, < 2']
        assert any_satisfied(ranges, '1.4.0')
        assert any_satisfied(ranges, '2.1.0')
        assert not any_satisfied(ranges, '1.2.9')
        assert not any_satisfied(ranges, '3.0.0')

    def test_package_manager_passed_to_ranges(self) -> None:
        """Ranges and version share the package manager's version class."""
        assert any_satisfied(['>= 1.8.0_250'], '1.8.0_301', package_manager='docker')
        assert not any_satisfied(['>= 1.8.0_250'], '1.8.0_202', package_manager='docker')

    def test_no_ranges(self) -> None:
        """No ranges match nothing."""
        assert not any_satisfied([], '1.0.0')
