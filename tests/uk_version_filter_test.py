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

"""Tests for filtering registry candidates against ignore ranges."""

from __future__ import annotations

import pytest
from updatekit.errors import E, UpdateKitError
from updatekit.logging import configure_logging
from updatekit.version import JavaVersion, Version
from updatekit.version_filter import filter_ignored_versions, latest_allowed_version

configure_logging(quiet=True)

CANDIDATES = ['1.2.3', '1.2.4', '1.2.5-rc1', '1.3.0', '1.10.0', '2.0.0', '3.0.0-beta']


class TestFilterIgnoredVersions:
    """Tests for filter_ignored_versions()."""

    def test_no_ranges_keeps_everything(self) -> None:
        """Without ranges every candidate survives."""
        assert [str(v) for v in filter_ignored_versions(CANDIDATES, [])] == CANDIDATES

    def test_minor_and_major_ignored(self) -> None:
        """A patch ceiling keeps only patch releases."""
        allowed = filter_ignored_versions(CANDIDATES, ['>= 2.a', '>= 1.3.a, < 2'])
        assert [str(v) for v in allowed] == ['1.2.3', '1.2.4', '1.2.5-rc1']

    def test_all_versions_range(self) -> None:
        """'>= 0' removes every release."""
        assert filter_ignored_versions(['0.1', '1.0'], ['>= 0']) == []

    def test_empty_candidates_skipped(self) -> None:
        """Blank candidates are dropped."""
        assert [str(v) for v in filter_ignored_versions(['', '1.0'], [])] == ['1.0']

    def test_version_objects_pass_through(self) -> None:
        """Version instances are not re-parsed."""
        candidate = JavaVersion('1.8.0_202')
        assert filter_ignored_versions([candidate], ['< 1.8.0']) == [candidate]

    def test_package_manager_version_class(self) -> None:
        """String candidates use the package manager's version class."""
        (allowed,) = filter_ignored_versions(['17.0.2_8'], [], package_manager='docker')
        assert isinstance(allowed, JavaVersion)

    def test_ranges_use_package_manager_version_class(self) -> None:
        """Range bounds keep their Java update number for docker."""
        allowed = filter_ignored_versions(['1.8.0_202', '1.8.0_301'], ['>= 1.8.0_250'], package_manager='docker')
        assert [str(v) for v in allowed] == ['1.8.0_202']

    def test_raise_on_ignored(self) -> None:
        """Everything ignored can be reported as an error."""
        with pytest.raises(UpdateKitError) as exc_info:
            filter_ignored_versions(['2.0.0', '2.1.0'], ['>= 2.a, < 3'], raise_on_ignored=True)
        assert exc_info.value.code == E.ALL_VERSIONS_IGNORED

    def test_raise_on_ignored_needs_ranges(self) -> None:
        """No candidates and no ranges is not an error."""
        assert filter_ignored_versions([], [], raise_on_ignored=True) == []

    def test_malformed_range(self) -> None:
        """Malformed ranges raise."""
        with pytest.raises(UpdateKitError) as exc_info:
            filter_ignored_versions(['1.0'], ['>>> 1'])
        assert exc_info.value.code == E.REQUIREMENT_INVALID


class TestLatestAllowedVersion:
    """Tests for latest_allowed_version()."""

    def test_highest_release(self) -> None:
        """The highest non-ignored release wins."""
        assert latest_allowed_version(CANDIDATES, ['>= 2.a']) == Version('1.10.0')

    def test_prerelease_excluded_for_release(self) -> None:
        """Pre-releases are skipped when on a release."""
        latest = latest_allowed_version(CANDIDATES, ['>= 1.3.a'], current_version='1.2.3')
        assert str(latest) == '1.2.4'

    def test_prerelease_allowed_for_prerelease(self) -> None:
        """Pre-releases are candidates when already on one."""
        latest = latest_allowed_version(CANDIDATES, ['>= 1.3.a'], current_version='1.2.5-beta1')
        assert str(latest) == '1.2.5-rc1'

    def test_nothing_left(self) -> None:
        """None when every candidate is ignored."""
        assert latest_allowed_version(CANDIDATES, ['>= 0']) is None
