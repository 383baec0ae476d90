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

"""Apply ignore ranges to the versions a registry offers.

Registry adapters fetch the published versions of a dependency and hand
them here together with the ranges from
:func:`~updatekit.policy.collect_ignored_versions`::

    allowed = filter_ignored_versions(['1.2.3', '1.2.4', '1.3.0'], ['>= 1.3.a, < 2'])
    # [Version('1.2.3'), Version('1.2.4')]

    latest_allowed_version(['1.2.4', '1.3.0-rc1'], [], current_version='1.2.3')
    # Version('1.2.4'): pre-releases only when already on one
"""

from __future__ import annotations

from collections.abc import Iterable

from updatekit.errors import E, UpdateKitError
from updatekit.logging import get_logger
from updatekit.requirement import Requirement, parse_requirement
from updatekit.version import Version, parse_version

log = get_logger(__name__)


def _parse_candidates(candidates: Iterable[str | Version], package_manager: str) -> list[Version]:
    versions: list[Version] = []
    for candidate in candidates:
        if isinstance(candidate, Version):
            versions.append(candidate)
        elif not str(candidate).strip():
            log.warning('skipped_candidate_version', candidate=candidate, reason='empty')
        else:
            versions.append(parse_version(candidate, package_manager))
    return versions


def filter_ignored_versions(
    candidates: Iterable[str | Version],
    ranges: Iterable[str],
    *,
    package_manager: str = '',
    raise_on_ignored: bool = False,
) -> list[Version]:
    """Drop every candidate that falls inside any of ``ranges``.

    Args:
        candidates: Published versions, as strings or :class:`Version`.
        ranges: Ignore ranges such as ``">= 2.a, < 3"``.
        package_manager: Selects the version class for string candidates
            and for the bounds inside ``ranges``.
        raise_on_ignored: Raise instead of returning an empty list when
            the ranges removed every candidate.

    Returns:
        The remaining candidates, in input order.

    Raises:
        UpdateKitError: ``UK-REQUIREMENT-INVALID`` for a malformed range;
            ``UK-ALL-VERSIONS-IGNORED`` when ``raise_on_ignored`` is set
            and nothing survived.
    """
    versions = _parse_candidates(candidates, package_manager)
    requirements: list[Requirement] = [parse_requirement(r, package_manager) for r in ranges]
    allowed = [v for v in versions if not any(req.satisfied_by(v) for req in requirements)]

    log.debug(
        'filtered_candidates',
        candidates=len(versions),
        allowed=len(allowed),
        ranges=[str(r) for r in requirements],
    )
    if raise_on_ignored and requirements and versions and not allowed:
        raise UpdateKitError(
            code=E.ALL_VERSIONS_IGNORED,
            message=f'All {len(versions)} candidate versions are ignored by {", ".join(map(str, requirements))}',
            hint='Relax the ignore conditions or the group ceiling for this dependency.',
        )
    return allowed


def latest_allowed_version(
    candidates: Iterable[str | Version],
    ranges: Iterable[str],
    *,
    current_version: str | Version | None = None,
    package_manager: str = '',
) -> Version | None:
    """Return the highest candidate outside ``ranges``, or ``None``.

    Pre-release candidates are only eligible when ``current_version`` is
    itself a pre-release.
    """
    allowed = filter_ignored_versions(candidates, ranges, package_manager=package_manager)
    current = current_version
    if current is not None and not isinstance(current, Version):
        current = parse_version(current, package_manager)
    allow_prerelease = current is not None and current.is_prerelease

    eligible = [v for v in allowed if allow_prerelease or not v.is_prerelease]
    latest = max(eligible, default=None)
    log.debug(
        'latest_allowed_version',
        current=str(current) if current is not None else None,
        latest=str(latest) if latest is not None else None,
    )
    return latest


__all__ = [
    'filter_ignored_versions',
    'latest_allowed_version',
]
