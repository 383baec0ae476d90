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

"""Version parsing, ordering and segment arithmetic.

Versions from every ecosystem go through one best-effort parser modelled
on RubyGems' ``Gem::Version``: the raw string is scanned for digit runs
and letter runs, each becoming one :class:`Segment`. A ``-`` reads as
``.pre.`` so that ``1.2.4-rc0`` is a pre-release of ``1.2.4``.

Ordering Rules::

    ┌──────────────────────────┬─────────────────────────────────────────┐
    │ Comparison               │ Result                                  │
    ├──────────────────────────┼─────────────────────────────────────────┤
    │ numeric vs numeric       │ integer order: 9 < 10                   │
    ├──────────────────────────┼─────────────────────────────────────────┤
    │ alpha vs alpha           │ case-sensitive string order: SR < a     │
    ├──────────────────────────┼─────────────────────────────────────────┤
    │ alpha vs numeric         │ alpha first: 1.2.3.a < 1.2.3.0          │
    ├──────────────────────────┼─────────────────────────────────────────┤
    │ absent vs numeric        │ absent reads as 0: 1.2 < 1.2.1          │
    ├──────────────────────────┼─────────────────────────────────────────┤
    │ absent vs alpha          │ alpha first: 1.2.3.a < 1.2.3            │
    └──────────────────────────┴─────────────────────────────────────────┘

The last rule is what makes ``X.Y.Z.a`` the smallest version after every
``X.Y.Z`` release, including its pre-releases, and it is why ignore ranges
use ``.a`` lower bounds.

Nothing in this module raises on odd input: ``Finchley.SR3``, ``latest``
or an empty string all parse into something comparable.

Boundary arithmetic works on the dot-separated parts of the raw string
instead of the scanned segments, because the ranges it produces must
spell the version the way the ecosystem does::

    next_segment_floor(['1', '2', '3'], 1)       ->  '1.3.a'
    next_segment_boundary(['1', '2', '3'], 1)    ->  '1.3'
    next_segment_boundary(['Finchley', 'SR3'], 1) -> 'Finchley.SR3.999999'
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass
from enum import IntEnum

# Upper bound used when a segment cannot be incremented (e.g. "SR3").
OPAQUE_CEILING = 999999

# Appended to a lower bound so that it precedes every pre-release.
PRERELEASE_MARKER = 'a'

_TOKEN_RE = re.compile(r'[0-9]+|[A-Za-z]+')

# Java-style "update number" suffix: 1.8.0_202.
_UPDATE_SUFFIX_RE = re.compile(r'_\d.*$')
_WHITESPACE_RE = re.compile(r'\s+')


class SegmentKind(IntEnum):
    """Segment kinds, ordered so that alpha segments sort first."""

    ALPHA = 0
    NUMERIC = 1


@dataclass(frozen=True, order=True)
class Segment:
    """One scanned piece of a version string.

    Ordering compares ``kind`` first, so values of different types are
    never compared with each other.
    """

    kind: SegmentKind
    value: int | str

    def __str__(self) -> str:
        """Return the segment as it appears in a version string."""
        return str(self.value)


_ZERO = Segment(SegmentKind.NUMERIC, 0)


def _scan(text: str) -> tuple[Segment, ...]:
    normalized = text.replace('-', '.pre.')
    segments = tuple(
        Segment(SegmentKind.NUMERIC, int(token)) if token.isdigit() else Segment(SegmentKind.ALPHA, token)
        for token in _TOKEN_RE.findall(normalized)
    )
    if segments:
        return segments
    if not text:
        return (_ZERO,)
    return (Segment(SegmentKind.ALPHA, text),)


def _drop_trailing_zeros(segments: list[Segment]) -> list[Segment]:
    while segments and segments[-1] == _ZERO:
        segments.pop()
    return segments


def _canonicalize(segments: tuple[Segment, ...]) -> tuple[Segment, ...]:
    """Strip zeros that do not affect ordering (``1.2.0`` == ``1.2``)."""
    split = next((i for i, s in enumerate(segments) if s.kind is SegmentKind.ALPHA), len(segments))
    release = _drop_trailing_zeros(list(segments[:split]))
    prerelease = _drop_trailing_zeros(list(segments[split:]))
    return (*release, *prerelease)


def _compare_segments(left: tuple[Segment, ...], right: tuple[Segment, ...]) -> int:
    for i in range(max(len(left), len(right))):
        a = left[i] if i < len(left) else _ZERO
        b = right[i] if i < len(right) else _ZERO
        if a != b:
            return -1 if a < b else 1
    return 0


@functools.total_ordering
class Version:
    """A comparable version parsed from any ecosystem's version string.

    Args:
        raw: The version as written in a manifest, lockfile or registry.
    """

    def __init__(self, raw: str | int) -> None:
        """Scan ``raw`` into segments."""
        self._raw = str(raw).strip()
        self._segments = _scan(self._raw)
        self._canonical = _canonicalize(self._segments)

    @property
    def raw(self) -> str:
        """The stripped input string."""
        return self._raw

    @property
    def segments(self) -> tuple[Segment, ...]:
        """Every scanned segment, in order."""
        return self._segments

    @property
    def is_prerelease(self) -> bool:
        """Whether any segment is alphabetic (``1.0.0-rc1``, ``2.a``)."""
        return any(s.kind is SegmentKind.ALPHA for s in self._segments)

    def release(self) -> Version:
        """Return the numeric prefix, dropping any pre-release segments."""
        numeric: list[str] = []
        for segment in self._segments:
            if segment.kind is SegmentKind.ALPHA:
                break
            numeric.append(str(segment))
        return Version('.'.join(numeric) or '0')

    def bump(self) -> Version:
        """Return the upper bound used by ``~>``.

        Pre-release segments are dropped, then the last remaining segment
        is dropped (unless it is the only one) and the new last segment is
        incremented: ``1.2.3`` -> ``1.3``, ``1`` -> ``2``.
        """
        numbers = [int(s.value) for s in self.release().segments]
        if len(numbers) > 1:
            numbers.pop()
        numbers[-1] += 1
        return Version('.'.join(str(n) for n in numbers))

    def _compare(self, other: Version) -> int:
        if isinstance(other, JavaVersion):
            return -other._compare(self)
        return _compare_segments(self._canonical, other._canonical)

    def __eq__(self, other: object) -> bool:
        """Versions are equal when they order equally (``1.2 == 1.2.0``)."""
        if not isinstance(other, Version):
            return NotImplemented
        return self._compare(other) == 0

    def __lt__(self, other: object) -> bool:
        """Order by segments as described in the module docstring."""
        if not isinstance(other, Version):
            return NotImplemented
        return self._compare(other) < 0

    def __hash__(self) -> int:
        """Hash the canonical segments so equal versions hash equally."""
        return hash(self._canonical)

    def __str__(self) -> str:
        """Return the version as it was written."""
        return self._raw

    def __repr__(self) -> str:
        """Return a constructor-style representation."""
        return f'{type(self).__name__}({self._raw!r})'


class JavaVersion(Version):
    """A version with an optional Java-style update number (``1.8.0_202``).

    The text before the first ``_`` is the release part (a leading ``v`` is
    dropped and ``-`` reads as ``.``); the text after it is the update part,
    read as ``0`` unless it starts with a digit. Ordering compares the
    ``(release_part, update_part)`` pair, and a plain :class:`Version`
    compares as if its update part were ``0``.
    """

    def __init__(self, raw: str | int) -> None:
        """Split ``raw`` into its release and update parts."""
        text = str(raw).strip()
        release, _, update = text.partition('_')
        release = release.removeprefix('v').replace('-', '.')
        self.release_part = Version(release)
        self.update_part = Version(update if update[:1].isdigit() else '0')
        super().__init__(release)
        self._raw = text

    def _compare(self, other: Version) -> int:
        if isinstance(other, JavaVersion):
            other_release, other_update = other.release_part, other.update_part
        else:
            other_release, other_update = other, _ZERO_VERSION
        return self.release_part._compare(other_release) or self.update_part._compare(other_update)

    def __hash__(self) -> int:
        """Hash like the release part when there is no update number."""
        if self.update_part == _ZERO_VERSION:
            return hash(self.release_part)
        return hash((self.release_part, self.update_part))


_ZERO_VERSION = Version('0')

# Package managers whose versions carry a Java-style update number.
_VERSION_CLASSES: dict[str, type[Version]] = {
    'docker': JavaVersion,
}


def version_class_for(package_manager: str) -> type[Version]:
    """Return the version class used for ``package_manager``."""
    return _VERSION_CLASSES.get(package_manager, Version)


def parse_version(raw: str | int, package_manager: str = '') -> Version:
    """Parse ``raw`` with the version class registered for ``package_manager``."""
    return version_class_for(package_manager)(raw)


def compare_versions(left: str | Version, right: str | Version) -> int:
    """Return -1, 0 or 1 as ``left`` sorts before, with or after ``right``."""
    a = left if isinstance(left, Version) else Version(left)
    b = right if isinstance(right, Version) else Version(right)
    if a == b:
        return 0
    return -1 if a < b else 1


def boundary_parts(version: str, *, width: int = 0) -> list[str]:
    """Split the release portion of ``version`` on dots.

    Versions that start with a number are padded with ``'0'`` parts up to
    ``width``; versions with a non-numeric head are left as written, since
    padding ``Finchley.SR3`` would invent a segment it never had.

    Whitespace is removed and empty parts dropped, so ``1.`` splits like
    ``1``. A version with no parts at all gives an empty list.
    """
    cleaned = _UPDATE_SUFFIX_RE.sub('', _WHITESPACE_RE.sub('', version))
    parts = [p for p in cleaned.split('.') if p]
    if parts and parts[0].isdigit():
        parts.extend(['0'] * (width - len(parts)))
    return parts


def next_segment_boundary(parts: list[str], index: int) -> str:
    """Return the first version past every version sharing ``parts[:index + 1]``.

    The part at ``index`` is incremented and everything after it dropped.
    A missing part counts as ``0``. A part that is not a number cannot be
    incremented, so it is kept and followed by :data:`OPAQUE_CEILING`.
    """
    head = parts[:index]
    current = parts[index] if index < len(parts) else '0'
    if current.isdigit():
        return '.'.join([*head, str(int(current) + 1)])
    return '.'.join([*head, current, str(OPAQUE_CEILING)])


def next_segment_floor(parts: list[str], index: int) -> str:
    """Return the smallest version, pre-releases included, above ``parts[:index + 1]``.

    Like :func:`next_segment_boundary` with :data:`PRERELEASE_MARKER`
    appended. A non-numeric part at ``index`` is dropped instead of
    incremented, leaving the marker directly after the head.
    """
    head = parts[:index]
    current = parts[index] if index < len(parts) else '0'
    if current.isdigit():
        return '.'.join([*head, str(int(current) + 1), PRERELEASE_MARKER])
    return '.'.join([*head, PRERELEASE_MARKER])


__all__ = [
    'OPAQUE_CEILING',
    'PRERELEASE_MARKER',
    'JavaVersion',
    'Segment',
    'SegmentKind',
    'Version',
    'boundary_parts',
    'compare_versions',
    'next_segment_boundary',
    'next_segment_floor',
    'parse_version',
    'version_class_for',
]
