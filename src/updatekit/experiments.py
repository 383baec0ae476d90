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

"""Feature flags for an update run.

Flags are an immutable value built once from job configuration and
passed to whatever needs them, so two jobs with different flags can run
side by side and tests never have to reset shared state::

    experiments = Experiments.from_mapping({'grouped_updates_experimental_rules': True})
    group = DependencyGroup(name='deps', rules=rules, experiments=experiments)
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

# Honors highest-semver-allowed on dependency groups.
GROUPED_UPDATES_EXPERIMENTAL_RULES = 'grouped_updates_experimental_rules'


@dataclass(frozen=True)
class Experiments:
    """The set of enabled feature flags.

    Attributes:
        enabled_flags: Names of the flags that are switched on.
    """

    enabled_flags: frozenset[str] = frozenset()

    @classmethod
    def from_mapping(cls, flags: Mapping[str, object]) -> Experiments:
        """Build from a ``{name: value}`` mapping; truthy values enable a flag."""
        return cls(enabled_flags=frozenset(name for name, value in flags.items() if value))

    def enabled(self, name: str) -> bool:
        """Return whether flag ``name`` is switched on."""
        return name in self.enabled_flags

    def register(self, name: str, value: bool = True) -> Experiments:
        """Return a copy with flag ``name`` set to ``value``."""
        if value:
            return Experiments(enabled_flags=self.enabled_flags | {name})
        return Experiments(enabled_flags=self.enabled_flags - {name})


__all__ = [
    'GROUPED_UPDATES_EXPERIMENTAL_RULES',
    'Experiments',
]
