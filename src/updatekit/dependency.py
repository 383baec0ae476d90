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

"""The dependency record shared by every engine.

Parsers for each ecosystem produce :class:`Dependency` objects; the
engines in this package only read them. A dependency knows its name,
current version (``None`` for dependencies that are declared but not
resolved), the package manager that owns it, and the requirements that
declared it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from updatekit.production import production_check_for_package_manager


@dataclass(frozen=True)
class DependencyRequirement:
    """One place a dependency is declared.

    Attributes:
        file: Manifest that declares the dependency (e.g. ``"Gemfile"``).
        requirement: The declared constraint, e.g. ``"~> 1.1.0"``.
        groups: Ecosystem-specific labels such as Gemfile groups or the
            package.json section name.
        source: Opaque source metadata from the parser.
    """

    file: str
    requirement: str | None = None
    groups: tuple[str, ...] = ()
    source: dict[str, Any] | None = field(default=None, compare=False, hash=False)

    def __post_init__(self) -> None:
        """Accept any sequence of groups."""
        object.__setattr__(self, 'groups', tuple(self.groups))


@dataclass(frozen=True)
class Dependency:
    """A dependency as seen by the grouping and ignore engines.

    Attributes:
        name: Full name including any scope or namespace
            (``"@babel/core"``, ``"org.slf4j:slf4j-api"``).
        package_manager: Package manager id, e.g. ``"bundler"``.
        version: Currently resolved version, or ``None``.
        requirements: Declarations of this dependency.
    """

    name: str
    package_manager: str
    version: str | None = None
    requirements: tuple[DependencyRequirement, ...] = ()

    def __post_init__(self) -> None:
        """Accept any sequence of requirements."""
        object.__setattr__(self, 'requirements', tuple(self.requirements))

    @property
    def requirement_groups(self) -> list[str]:
        """Every group label across all requirements, in declaration order."""
        return [g for req in self.requirements for g in req.groups]

    def production(self) -> bool:
        """Return whether this is a production (runtime) dependency."""
        classifier = production_check_for_package_manager(self.package_manager)
        return classifier.is_production(self.requirement_groups)


__all__ = [
    'Dependency',
    'DependencyRequirement',
]
