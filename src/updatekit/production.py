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

"""Production-dependency classifiers, one per package manager.

Every ecosystem records *why* a dependency is declared differently:
Bundler has Gemfile groups, npm has ``dependencies`` versus
``devDependencies``, Maven has scopes. Parsers store these labels on each
:class:`~updatekit.dependency.DependencyRequirement` as ``groups``; a
classifier turns the labels into a yes/no answer for the
``dependency-type`` group rule.

Registry::

    ┌──────────────┬──────────────────────────────────────────────────────┐
    │ Manager      │ Production when                                      │
    ├──────────────┼──────────────────────────────────────────────────────┤
    │ bundler      │ no groups, "default"/"runtime", or a "*prod*" group  │
    │ npm_and_yarn │ no groups, "dependencies" or "optionalDependencies"  │
    │ composer     │ no groups or "runtime"                               │
    │ pip          │ no groups, "default", "install_requires",            │
    │              │ "dependencies" or "requirements"                     │
    │ cargo        │ no groups or any non-"dev-dependencies" group        │
    │ maven/gradle │ no groups or any group other than "test"             │
    │ hex          │ no groups or "prod"                                  │
    │ (other)      │ always                                               │
    └──────────────┴──────────────────────────────────────────────────────┘

Usage::

    from updatekit.production import production_check_for_package_manager

    classifier = production_check_for_package_manager('bundler')
    classifier.is_production(['development', 'test'])  # False
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable


@runtime_checkable
class ProductionClassifier(Protocol):
    """Decides whether a dependency is needed at runtime."""

    def is_production(self, groups: Sequence[str]) -> bool:
        """Return whether a dependency declared under ``groups`` is a production one.

        Args:
            groups: Every group label from the dependency's requirements.
        """
        ...


class AlwaysProduction:
    """Classifier for ecosystems without a development/runtime split."""

    def is_production(self, groups: Sequence[str]) -> bool:
        """Every dependency is a production dependency."""
        return True


class BundlerClassifier:
    """Gemfile groups: ``default`` and ``runtime`` ship, so do ``*prod*`` groups."""

    def is_production(self, groups: Sequence[str]) -> bool:
        """Classify by Gemfile group names."""
        if not groups:
            return True
        if 'runtime' in groups or 'default' in groups:
            return True
        return any('prod' in g for g in groups)


class NpmClassifier:
    """package.json sections: ``dependencies`` and ``optionalDependencies`` ship."""

    def is_production(self, groups: Sequence[str]) -> bool:
        """Classify by package.json section."""
        if not groups:
            return True
        return 'dependencies' in groups or 'optionalDependencies' in groups


class ComposerClassifier:
    """composer.json: ``require`` is recorded as ``runtime``, ``require-dev`` as ``development``."""

    def is_production(self, groups: Sequence[str]) -> bool:
        """Classify by composer section."""
        return not groups or 'runtime' in groups


class PipClassifier:
    """Python manifests record their section name as the group."""

    _PRODUCTION_GROUPS = frozenset({'default', 'install_requires', 'dependencies', 'requirements'})

    def is_production(self, groups: Sequence[str]) -> bool:
        """Classify by requirements file, Pipfile or pyproject section."""
        if not groups:
            return True
        return any(g in self._PRODUCTION_GROUPS for g in groups)


class CargoClassifier:
    """Cargo.toml: everything except ``dev-dependencies`` is built into the crate."""

    def is_production(self, groups: Sequence[str]) -> bool:
        """Classify by Cargo.toml table name."""
        if not groups:
            return True
        return any(g != 'dev-dependencies' for g in groups)


class MavenClassifier:
    """Maven and Gradle: only the ``test`` scope is non-production."""

    def is_production(self, groups: Sequence[str]) -> bool:
        """Classify by dependency scope."""
        if not groups:
            return True
        return any(g != 'test' for g in groups)


class HexClassifier:
    """mix.exs: dependencies without ``only:`` run everywhere, ``only: :prod`` ships too."""

    def is_production(self, groups: Sequence[str]) -> bool:
        """Classify by the environments listed in ``only:``."""
        return not groups or 'prod' in groups


_CLASSIFIERS: dict[str, ProductionClassifier] = {
    'bundler': BundlerClassifier(),
    'npm_and_yarn': NpmClassifier(),
    'composer': ComposerClassifier(),
    'pip': PipClassifier(),
    'cargo': CargoClassifier(),
    'maven': MavenClassifier(),
    'gradle': MavenClassifier(),
    'hex': HexClassifier(),
}

_DEFAULT = AlwaysProduction()


def production_check_for_package_manager(package_manager: str) -> ProductionClassifier:
    """Return the classifier registered for ``package_manager``.

    Package managers without a registered classifier treat every
    dependency as a production dependency.
    """
    return _CLASSIFIERS.get(package_manager, _DEFAULT)


def register_production_classifier(package_manager: str, classifier: ProductionClassifier) -> None:
    """Register (or replace) the classifier for ``package_manager``.

    Intended for adapters and tests at startup, before any grouping runs.
    """
    _CLASSIFIERS[package_manager] = classifier


__all__ = [
    'AlwaysProduction',
    'BundlerClassifier',
    'CargoClassifier',
    'ComposerClassifier',
    'HexClassifier',
    'MavenClassifier',
    'NpmClassifier',
    'PipClassifier',
    'ProductionClassifier',
    'production_check_for_package_manager',
    'register_production_classifier',
]
