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

"""CLI entry point for updatekit.

Loads ``updatekit.yml`` and answers the questions an update run asks
before it talks to any registry.

Subcommands::

    updatekit ignored        Show the ignore ranges for one dependency
    updatekit groups         Partition dependencies into the configured groups
    updatekit render-groups  Print each configured group as YAML
    updatekit explain        Explain an error code

Usage::

    # Which versions of rails are off limits when updating from 7.0.4?
    updatekit ignored rails 7.0.4 --package-manager bundler

    # ...inside the "rails" group, picking from published versions:
    updatekit ignored rails 7.0.4 --group rails --candidate 7.0.5 --candidate 7.1.0

    # Where do these dependencies go?
    updatekit groups rails@7.0.4 rack@3.0.0 @babel/core@7.22.0

    # Explain an error:
    updatekit explain UK-GROUP-INVALID-CEILING
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from rich_argparse import RichHelpFormatter

from updatekit import __version__
from updatekit.config import CONFIG_FILENAME, JobConfig, load_job_config
from updatekit.dependency import Dependency
from updatekit.errors import E, UpdateKitError, explain, render_error
from updatekit.group_engine import DependencyGroupEngine
from updatekit.logging import bind_run_context, clear_run_context, configure_logging, get_logger
from updatekit.policy import collect_ignored_versions
from updatekit.version_filter import latest_allowed_version

logger = get_logger(__name__)


def _load_config(args: argparse.Namespace) -> JobConfig:
    """Load the job config named on the command line, or the default one."""
    if args.config:
        config = load_job_config(Path(args.config))
    else:
        default = Path.cwd() / CONFIG_FILENAME
        if default.is_file():
            config = load_job_config(default)
        else:
            logger.debug('no_job_config', path=str(default))
            config = JobConfig()

    experiments = config.experiments
    for flag in args.experiment or ():
        experiments = experiments.register(flag)
    return replace(config, experiments=experiments)


def _parse_dependency_arg(text: str, package_manager: str) -> Dependency:
    """Parse ``name@version``; scoped names such as ``@babel/core`` keep their ``@``."""
    name, sep, version = text.rpartition('@')
    if not sep or not name:
        return Dependency(name=text, package_manager=package_manager)
    return Dependency(name=name, package_manager=package_manager, version=version or None)


def _cmd_ignored(args: argparse.Namespace) -> int:
    """Handle the ``ignored`` subcommand."""
    config = _load_config(args)
    dependency = Dependency(name=args.name, package_manager=args.package_manager, version=args.version)

    group = None
    if args.group:
        engine = DependencyGroupEngine.from_job_config(config)
        group = engine.find_group(args.group)
        if group is None:
            names = [g.name for g in engine.dependency_groups]
            raise UpdateKitError(
                code=E.CONFIG_INVALID_VALUE,
                message=f"No group named '{args.group}'",
                hint=f'Configured groups: {", ".join(names) or "(none)"}.',
            )
        if not group.contains(dependency):
            logger.warning('dependency_not_in_group', dependency=dependency.name, group=group.name)

    ranges = collect_ignored_versions(
        dependency,
        config.ignore_conditions,
        group=group,
        security_updates_only=args.security_updates_only or config.security_updates_only,
    )
    for ignore_range in ranges:
        print(ignore_range)  # noqa: T201 - CLI output

    if args.candidate:
        latest = latest_allowed_version(
            args.candidate,
            ranges,
            current_version=args.version,
            package_manager=args.package_manager,
        )
        if latest is None:
            print('no allowed version', file=sys.stderr)  # noqa: T201 - CLI output
            return 1
        print(f'latest allowed: {latest}')  # noqa: T201 - CLI output
    return 0


def _cmd_groups(args: argparse.Namespace) -> int:
    """Handle the ``groups`` subcommand."""
    config = _load_config(args)
    engine = DependencyGroupEngine.from_job_config(config)
    engine.assign_to_groups(_parse_dependency_arg(d, args.package_manager) for d in args.dependencies)

    for group in engine.dependency_groups:
        members = ', '.join(d.name for d in group.dependencies) or '-'
        print(f'{group.name}: {members}')  # noqa: T201 - CLI output
    ungrouped = ', '.join(d.name for d in engine.ungrouped_dependencies) or '-'
    print(f'(ungrouped): {ungrouped}')  # noqa: T201 - CLI output
    return 0


def _cmd_render_groups(args: argparse.Namespace) -> int:
    """Handle the ``render-groups`` subcommand."""
    config = _load_config(args)
    engine = DependencyGroupEngine.from_job_config(config)
    for group in engine.dependency_groups:
        print(group.to_config_yaml(), end='')  # noqa: T201 - CLI output
    return 0


def _cmd_explain(args: argparse.Namespace) -> int:
    """Handle the ``explain`` subcommand."""
    result = explain(args.code)
    if result is None:
        print(f'Unknown error code: {args.code}')  # noqa: T201 - CLI output
        return 1
    print(result)  # noqa: T201 - CLI output
    return 0


def _add_config_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        '--config',
        '-c',
        metavar='PATH',
        default=None,
        help=f'Path to {CONFIG_FILENAME} or its directory (default: ./{CONFIG_FILENAME} if present).',
    )
    parser.add_argument(
        '--experiment',
        action='append',
        metavar='NAME',
        help='Enable an experiment on top of the config file (repeatable).',
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser.

    Returns:
        Configured :class:`argparse.ArgumentParser`.
    """
    RichHelpFormatter.styles['argparse.groups'] = 'bold yellow'
    parser = argparse.ArgumentParser(
        prog='updatekit',
        description='Ignore ranges and dependency groups for dependency updates.',
        formatter_class=RichHelpFormatter,
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}',
    )
    parser.add_argument('--verbose', '-v', action='store_true', help='Show debug logs.')
    parser.add_argument('--quiet', '-q', action='store_true', help='Only show warnings and errors.')
    parser.add_argument('--json-log', action='store_true', help='Emit logs as JSON lines.')

    subparsers = parser.add_subparsers(dest='command')

    ignored_parser = subparsers.add_parser(
        'ignored',
        help='Show the ignore ranges for one dependency.',
        formatter_class=RichHelpFormatter,
    )
    ignored_parser.add_argument('name', help='Dependency name, including any scope.')
    ignored_parser.add_argument('version', nargs='?', default=None, help='Current version.')
    ignored_parser.add_argument(
        '--package-manager',
        '-p',
        default='',
        help='Package manager id (e.g. bundler, npm_and_yarn, docker).',
    )
    ignored_parser.add_argument('--group', '-g', default=None, help='Apply the ceiling of this group.')
    ignored_parser.add_argument(
        '--security-updates-only',
        action='store_true',
        help='Compute ranges for a security-only run.',
    )
    ignored_parser.add_argument(
        '--candidate',
        action='append',
        metavar='VERSION',
        help='A published version; prints the latest one not ignored (repeatable).',
    )
    _add_config_args(ignored_parser)

    groups_parser = subparsers.add_parser(
        'groups',
        help='Partition dependencies into the configured groups.',
        formatter_class=RichHelpFormatter,
    )
    groups_parser.add_argument('dependencies', nargs='+', metavar='NAME@VERSION', help='Dependencies to assign.')
    groups_parser.add_argument('--package-manager', '-p', default='', help='Package manager id.')
    _add_config_args(groups_parser)

    render_parser = subparsers.add_parser(
        'render-groups',
        help='Print each configured group as YAML.',
        formatter_class=RichHelpFormatter,
    )
    _add_config_args(render_parser)

    explain_parser = subparsers.add_parser(
        'explain',
        help='Explain an error code.',
        formatter_class=RichHelpFormatter,
    )
    explain_parser.add_argument('code', help='Error code (e.g. UK-GROUP-INVALID-CEILING).')

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose, quiet=args.quiet, json_log=args.json_log)
    command = args.command
    bind_run_context(command=command, package_manager=getattr(args, 'package_manager', ''))

    try:
        if command == 'ignored':
            return _cmd_ignored(args)
        if command == 'groups':
            return _cmd_groups(args)
        if command == 'render-groups':
            return _cmd_render_groups(args)
        if command == 'explain':
            return _cmd_explain(args)

        parser.print_help()  # noqa: T201 - CLI output
        print(  # noqa: T201 - CLI output
            f'\n{parser.prog}: error: please provide a command',
            file=sys.stderr,
        )
        return 2

    except UpdateKitError as exc:
        render_error(exc)
        return 1
    except KeyboardInterrupt:
        logger.info('interrupted')
        return 130
    finally:
        clear_run_context()


def _main() -> None:
    """Wrapper for pyproject.toml [project.scripts] entry point."""
    sys.exit(main())


__all__ = [
    'build_parser',
    'main',
]
