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

"""Structured logging for updatekit.

All modules log through `structlog <https://www.structlog.org/>`_ with
snake_case event names and keyword context::

    log.debug('ignored_versions', dependency='rails', ranges=['>= 8.a'])

Two render modes are available, both on stderr so that stdout stays
usable for piped output (``updatekit render-groups | yq``):

- **Console**: human-readable lines, colored when stderr is a TTY.
- **JSON** (``--json-log``): one JSON object per event.

Per-run context (the package manager or job being processed) is carried
in structlog context variables, so every event emitted while a job runs
is tagged without threading loggers through the engines::

    from updatekit.logging import bind_run_context, configure_logging, get_logger

    configure_logging(quiet=True)
    bind_run_context(package_manager='bundler', job='nightly')
    get_logger(__name__).info('groups_assigned', groups=3)
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog


def _level(*, verbose: bool, quiet: bool) -> int:
    if quiet:
        return logging.WARNING
    if verbose:
        return logging.DEBUG
    return logging.INFO


def _renderer(json_log: bool) -> structlog.types.Processor:
    if json_log:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    json_log: bool = False,
) -> None:
    """Route structlog events through the stdlib root logger on stderr.

    Safe to call more than once; the last call wins.

    Args:
        verbose: Emit debug events (range computations, group matching).
        quiet: Emit only warnings and errors. Takes precedence over
            ``verbose``.
        json_log: Render one JSON object per event instead of console lines.
    """
    logging.basicConfig(
        format='%(message)s',
        stream=sys.stderr,
        level=_level(verbose=verbose, quiet=quiet),
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt='iso'),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _renderer(json_log),
        ],
    )
    for handler in logging.root.handlers:
        handler.setFormatter(formatter)


def get_logger(name: str = 'updatekit') -> structlog.stdlib.BoundLogger:
    """Return a structlog logger bound to ``name``."""
    return structlog.get_logger(name)


def bind_run_context(**context: Any) -> None:  # noqa: ANN401 - arbitrary log context
    """Tag every subsequent event in this context with ``context``."""
    structlog.contextvars.bind_contextvars(**context)


def clear_run_context() -> None:
    """Drop all context bound with :func:`bind_run_context`."""
    structlog.contextvars.clear_contextvars()


__all__ = [
    'bind_run_context',
    'clear_run_context',
    'configure_logging',
    'get_logger',
]
