"""Dependency checks: each launches a client binary and inspects its exit status."""

from __future__ import annotations

import logging

from envprobe.checks.base import CheckResult, DependencyUnreachable, ensure_reachable
from envprobe.checks.process import run_check
from envprobe.config import CACHE, DOCUMENT_STORE, RELATIONAL_DATABASE, DependencyConfig


def run_dependency(
    dependency: DependencyConfig, logger: logging.Logger | None = None
) -> CheckResult:
    """Run the check described by a dependency config entry."""
    return run_check(
        dependency.name,
        dependency.command,
        dependency.resolved_env(),
        timeout=dependency.timeout,
        capture_stderr=dependency.capture_stderr,
        logger=logger,
    )


def check_document_store(logger: logging.Logger | None = None) -> CheckResult:
    return run_dependency(DOCUMENT_STORE, logger=logger)


def check_relational_database(logger: logging.Logger | None = None) -> CheckResult:
    return run_dependency(RELATIONAL_DATABASE, logger=logger)


def check_cache(logger: logging.Logger | None = None) -> CheckResult:
    return run_dependency(CACHE, logger=logger)


__all__ = [
    "CheckResult",
    "DependencyUnreachable",
    "check_cache",
    "check_document_store",
    "check_relational_database",
    "ensure_reachable",
    "run_check",
    "run_dependency",
]
