"""Launch a dependency's client binary and judge it by exit status."""

from __future__ import annotations

import logging
import os
import re
import subprocess
import time
from typing import Mapping, Sequence

from envprobe.checks.base import CheckResult

_STDERR_LIMIT = 500

_ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
# Characters XML 1.0 cannot carry, so junit.xml stays parseable
_XML_ILLEGAL = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def _clean_output(text: str) -> str:
    return _XML_ILLEGAL.sub("", _ANSI_ESCAPE.sub("", text))


def _child_env(env_overrides: Mapping[str, str] | None) -> dict[str, str]:
    return {**os.environ, **(env_overrides or {})}


def run_check(
    name: str,
    command: Sequence[str],
    env_overrides: Mapping[str, str] | None = None,
    *,
    timeout: float | None = None,
    capture_stderr: bool = True,
    logger: logging.Logger | None = None,
) -> CheckResult:
    """Run one client command and report whether it exited with code 0.

    The child inherits the full parent environment plus ``env_overrides``.
    Stdout is always discarded. Stderr is discarded too unless
    ``capture_stderr`` is set, in which case it is attached to failed results.

    A missing binary or permission error counts as a failed check, the same
    as a non-zero exit. With ``timeout=None`` the call blocks until the
    client exits on its own.
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    argv = list(command)
    if not argv:
        raise ValueError(f"Empty command for dependency '{name}'")

    logger.info(f"Checking {name}: {' '.join(argv)}")
    if env_overrides:
        logger.debug(f"Environment overrides: {', '.join(sorted(env_overrides))}")

    start = time.monotonic()
    try:
        proc = subprocess.run(
            argv,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE if capture_stderr else subprocess.DEVNULL,
            env=_child_env(env_overrides),
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired:
        duration = time.monotonic() - start
        logger.warning(f"{name}: client timed out after {timeout}s")
        return CheckResult(
            name=name,
            passed=False,
            message=f"timed out after {timeout}s",
            command=argv,
            exit_code=None,
            duration_seconds=duration,
        )
    except OSError as e:
        duration = time.monotonic() - start
        logger.warning(f"{name}: could not launch '{argv[0]}': {e}")
        return CheckResult(
            name=name,
            passed=False,
            message=f"could not launch '{argv[0]}': {e}",
            command=argv,
            exit_code=None,
            duration_seconds=duration,
        )

    duration = time.monotonic() - start
    passed = proc.returncode == 0
    logger.info(f"{name}: exit code {proc.returncode}, passed={passed}")

    stderr = ""
    if proc.stderr:
        stderr = _clean_output(
            proc.stderr.decode("utf-8", errors="replace")
        ).strip()
        logger.debug(f"stderr: {stderr}")

    message = f"exit code {proc.returncode}"
    if not passed and stderr:
        message += f" | stderr: {stderr[:_STDERR_LIMIT]}"

    return CheckResult(
        name=name,
        passed=passed,
        message=message,
        command=argv,
        exit_code=proc.returncode,
        duration_seconds=duration,
        stderr="" if passed else stderr,
    )
