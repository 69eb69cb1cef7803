"""Pytest configuration and fixtures."""

import logging
from pathlib import Path

import pytest

PSQL_CHECKS_PASSWORD = """\
if [ "$PGPASSWORD" != "vibelypass" ]; then
  echo 'psql: error: password authentication failed for user "vibely"' >&2
  exit 2
fi
echo " vibely | vibely | UTF8"
exit 0"""


@pytest.fixture(autouse=True)
def cleanup_loggers():
    """Clean up envprobe loggers after each test so debug.log handles are released."""
    yield

    loggers_to_remove = [
        name
        for name in logging.Logger.manager.loggerDict.keys()
        if name.startswith("envprobe")
    ]

    for name in loggers_to_remove:
        logger = logging.getLogger(name)
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()
        del logging.Logger.manager.loggerDict[name]


@pytest.fixture
def fake_bin(tmp_path, monkeypatch):
    """Replace PATH with an empty directory and return a factory for fake clients.

    ``fake_bin("redis-cli", "exit 1")`` writes an executable shell script whose
    body is the given text. Only shell builtins are usable inside the body.
    """
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    monkeypatch.setenv("PATH", str(bin_dir))
    monkeypatch.delenv("PGPASSWORD", raising=False)

    def _make(name: str, body: str = "exit 0", executable: bool = True) -> Path:
        script = bin_dir / name
        script.write_text(f"#!/bin/sh\n{body}\n")
        script.chmod(0o755 if executable else 0o644)
        return script

    return _make


@pytest.fixture
def healthy_clients(fake_bin):
    """Fake mongo, psql and redis-cli that all report a reachable service."""
    fake_bin("mongo", 'echo \'{ "db" : "test", "ok" : 1 }\'\nexit 0')
    fake_bin("psql", PSQL_CHECKS_PASSWORD)
    fake_bin("redis-cli", "echo PONG\nexit 0")
    return fake_bin
