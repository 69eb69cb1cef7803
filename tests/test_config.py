"""Tests for config loading and validation."""

import textwrap
from pathlib import Path

import pytest
from pydantic import ValidationError

from envprobe.config import DependencyConfig, default_config, load_config


@pytest.fixture()
def tmp_yaml(tmp_path):
    """Helper that writes YAML content to a temp file and returns its path."""

    def _write(content: str) -> Path:
        p = tmp_path / "preflight.yaml"
        p.write_text(textwrap.dedent(content))
        return p

    return _write


def test_default_config_order():
    cfg = default_config()
    assert [d.name for d in cfg.dependencies] == [
        "document-store",
        "relational-database",
        "cache",
    ]


def test_default_commands():
    cfg = default_config()
    assert cfg.get("document-store").command == [
        "mongo",
        "--eval",
        "db.stats()",
        "--quiet",
    ]
    assert cfg.get("relational-database").command == [
        "psql",
        "-U",
        "vibely",
        "-d",
        "vibely",
        "-c",
        "\\l",
    ]
    assert cfg.get("cache").command == ["redis-cli", "ping"]


def test_default_password_fallback(monkeypatch):
    monkeypatch.delenv("PGPASSWORD", raising=False)
    dep = default_config().get("relational-database")
    assert dep.resolved_env() == {"PGPASSWORD": "vibelypass"}


def test_default_password_overridden_by_environment(monkeypatch):
    monkeypatch.setenv("PGPASSWORD", "from-env")
    dep = default_config().get("relational-database")
    assert dep.resolved_env() == {"PGPASSWORD": "from-env"}


def test_default_config_returns_independent_copies():
    first = default_config()
    first.dependencies[0].command.append("--extra")
    assert "--extra" not in default_config().dependencies[0].command


def test_load_minimal_config(tmp_yaml):
    path = tmp_yaml("""\
        dependencies:
          - name: cache
            command: redis-cli ping
    """)
    cfg = load_config(path)
    assert len(cfg.dependencies) == 1
    dep = cfg.dependencies[0]
    assert dep.name == "cache"
    assert dep.command == ["redis-cli", "ping"]
    assert dep.env == {}
    assert dep.timeout is None
    assert dep.capture_stderr is True


def test_string_command_is_split_like_a_shell(tmp_yaml):
    path = tmp_yaml("""\
        dependencies:
          - name: document-store
            command: mongo --eval "db.stats()" --quiet
          - name: relational-database
            command: psql -U vibely -d vibely -c "\\l"
    """)
    cfg = load_config(path)
    assert cfg.get("document-store").command == [
        "mongo",
        "--eval",
        "db.stats()",
        "--quiet",
    ]
    assert cfg.get("relational-database").command[-1] == "\\l"


def test_list_command_kept_verbatim(tmp_yaml):
    path = tmp_yaml("""\
        dependencies:
          - name: cache
            command: ["redis-cli", "-h", "cache.local", "ping"]
            timeout: 5
            capture_stderr: false
    """)
    dep = load_config(path).get("cache")
    assert dep.command == ["redis-cli", "-h", "cache.local", "ping"]
    assert dep.timeout == 5
    assert dep.capture_stderr is False


def test_env_expansion(tmp_yaml, monkeypatch):
    monkeypatch.setenv("DB_PASSWORD", "s3cret")
    path = tmp_yaml("""\
        dependencies:
          - name: relational-database
            command: psql -c "\\l"
            env:
              PGPASSWORD: "${DB_PASSWORD}"
              PGHOST: "${DB_HOST:-localhost}"
    """)
    dep = load_config(path).get("relational-database")
    assert dep.env == {"PGPASSWORD": "${DB_PASSWORD}", "PGHOST": "${DB_HOST:-localhost}"}
    assert dep.resolved_env() == {"PGPASSWORD": "s3cret", "PGHOST": "localhost"}


def test_missing_env_variable_rejected(monkeypatch):
    monkeypatch.delenv("ENVPROBE_MISSING_A", raising=False)
    monkeypatch.delenv("ENVPROBE_MISSING_B", raising=False)
    with pytest.raises(ValidationError) as exc_info:
        DependencyConfig(
            name="db",
            command="psql",
            env={"A": "${ENVPROBE_MISSING_A}", "B": "${ENVPROBE_MISSING_B}"},
        )
    message = str(exc_info.value)
    assert "missing environment variables" in message
    assert "ENVPROBE_MISSING_A" in message
    assert "ENVPROBE_MISSING_B" in message


def test_empty_command_rejected():
    with pytest.raises(ValidationError, match="command must not be empty"):
        DependencyConfig(name="db", command="")


def test_unknown_field_rejected():
    with pytest.raises(ValidationError):
        DependencyConfig(name="db", command="psql", retries=3)


def test_empty_dependencies_rejected(tmp_yaml):
    path = tmp_yaml("""\
        dependencies: []
    """)
    with pytest.raises(ValidationError, match="must not be empty"):
        load_config(path)


def test_duplicate_names_rejected(tmp_yaml):
    path = tmp_yaml("""\
        dependencies:
          - name: cache
            command: redis-cli ping
          - name: cache
            command: redis-cli -p 6380 ping
    """)
    with pytest.raises(ValidationError, match="Duplicate dependency name 'cache'"):
        load_config(path)


def test_non_mapping_yaml_rejected(tmp_yaml):
    path = tmp_yaml("""\
        - just
        - a list
    """)
    with pytest.raises(ValueError, match="expected a mapping"):
        load_config(path)


def test_get_unknown_dependency():
    with pytest.raises(ValueError, match="Unknown dependency: 'queue'"):
        default_config().get("queue")


def test_bundled_example_config_loads():
    example = Path(__file__).resolve().parents[1] / "examples" / "preflight.yaml"
    cfg = load_config(example)
    assert [d.name for d in cfg.dependencies] == [
        "document-store",
        "relational-database",
        "cache",
    ]
    assert cfg.get("relational-database").command[-1] == "\\l"
    assert cfg.get("cache").capture_stderr is False
