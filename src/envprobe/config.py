from __future__ import annotations

import shlex
from pathlib import Path
from typing import Any

import yaml
from expandvars import expandvars
from pydantic import BaseModel, ConfigDict, field_validator, model_validator


class DependencyConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    name: str
    description: str = ""
    command: list[str]
    env: dict[str, str] = {}
    timeout: float | None = None
    capture_stderr: bool = True

    @field_validator("command", mode="before")
    @classmethod
    def split_command(cls, v: Any) -> Any:
        if isinstance(v, str):
            return shlex.split(v)
        return v

    @field_validator("command")
    @classmethod
    def command_must_not_be_empty(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("command must not be empty")
        return v

    @model_validator(mode="after")
    def validate_env_variables(self) -> "DependencyConfig":
        """Validate that all ${VAR} references without defaults are set.

        Raises ValueError listing every missing variable so the user can fix them
        all at once rather than hitting them one-by-one mid-run.
        """
        missing: list[str] = []
        for key, value in self.env.items():
            try:
                expandvars(value, nounset=True)
            except Exception:
                # Variable is missing and has no default
                missing.append(f"  {key}={value}")

        if missing:
            details = "\n".join(missing)
            raise ValueError(
                f"Dependency '{self.name}' has missing environment variables:\n{details}"
            )

        return self

    def resolved_env(self) -> dict[str, str]:
        """Environment overrides with ${VAR} references expanded."""
        return {key: expandvars(value) for key, value in self.env.items()}


class PreflightConfig(BaseModel):
    dependencies: list[DependencyConfig]

    @field_validator("dependencies")
    @classmethod
    def names_must_be_unique(cls, v: list[DependencyConfig]) -> list[DependencyConfig]:
        if not v:
            raise ValueError("dependencies must not be empty")
        seen: set[str] = set()
        for dep in v:
            if dep.name in seen:
                raise ValueError(f"Duplicate dependency name '{dep.name}'")
            seen.add(dep.name)
        return v

    def get(self, name: str) -> DependencyConfig:
        for dep in self.dependencies:
            if dep.name == name:
                return dep
        raise ValueError(
            f"Unknown dependency: {name!r}. "
            f"Available: {', '.join(d.name for d in self.dependencies)}"
        )


DOCUMENT_STORE = DependencyConfig(
    name="document-store",
    description="MongoDB server status via the mongo shell",
    command=["mongo", "--eval", "db.stats()", "--quiet"],
)

RELATIONAL_DATABASE = DependencyConfig(
    name="relational-database",
    description="PostgreSQL database listing via psql",
    command=["psql", "-U", "vibely", "-d", "vibely", "-c", "\\l"],
    env={"PGPASSWORD": "${PGPASSWORD:-vibelypass}"},
)

CACHE = DependencyConfig(
    name="cache",
    description="Redis liveness ping via redis-cli",
    command=["redis-cli", "ping"],
)


def default_config() -> PreflightConfig:
    """The built-in checks, in run order."""
    return PreflightConfig(
        dependencies=[
            DOCUMENT_STORE.model_copy(deep=True),
            RELATIONAL_DATABASE.model_copy(deep=True),
            CACHE.model_copy(deep=True),
        ]
    )


def load_config(path: Path) -> PreflightConfig:
    """Load and validate a preflight config from a YAML file."""
    with open(path) as f:
        raw = yaml.safe_load(f)

    if not isinstance(raw, dict):
        raise ValueError(f"{path}: expected a mapping with a 'dependencies' key")

    return PreflightConfig(**raw)
