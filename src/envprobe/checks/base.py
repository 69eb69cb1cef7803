"""Base data structures for dependency checks."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class CheckResult:
    """Outcome of probing a single dependency.

    Attributes:
        name: Dependency identifier (e.g. "document-store").
        passed: Whether the client exited with status zero.
        message: Human-readable detail about the result.
        command: The argv that was launched.
        exit_code: Process exit status, or None if the process never started
            or was killed on timeout.
        duration_seconds: Wall-clock time spent waiting on the client.
        stderr: Client stderr, kept only for failed checks that capture it.
    """

    name: str
    passed: bool
    message: str
    command: list[str] = field(default_factory=list)
    exit_code: int | None = None
    duration_seconds: float = 0.0
    stderr: str = ""

    def __str__(self) -> str:
        status = "PASS" if self.passed else "FAIL"
        return f"[{status}] {self.name}: {self.message}"


class DependencyUnreachable(Exception):
    """A dependency's client could not reach it, or could not be launched."""

    def __init__(self, result: CheckResult):
        self.result = result
        self.dependency = result.name
        super().__init__(f"dependency unreachable: {result.name} ({result.message})")


def ensure_reachable(result: CheckResult) -> CheckResult:
    """Raise DependencyUnreachable if the check failed, else return it unchanged."""
    if not result.passed:
        raise DependencyUnreachable(result)
    return result
