from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import yaml

from envprobe.checks import run_dependency
from envprobe.checks.base import CheckResult
from envprobe.config import DependencyConfig, PreflightConfig
from envprobe.verbose import setup_logger


class Runner:
    """Runs every configured dependency check, one after another."""

    def __init__(
        self,
        config: PreflightConfig,
        output_dir: Path,
        only: str | None = None,
        verbose: bool = False,
    ):
        self.config = config
        self.output_dir = output_dir
        self.only = only
        self.verbose = verbose
        self.results: list[CheckResult] = []

    @property
    def passed(self) -> bool:
        return all(r.passed for r in self.results)

    def selected(self) -> list[DependencyConfig]:
        """Dependencies to check, in config order."""
        if self.only:
            return [self.config.get(self.only)]
        return list(self.config.dependencies)

    def execute(self) -> Path:
        """Run all selected checks. Returns the run directory."""
        dependencies = self.selected()

        run_dir = self._new_run_dir()

        logger = setup_logger(
            run_dir / "debug.log", verbose=self.verbose, logger_name="envprobe_main"
        )
        logger.debug("Starting preflight run")

        print(f"Checking {len(dependencies)} dependency(ies)...")

        self.results = []
        # A failing check never stops the ones after it
        for index, dependency in enumerate(dependencies, start=1):
            result = run_dependency(dependency, logger=logger)
            self.results.append(result)
            status = "PASS" if result.passed else "FAIL"
            print(
                f"  [{index}/{len(dependencies)}] {status}  {result.name} "
                f"({result.message}, {result.duration_seconds:.1f}s)"
            )

        n_passed = sum(1 for r in self.results if r.passed)
        logger.debug(
            f"Preflight run finished: {n_passed}/{len(self.results)} checks passed"
        )

        self._write_results(run_dir, dependencies)
        return run_dir

    def _new_run_dir(self) -> Path:
        """Create a fresh run directory; runs within the same second get a suffix."""
        run_id = datetime.now(timezone.utc).strftime("%Y-%m-%d_%H%M%S")
        self.output_dir.mkdir(parents=True, exist_ok=True)

        run_dir = self.output_dir / run_id
        attempt = 1
        while True:
            try:
                run_dir.mkdir()
                return run_dir
            except FileExistsError:
                run_dir = self.output_dir / f"{run_id}-{attempt}"
                attempt += 1

    def _write_results(
        self, run_dir: Path, dependencies: list[DependencyConfig]
    ) -> None:
        """Write junit.xml and meta.yaml to the run directory."""
        from envprobe.reporting.junit import write_junit

        write_junit(run_dir, self.results)

        try:
            import importlib.metadata

            envprobe_version = importlib.metadata.version("envprobe")
        except Exception:
            envprobe_version = "unknown"

        meta: dict[str, Any] = {
            "run_id": run_dir.name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "dependencies": [d.name for d in dependencies],
            "envprobe_version": envprobe_version,
            "passed": sum(1 for r in self.results if r.passed),
            "failed": sum(1 for r in self.results if not r.passed),
        }

        (run_dir / "meta.yaml").write_text(yaml.dump(meta, default_flow_style=False))
