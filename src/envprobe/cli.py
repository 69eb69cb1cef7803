from __future__ import annotations

from pathlib import Path

import typer

app = typer.Typer(
    name="envprobe", help="Check that database dependencies are reachable"
)


def _load(config: str | None):
    from pydantic import ValidationError

    from envprobe.config import default_config, load_config

    if config is None:
        return default_config()

    config_path = Path(config)
    if not config_path.exists():
        typer.echo(f"Error: config file not found: {config}", err=True)
        raise typer.Exit(1)

    try:
        return load_config(config_path)
    except (ValidationError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def run(
    config: str | None = typer.Argument(
        None, help="Path to preflight YAML config (built-in checks if omitted)"
    ),
    only: str | None = typer.Option(None, help="Run only this dependency check"),
    output_dir: str = typer.Option(
        "preflight-runs", help="Output directory for run results"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output to terminal"
    ),
):
    """Run every dependency check and fail if any dependency is unreachable."""
    from envprobe.runner import Runner

    preflight_config = _load(config)

    runner = Runner(
        config=preflight_config,
        output_dir=Path(output_dir),
        only=only,
        verbose=verbose,
    )

    try:
        run_dir = runner.execute()
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    failed = [r for r in runner.results if not r.passed]
    typer.echo(f"Run complete: {run_dir}")
    if not verbose:
        typer.echo(f"Debug log: {run_dir / 'debug.log'}")

    if failed:
        typer.echo(
            f"Unreachable: {', '.join(r.name for r in failed)}",
            err=True,
        )
        raise typer.Exit(1)


@app.command("list")
def list_checks(
    config: str | None = typer.Argument(
        None, help="Path to preflight YAML config (built-in checks if omitted)"
    ),
):
    """List configured dependency checks in run order."""
    import shlex

    preflight_config = _load(config)
    for dep in preflight_config.dependencies:
        line = f"{dep.name}: {shlex.join(dep.command)}"
        if dep.env:
            line += f"  (env: {', '.join(sorted(dep.env))})"
        typer.echo(line)


@app.command()
def report(
    run_dir: str = typer.Argument(help="Path to run output directory"),
    open_report: bool = typer.Option(
        False, "--open", help="Open report.html in browser after generating"
    ),
):
    """Regenerate HTML report from a previous run."""
    from envprobe.reporting.junit import generate_report

    run_path = Path(run_dir)
    if not run_path.exists() or not (run_path / "junit.xml").exists():
        typer.echo(f"Error: not a valid run directory: {run_dir}", err=True)
        raise typer.Exit(1)

    report_path = generate_report(run_path)
    typer.echo(f"Report generated: {report_path}")

    if open_report:
        import webbrowser

        webbrowser.open(report_path.resolve().as_uri())


@app.command()
def init(
    dir: str = typer.Option(".", "--dir", help="Directory to write preflight.yaml in"),
):
    """Write an example preflight.yaml reproducing the built-in checks."""
    project_dir = Path(dir)
    project_dir.mkdir(parents=True, exist_ok=True)

    example = project_dir / "preflight.yaml"
    if example.exists():
        typer.echo(f"preflight.yaml already exists in {dir}, skipping.")
        return

    example.write_text("""\
dependencies:
  - name: document-store
    description: MongoDB server status via the mongo shell
    command: mongo --eval "db.stats()" --quiet

  - name: relational-database
    description: PostgreSQL database listing via psql
    command: psql -U vibely -d vibely -c "\\l"
    env:
      PGPASSWORD: "${PGPASSWORD:-vibelypass}"

  - name: cache
    description: Redis liveness ping via redis-cli
    command: redis-cli ping
""")

    typer.echo(f"Wrote {example}")


@app.command()
def schema(
    out: str = typer.Option(
        "schemas/envprobe.schema.json", help="Output path for JSON Schema"
    ),
):
    """Generate JSON Schema for the preflight YAML format."""
    from envprobe.schema import write_json_schema

    out_path = Path(out)
    write_json_schema(out_path)
    typer.echo(f"Wrote schema: {out_path}")
