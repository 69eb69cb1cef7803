from __future__ import annotations

from pathlib import Path

from junitparser import Failure, JUnitXml, TestCase, TestSuite

from envprobe.checks.base import CheckResult, DependencyUnreachable

SUITE_NAME = "preflight"


def write_junit(run_dir: Path, results: list[CheckResult]) -> Path:
    """Write junit.xml with one test case per dependency, return path."""
    xml = JUnitXml()
    suite = TestSuite(SUITE_NAME)

    for result in results:
        case = TestCase(result.name)
        case.classname = SUITE_NAME
        case.time = result.duration_seconds
        if not result.passed:
            failure = Failure(
                str(DependencyUnreachable(result)), "DependencyUnreachable"
            )
            if result.stderr:
                failure.text = result.stderr
            case.result = failure
        suite.add_testcase(case)

    suite.add_property("dependency_count", str(len(results)))

    # Set time after add_testcase (add_testcase resets it via update_statistics)
    suite.time = sum(r.duration_seconds for r in results)

    # Use append (not +=) to preserve properties and time
    xml.append(suite)

    junit_path = run_dir / "junit.xml"
    xml.write(str(junit_path), pretty=True)
    return junit_path


def generate_report(run_dir: Path) -> Path:
    """Render junit.xml → report.html using Jinja2 template, return path."""
    import yaml
    from jinja2 import Environment, FileSystemLoader

    junit_path = run_dir / "junit.xml"
    report_path = run_dir / "report.html"

    meta: dict = {}
    meta_path = run_dir / "meta.yaml"
    if meta_path.exists():
        try:
            meta = yaml.safe_load(meta_path.read_text()) or {}
        except yaml.YAMLError:
            meta = {}

    xml = JUnitXml.fromfile(str(junit_path))

    cases = []
    for suite in xml:
        for case in suite:
            failure = None
            if case.result:
                failure = {
                    "message": case.result[0].message or "",
                    "detail": case.result[0].text or "",
                }
            cases.append({"name": case.name, "time": case.time, "failure": failure})

    total = len(cases)
    failed = sum(1 for c in cases if c["failure"] is not None)

    tmpl_dir = Path(__file__).parent / "templates"
    env = Environment(loader=FileSystemLoader(str(tmpl_dir)), autoescape=True)
    template = env.get_template("report.html.j2")

    html = template.render(
        cases=cases,
        total=total,
        failed=failed,
        passed=total - failed,
        run_dir=str(run_dir),
        meta=meta,
    )
    report_path.write_text(html, encoding="utf-8")
    return report_path
