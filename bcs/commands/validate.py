"""Validate command implementation."""

import json
from collections import defaultdict
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..config import BcsConfig
from ..corpus.loader import CorpusIndex, build_index
from ..corpus.rules import VIOLATION_EXPLANATIONS, ValidationReport, get_kind_ids, validate
from ..models import ValidationViolation, ViolationKind


def run_validate(
    data_dir: Path,
    config: BcsConfig,
    output_json: bool = False,
    quiet: bool = False,
) -> int:
    """Run structural validation on the corpus.

    Args:
        data_dir: Corpus root
        config: Effective configuration
        output_json: Output results as JSON instead of human-readable
        quiet: Print nothing; report only through the exit code

    Returns:
        Exit code (0 = passed, 1 = violations found)
    """
    console = Console(stderr=True)

    if not quiet and not output_json:
        console.print(f"Loading corpus from {data_dir}...", style="dim")
    index = build_index(data_dir, config)
    report = validate(index, config)

    if output_json:
        _output_json(report, index)
    elif not quiet:
        _print_grouped_output(console, report, index)

    return 0 if report.passed else 1


def _violation_to_dict(v: ValidationViolation, index: CorpusIndex) -> dict:
    return {
        "kind": v.kind.value,
        "detail": v.detail,
        "file": str(index.relative(v.path)) if v.path else None,
        "line": v.line,
        "related": [str(index.relative(p)) for p in v.related],
    }


def _summary_counts(index: CorpusIndex) -> dict[str, int]:
    return {
        "codes": len(index.all_addresses),
        "files": len(index.files),
        "section_dirs": len(index.section_dirs),
    }


def _output_json(report: ValidationReport, index: CorpusIndex) -> None:
    output = {
        "passed": report.passed,
        "errors": [_violation_to_dict(v, index) for v in report.violations],
        "warnings": [_violation_to_dict(v, index) for v in report.warnings],
        "summary": {
            **_summary_counts(index),
            "errors": len(report.violations),
            "warnings": len(report.warnings),
        },
    }
    print(json.dumps(output, indent=2))


def _print_grouped_output(console: Console, report: ValidationReport, index: CorpusIndex) -> None:
    """Print findings grouped by violation kind, then a corpus summary."""
    grouped: dict[ViolationKind, list[ValidationViolation]] = defaultdict(list)
    for v in report.violations + report.warnings:
        grouped[v.kind].append(v)

    for kind in ViolationKind:
        findings = grouped.get(kind, [])
        is_warning = bool(findings) and all(f in report.warnings for f in findings)

        if not findings:
            status, status_style = "✓", "bold green"
        elif is_warning:
            status, status_style = "⚠", "yellow"
        else:
            status, status_style = "✗", "bold red"

        console.print()
        console.print(f"{status} {kind.value}", style=status_style)

        if not findings:
            console.print("  ✓ passing", style="dim green")
            continue

        prefix, prefix_style = ("WARN", "yellow") if is_warning else ("ERROR", "bold red")
        for v in sorted(findings, key=lambda f: (str(f.path or ""), f.line or 0)):
            ref = str(index.relative(v.path)) if v.path else ""
            if v.line:
                ref += f":{v.line}"
            console.print(f"  {prefix}: {escape(ref)} - {escape(v.detail)}", style=prefix_style)

    console.print()

    table = Table(title="Corpus Summary", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Count", justify="right")

    counts = _summary_counts(index)
    table.add_row("Codes", str(counts["codes"]))
    table.add_row("Tier files", str(counts["files"]))
    table.add_row("Section directories", str(counts["section_dirs"]))

    console.print(table)

    console.print()
    if report.violations:
        console.print(f"❌ {len(report.violations)} error(s)", style="bold red")
    if report.warnings:
        console.print(f"⚠️  {len(report.warnings)} warning(s)", style="yellow")
    if report.passed and not report.warnings:
        console.print("✅ No errors or warnings", style="bold green")


def run_explain_kind(kind_id: str) -> int:
    """Explain a violation kind.

    Returns:
        Exit code (0 = success, 1 = kind not found)
    """
    console = Console()

    kind_id = kind_id.lower().strip()

    if kind_id not in VIOLATION_EXPLANATIONS:
        console.print(f"Unknown violation kind: {escape(kind_id)}", style="bold red")
        console.print()
        console.print("Known kinds:", style="bold")
        for kid in sorted(get_kind_ids()):
            console.print(f"  - {kid}")
        return 1

    from rich.markdown import Markdown

    console.print(Markdown(VIOLATION_EXPLANATIONS[kind_id]))
    return 0
