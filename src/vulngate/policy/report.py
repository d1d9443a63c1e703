"""Human-readable rendering of a policy verdict."""

from rich.console import Console

from .aggregator import SCAN_MODE_BINARY
from .models import EvaluatedFinding, EvaluationResult

INFO_LIMIT = 10


def info_heading(scan_mode: str) -> str:
    if scan_mode == SCAN_MODE_BINARY:
        return "Informational vulnerabilities"
    return "Not reachable vulnerabilities"


def _print_evaluated(console: Console, item: EvaluatedFinding) -> None:
    finding = item.finding
    severity = item.severity
    level = severity.severity if severity else "UNKNOWN"
    console.print(f"  - {finding.id} [{level}] {finding.summary}", markup=False)
    if severity is not None:
        if severity.score > 0:
            console.print(f"    cvss score: {severity.score:.1f}", markup=False)
        if severity.source:
            console.print(f"    severity source: {severity.source}", markup=False)
        if severity.method:
            console.print(f"    severity method: {severity.method}", markup=False)
        if severity.reason:
            console.print(f"    severity reason: {severity.reason}", markup=False)
    if finding.fixed_versions:
        console.print(f"    fixed versions: {', '.join(finding.fixed_versions)}", markup=False)
    if finding.url:
        console.print(f"    more info: {finding.url}", markup=False)
    if item.resolver_error is not None:
        console.print(f"    resolver warning: {item.resolver_error}", markup=False, style="yellow")


def render_result(result: EvaluationResult, scan_mode: str, console: Console | None = None) -> None:
    """Print the verdict summary and one section per non-empty bucket."""
    console = console or Console()

    console.print(f"[bold]vulnerability policy results ({scan_mode})[/bold]")
    console.print(f"  fail: {len(result.fail) + len(result.expired)}")
    console.print(f"  warn: {len(result.warn)}")
    console.print(f"  accepted: {len(result.accepted)}")
    console.print(f"  info: {len(result.info)}")

    if result.expired:
        console.print("\n[red]Expired overrides[/red]")
        for item in result.expired:
            console.print(
                f"  - {item.finding.id} override {item.matched_by_id} expired on "
                f"{item.override.expires_on.isoformat()}",
                markup=False,
            )
            console.print(f"    reason: {item.override.reason}", markup=False)

    if result.fail:
        console.print("\n[red]Failing vulnerabilities[/red]")
        for item in result.fail:
            _print_evaluated(console, item)

    if result.warn:
        console.print("\n[yellow]Warning vulnerabilities[/yellow]")
        for item in result.warn:
            _print_evaluated(console, item)

    if result.accepted:
        console.print("\n[green]Accepted risk overrides[/green]")
        for item in result.accepted:
            console.print(
                f"  - {item.finding.id} accepted by {item.matched_by_id} until "
                f"{item.override.expires_on.isoformat()}",
                markup=False,
            )
            console.print(f"    reason: {item.override.reason}", markup=False)

    if result.info:
        heading = info_heading(scan_mode)
        console.print(f"\n[dim]{heading}[/dim]")
        for item in result.info[:INFO_LIMIT]:
            console.print(f"  - {item.finding.id} {item.finding.summary}", markup=False)
            if item.finding.url:
                console.print(f"    more info: {item.finding.url}", markup=False)
        remaining = len(result.info) - INFO_LIMIT
        if remaining > 0:
            console.print(f"  ... and {remaining} more {heading.lower()}", markup=False)
