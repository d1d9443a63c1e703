"""vulngate CLI - vulnerability policy gate for CI pipelines."""

import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import NoReturn

import typer
from rich.console import Console
from rich.markup import escape

from vulngate.config import (
    get_ghsa_base_url,
    get_nvd_base_url,
    get_request_timeout,
    resolve_ghsa_token,
    resolve_nvd_api_key,
)
from vulngate.policy import (
    SCAN_MODE_SOURCE,
    VulnGateError,
    collect_excluded_ids,
    evaluate_findings,
    filter_excluded,
    load_overrides,
    load_severity_snapshot,
    normalize_scan_mode,
    parse_scan_output,
    render_result,
)
from vulngate.resolver import AdvisoryResolver, ResolverSettings

app = typer.Typer(
    name="vulngate",
    help="Vulnerability policy gate for scanner output",
    no_args_is_help=True,
)
console = Console()


def fail(context: str, exc: BaseException) -> NoReturn:
    """Report a fatal error and exit with status 1."""
    console.print(f"[red]error: {escape(context)}: {escape(str(exc))}[/red]")
    raise typer.Exit(1) from exc


@app.command()
def version() -> None:
    """Show the installed vulngate version."""
    from importlib.metadata import PackageNotFoundError, version as pkg_version

    try:
        current_version = pkg_version("vulngate")
    except PackageNotFoundError:
        current_version = "0.0.0+unknown"

    console.print(f"vulngate {current_version}")


@app.command()
def check(
    input_path: Path = typer.Option(..., "--input", help="Path to scanner JSON output"),
    overrides_path: Path = typer.Option(..., "--overrides", help="Path to the override registry"),
    scan_mode: str = typer.Option(
        SCAN_MODE_SOURCE, "--scan-mode", help="Scan mode used by the input: source or binary"
    ),
    exclude_input: Path | None = typer.Option(
        None, "--exclude-input", help="Baseline scanner output whose findings are excluded"
    ),
    nvd_api_base_url: str | None = typer.Option(
        None, "--nvd-api-base-url", help="NVD CVE API base URL"
    ),
    nvd_api_key_file: str | None = typer.Option(
        None, "--nvd-api-key-file", help="File containing the NVD API key"
    ),
    ghsa_api_base_url: str | None = typer.Option(
        None, "--ghsa-api-base-url", help="GitHub advisory API base URL"
    ),
    ghsa_token_file: str | None = typer.Option(
        None, "--ghsa-token-file", help="File containing an optional GHSA token"
    ),
    severity_snapshot: str | None = typer.Option(
        None, "--severity-snapshot", help="Pinned NVD severity snapshot JSON"
    ),
    offline: bool = typer.Option(
        False, "--offline", help="Disable live lookups and use the snapshot only"
    ),
    timeout: float | None = typer.Option(
        None, "--timeout", help="Seconds per severity API request"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Evaluate scanner output against the vulnerability policy."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        mode = normalize_scan_mode(scan_mode)
    except VulnGateError as exc:
        fail("scan mode", exc)

    try:
        with open(input_path, encoding="utf-8") as handle:
            findings = parse_scan_output(handle, mode)
    except (VulnGateError, OSError) as exc:
        fail("parse scanner output", exc)

    if exclude_input is not None:
        try:
            excluded = collect_excluded_ids(exclude_input)
        except (VulnGateError, OSError) as exc:
            fail("load exclude-input", exc)
        findings = filter_excluded(findings, excluded)

    try:
        overrides = load_overrides(overrides_path)
    except (VulnGateError, OSError) as exc:
        fail("load overrides", exc)

    try:
        api_key = resolve_nvd_api_key(nvd_api_key_file)
    except (ValueError, OSError) as exc:
        fail("resolve NVD API key", exc)

    try:
        ghsa_token = resolve_ghsa_token(ghsa_token_file)
    except (ValueError, OSError) as exc:
        fail("resolve GHSA token", exc)

    try:
        snapshot = load_severity_snapshot(severity_snapshot)
    except (VulnGateError, OSError) as exc:
        fail("load severity snapshot", exc)

    if offline and not snapshot:
        fail("offline mode", ValueError("--offline requires --severity-snapshot"))

    try:
        request_timeout = timeout if timeout is not None else get_request_timeout()
    except (ValueError, OSError) as exc:
        fail("request timeout", exc)

    try:
        nvd_base_url = nvd_api_base_url or get_nvd_base_url()
        ghsa_base_url = ghsa_api_base_url or get_ghsa_base_url()
    except (ValueError, OSError) as exc:
        fail("load configuration", exc)

    settings = ResolverSettings(
        nvd_base_url=nvd_base_url,
        nvd_api_key=api_key,
        ghsa_base_url=ghsa_base_url,
        ghsa_token=ghsa_token,
        timeout=request_timeout,
        offline=offline,
        snapshot=snapshot,
    )
    with AdvisoryResolver(settings) as resolver:
        result = evaluate_findings(findings, overrides, resolver, datetime.now(UTC))

    render_result(result, mode, console)
    if result.failed:
        raise typer.Exit(1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
