#!/usr/bin/env python3
"""
BeautySlot admin backend: entry script.

Usage:
    python run.py --help
    python run.py --action server --reload --verbose
    python run.py --action health
    python run.py --action config
    python run.py --action sync --verbose
    python run.py --action test --test-type unit --coverage
"""

import asyncio
import subprocess
import sys
from pathlib import Path
from typing import Callable

import click

PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from beautyslot.backend.core.logging import get_logger, setup_logging

Check = tuple[str, bool, str | None]


def validate_project_root() -> Path:
    """Exit with status 1 unless run.py sits next to the .project_root marker."""
    if not (PROJECT_ROOT / ".project_root").exists():
        click.secho("Error: .project_root not found. Run from project root.", fg="red", err=True)
        sys.exit(1)
    return PROJECT_ROOT


@click.command()
@click.option(
    "--action",
    type=click.Choice(["server", "health", "config", "sync", "test", "info"]),
    default="info",
    help="Action to perform.",
)
@click.option("--verbose", "-v", is_flag=True, help="INFO level logging.")
@click.option("--debug", "-d", is_flag=True, help="DEBUG level logging.")
@click.option("--host", default=None, help="Bind host (server action).")
@click.option("--port", default=None, type=int, help="Bind port (server action).")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes (server action).")
@click.option(
    "--test-type",
    type=click.Choice(["all", "unit", "integration"]),
    default="all",
    help="Test suite to run (test action).",
)
@click.option("--coverage", is_flag=True, help="Collect coverage (test action).")
def main(
    action: str,
    verbose: bool,
    debug: bool,
    host: str | None,
    port: int | None,
    reload: bool,
    test_type: str,
    coverage: bool,
) -> None:
    """
    BeautySlot Admin Entry Point.

    Start the API server, check configuration and credentials, print the
    YAML settings, pull YClients data once, or run the test suite.
    """
    validate_project_root()

    log_level = "DEBUG" if debug else "INFO" if verbose else "WARNING"
    setup_logging(level=log_level, format_type="console")
    logger = get_logger(__name__)
    logger.debug("Running action", extra={"action": action, "log_level": log_level})

    actions: dict[str, Callable[[], None]] = {
        "server": lambda: run_server(logger, host, port, reload),
        "health": lambda: check_health(logger),
        "config": lambda: show_config(logger),
        "sync": lambda: run_sync(logger),
        "test": lambda: run_tests(logger, test_type, coverage),
        "info": show_info,
    }
    actions[action]()


def run_server(logger, host: str | None, port: int | None, reload: bool) -> None:
    """Run uvicorn in a subprocess; CLI host/port override application.yaml."""
    from beautyslot.backend.core.config import get_app_config

    server = get_app_config().application.server
    bind_host = host or server.host
    bind_port = port or server.port

    cmd = [
        sys.executable, "-m", "uvicorn", "beautyslot.backend.main:app",
        "--host", bind_host,
        "--port", str(bind_port),
    ]
    if reload:
        cmd.append("--reload")

    logger.info("Starting server", extra={"host": bind_host, "port": bind_port, "reload": reload})
    click.echo(f"Admin API at http://{bind_host}:{bind_port} (Ctrl+C to stop)\n")

    try:
        subprocess.run(cmd, check=True)
    except KeyboardInterrupt:
        logger.info("Server stopped")
    except subprocess.CalledProcessError as e:
        logger.error("Server exited with error", extra={"exit_code": e.returncode})
        sys.exit(e.returncode)


def _integration_checks() -> list[Check]:
    from beautyslot.backend.core.config import get_settings

    settings = get_settings()
    return [
        (
            "YClients credentials",
            settings.yclients_configured,
            None if settings.yclients_configured else "YCLIENTS_PARTNER_TOKEN / YCLIENTS_COMPANY_ID not set",
        ),
        (
            "Telegram bot token",
            settings.telegram_configured,
            None if settings.telegram_configured else "TELEGRAM_BOT_TOKEN not set",
        ),
    ]


def _running_server_check() -> Check:
    import httpx

    from beautyslot.backend.core.config import get_server_base_url

    base_url, timeout = get_server_base_url()
    try:
        response = httpx.get(f"{base_url}/health/ready", timeout=timeout)
    except httpx.HTTPError as e:
        return ("Running server", False, f"{base_url} not reachable: {e}")
    return ("Running server", response.status_code == 200, f"{base_url} → {response.status_code}")


def check_health(logger) -> None:
    """Report imports, YAML, credentials, app construction and a live /health/ready."""
    click.echo("Checking application health...\n")
    checks: list[Check] = []

    try:
        from beautyslot.backend.core.config import get_app_config
    except ImportError as e:
        logger.error("Core imports failed", extra={"error": str(e)})
        _print_checks([("Core imports", False, str(e))])
        return
    checks.append(("Core imports", True, None))

    try:
        checks.append(("YAML configuration", True, get_app_config().application.name))
    except (ValueError, FileNotFoundError) as e:
        logger.error("Configuration failed", extra={"error": str(e)})
        checks.append(("YAML configuration", False, str(e)))

    checks.extend(_integration_checks())

    try:
        from beautyslot.backend.main import app
        checks.append(("FastAPI application", True, app.title))
    except Exception as e:
        logger.error("FastAPI app failed", extra={"error": str(e)})
        checks.append(("FastAPI application", False, str(e)))

    checks.append(_running_server_check())
    _print_checks(checks)


def _print_checks(checks: list[Check]) -> None:
    click.echo("Health Check Results:")
    click.echo("-" * 50)
    for name, passed, detail in checks:
        mark = click.style("✓ PASS", fg="green") if passed else click.style("✗ FAIL", fg="red")
        click.echo(f"  {mark}  {name}" + (f" ({detail})" if detail else ""))
    click.echo("-" * 50)

    if all(passed for _, passed, _ in checks):
        click.secho("\nAll checks passed!", fg="green")
    else:
        click.secho("\nSome checks failed. See details above.", fg="yellow")
        click.echo("Credentials are read from config/.env.")


def show_config(logger) -> None:
    """Print every YAML section as loaded and validated."""
    from beautyslot.backend.core.config import get_app_config

    try:
        config = get_app_config()
    except (ValueError, FileNotFoundError) as e:
        logger.error("Failed to load configuration", extra={"error": str(e)})
        click.secho(f"Error loading configuration: {e}", fg="red")
        sys.exit(1)

    sections = {
        "Application Settings": config.application,
        "Logging Settings": config.logging,
        "Feature Flags": config.features,
        "YClients Settings": config.yclients,
        "Telegram Settings": config.telegram,
    }
    click.echo("Application Configuration:\n")
    for title, section in sections.items():
        click.echo(f"{title} (from YAML):")
        click.echo("-" * 40)
        for key, value in section.model_dump().items():
            if isinstance(value, dict):
                click.echo(f"  {key}:")
                for sub_key, sub_value in value.items():
                    click.echo(f"    {sub_key}: {sub_value}")
            else:
                click.echo(f"  {key}: {value}")
        click.echo()


def run_sync(logger) -> None:
    """One full YClients sync in this process, then a summary."""
    from beautyslot.backend.core.config import get_settings
    from beautyslot.backend.integrations.yclients import close_yclients_client
    from beautyslot.backend.services.sync import SyncService

    if not get_settings().yclients_configured:
        click.secho("YClients is not configured. Set credentials in config/.env", fg="red")
        sys.exit(1)

    async def _sync():
        try:
            return await SyncService().run_once()
        finally:
            await close_yclients_client()

    click.echo("Syncing data from YClients...\n")
    summary = asyncio.run(_sync())
    logger.info("Sync finished", extra={"sync_id": summary.sync_id, "status": summary.status})

    color = {"success": "green", "partial": "yellow"}.get(summary.status, "red")
    click.echo(f"Status:   {click.style(summary.status, fg=color)}")
    click.echo(f"Staff:    {summary.staff}")
    click.echo(f"Services: {summary.services}")
    click.echo(f"Clients:  {summary.clients} ({summary.clients_updated} updated, {summary.clients_skipped} skipped)")
    click.echo(f"Records:  {summary.records}")
    for error in summary.errors:
        click.secho(f"  ! {error}", fg="yellow")

    if summary.status == "error":
        sys.exit(1)


def run_tests(logger, test_type: str, coverage: bool) -> None:
    target = {"unit": "tests/unit", "integration": "tests/integration"}.get(test_type, "tests/")
    cmd = [sys.executable, "-m", "pytest", target, "-v"]
    if coverage:
        cmd += ["--cov=beautyslot", "--cov-report=term-missing"]

    logger.info("Running tests", extra={"type": test_type, "coverage": coverage})
    click.echo(f"Running: {' '.join(cmd)}\n")
    sys.exit(subprocess.run(cmd).returncode)


def show_info() -> None:
    from beautyslot.backend.core.config import get_app_config

    application = get_app_config().application
    click.echo("BeautySlot Admin Backend")
    click.echo("=" * 40)
    click.echo(f"Name: {application.name}")
    click.echo(f"Version: {application.version}")
    click.echo(f"Description: {application.description}")
    click.echo(
        """
Available Actions:
  --action server   Start the API server (--host, --port, --reload)
  --action health   Check configuration, credentials and a running server
  --action config   Print the YAML configuration
  --action sync     Pull staff, services, clients and records from YClients once
  --action test     Run the test suite (--test-type, --coverage)
  --action info     Show this information

Logging Options:
  --verbose, -v     INFO level logging
  --debug, -d       DEBUG level logging

Examples:
  python run.py --action server --reload --verbose
  python run.py --action sync --verbose
  python run.py --action test --test-type unit --coverage"""
    )


if __name__ == "__main__":
    main()
