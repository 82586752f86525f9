"""
Proxy Balancer Provisioner — CLI entrypoint.

Usage:
    sudo proxy-balancer-install              # install
    sudo proxy-balancer-install --uninstall  # remove everything
    sudo proxy-balancer-install --json       # machine-readable result
    proxy-balancer-install --help
    python -m provisioner --help
"""

from __future__ import annotations

import json
import logging
import os
import sys

import click

from provisioner import __version__
from provisioner.core.config.settings import ENV_OVERRIDES
from provisioner.core.errors import ProvisionError
from provisioner.core.observability.logging_config import (
    attach_log_file,
    log_success,
    setup_logging,
)

logger = logging.getLogger(__name__)

PROG_NAME = "proxy-balancer-install"

_EPILOG = "\b\nEnvironment variables:\n" + "\n".join(
    f"  {name:<20} {text}" for name, text in ENV_OVERRIDES
) + (
    "\n\n\b\nExamples:\n"
    "  curl -fsSL <url>/install.sh | sudo bash\n"
    f"  LISTEN_PORT=8080 UPSTREAM_PORT=1080 sudo {PROG_NAME}"
)


@click.command(
    context_settings={"help_option_names": ["-h", "--help"]},
    epilog=_EPILOG,
)
@click.version_option(version=__version__, prog_name=PROG_NAME)
@click.option("--uninstall", "-u", is_flag=True, help="Uninstall proxy-balancer.")
@click.option("--verbose", "-v", is_flag=True, help="Show every external command.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output the result as JSON.")
def cli(uninstall: bool, verbose: bool, debug: bool, as_json: bool) -> None:
    """Install the SOCKS Proxy Load Balancer as a systemd service.

    Detects the distribution, installs Java 21 and the build tools,
    builds the balancer from source, creates the proxy-balancer system
    user, writes /etc/proxy-balancer/config.yaml and enables (but does
    not start) proxy-balancer.service.
    """
    # ── Logging setup (once, at process start) ──────────────────
    if debug or verbose:
        level = "DEBUG"
    else:
        level = os.environ.get("PB_LOG_LEVEL", "INFO")

    # Console only; PB_LOG_FILE is attached once root is confirmed.
    setup_logging(level=level)

    if not as_json:
        _print_banner()

    try:
        if uninstall:
            result = _uninstall()
        else:
            result = _install()
    except ProvisionError as e:
        logger.error("%s", e.message)
        if e.reason:
            logger.error("Reason: %s", e.reason)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.error("Interrupted")
        sys.exit(130)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    elif not uninstall:
        _print_summary(result)


def _attach_log_file() -> None:
    log_file = os.environ.get("PB_LOG_FILE")
    if log_file:
        attach_log_file(log_file, os.environ.get("PB_LOG_FILE_LEVEL"))


def _install():
    from provisioner.adapters.shell.command import SubprocessRunner
    from provisioner.core.config.settings import load_settings
    from provisioner.core.services.privilege import require_root
    from provisioner.core.use_cases.install import run_install

    require_root()
    _attach_log_file()
    settings = load_settings()
    return run_install(settings, SubprocessRunner())


def _uninstall():
    from provisioner.adapters.shell.command import SubprocessRunner
    from provisioner.core.config.settings import Settings
    from provisioner.core.services.privilege import require_root
    from provisioner.core.use_cases.uninstall import run_uninstall

    require_root()
    _attach_log_file()
    # Port overrides play no part in teardown; only the fixed layout does.
    return run_uninstall(Settings(), SubprocessRunner())


def _rule() -> None:
    click.echo("=" * 46)


def _print_banner() -> None:
    click.echo()
    _rule()
    click.secho("  SOCKS Proxy Load Balancer Installer", bold=True)
    _rule()
    click.echo()


def _print_summary(result) -> None:
    settings = result.settings
    layout = settings.layout
    unit = layout.unit_path.stem

    click.echo()
    _rule()
    log_success(logger, "Installation completed successfully!")
    _rule()
    click.echo()
    click.secho("Installation paths:", bold=True)
    click.echo(f"  - JAR file:    {layout.artifact_path}")
    click.echo(f"  - Config file: {layout.config_path}")
    click.echo(f"  - Log dir:     {layout.log_dir}")
    click.echo(f"  - Service:     {layout.unit_path}")
    click.echo()

    if result.config_written:
        click.secho("Default configuration:", bold=True)
        click.echo(f"  - Listens on:  {settings.listen_host}:{settings.listen_port}")
        click.echo(f"  - Forwards to: 127.0.0.1:{settings.upstream_port} (SOCKS proxy)")
    else:
        click.secho("Existing configuration kept:", fg="yellow", bold=True)
        click.echo(f"  - {layout.config_path} was not modified")
        click.echo("  - Set PB_OVERWRITE_CONFIG=1 to regenerate it")
    click.echo()

    click.secho("Service commands:", bold=True)
    click.echo(f"  sudo systemctl start {unit}    # Start the service")
    click.echo(f"  sudo systemctl stop {unit}     # Stop the service")
    click.echo(f"  sudo systemctl restart {unit}  # Restart the service")
    click.echo(f"  sudo systemctl status {unit}   # Check status")
    click.echo(f"  sudo journalctl -u {unit} -f   # View logs")
    click.echo()
    click.secho("Edit configuration:", bold=True)
    click.echo(f"  sudo nano {layout.config_path}")
    click.echo(f"  sudo systemctl restart {unit}")
    click.echo()
    logger.info("Start the service with: sudo systemctl start %s", unit)
    click.echo()


if __name__ == "__main__":
    cli()
