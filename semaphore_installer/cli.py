"""
Semaphore Installer
--------------------------------------------------

Installs Semaphore (the Ansible web UI) on Debian- or RHEL-family hosts:
service account, prerequisites, the latest release package, the interactive
`semaphore setup`, config relocation and the systemd service. On RHEL it
also sets up MariaDB and optionally Terraform and OpenTofu.

Usage:
  sudo semaphore-installer [--distro auto|debian|rhel] [options]

Every step aborts the run on failure (exit code 1); the full command output
is kept in a log file inside the run's temporary workspace.
"""

import atexit
import signal
import sys
from pathlib import Path
from typing import Any, Optional

import click
import requests

from semaphore_installer import __version__, debian, rhel
from semaphore_installer.commands import CommandRunner
from semaphore_installer.config import DEBIAN, RHEL, Config, detect_distro
from semaphore_installer.context import (
    LOG_FILENAME,
    RunContext,
    create_workspace,
    remove_workspace,
)
from semaphore_installer.logger import close_logger, setup_logger
from semaphore_installer.provisioner import Provisioner, RunReport
from semaphore_installer.steps import access_url
from semaphore_installer.ui import (
    NordColors,
    console,
    create_header,
    error_console,
    print_error,
    print_success,
    print_warning,
    results_table,
)

PLANS = {DEBIAN: debian.build_plan, RHEL: rhel.build_plan}

# Workspace state shared with the exit and signal handlers
_run_state = {"workspace": None, "remove": False}


def cleanup() -> None:
    close_logger()
    workspace = _run_state["workspace"]
    if workspace is not None and _run_state["remove"]:
        remove_workspace(workspace)
        _run_state["workspace"] = None


def signal_handler(sig: int, frame: Any) -> None:
    sig_name = signal.Signals(sig).name
    print_warning(f"Installation interrupted by {sig_name}.")
    if _run_state["workspace"] is not None:
        print_warning(f"Partial run log kept at {Path(_run_state['workspace']) / LOG_FILENAME}")
    sys.exit(128 + sig)


def build_session() -> requests.Session:
    session = requests.Session()
    session.headers["User-Agent"] = f"semaphore-installer/{__version__}"
    return session


def build_context(config: Config, workspace: Path, debug: bool) -> RunContext:
    logger = setup_logger(workspace / LOG_FILENAME, debug=debug)
    return RunContext(
        config=config,
        workspace=workspace,
        runner=CommandRunner(logger),
        session=build_session(),
        logger=logger,
    )


def print_report(report: RunReport) -> None:
    rows = [(r.name, r.status, r.elapsed, r.message) for r in report.results]
    console.print()
    console.print(results_table(rows))
    console.print(
        f"[{NordColors.SNOW_STORM_1}]{len(report.executed)} steps run, "
        f"{len(report.skipped)} skipped[/]"
    )


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--distro",
    type=click.Choice(["auto", DEBIAN, RHEL]),
    default="auto",
    show_default=True,
    help="Install plan to use; auto reads /etc/os-release",
)
@click.option(
    "--conf-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding semaphore.service and mariadb.conf (RHEL plan); "
    "defaults to ./conf, else the copy shipped with the package",
)
@click.option("--release-url", default=None, help="Release metadata endpoint to query")
@click.option(
    "--settle-delay",
    type=float,
    default=None,
    help="Seconds to wait after the MariaDB bootstrap import",
)
@click.option(
    "--terraform/--no-terraform",
    default=None,
    help="Answer the Terraform prompt in advance (RHEL plan)",
)
@click.option(
    "--opentofu/--no-opentofu",
    default=None,
    help="Answer the OpenTofu prompt in advance (RHEL plan)",
)
@click.option("--keep-workspace", is_flag=True, help="Keep the temporary workspace and log")
@click.option("--skip-preflight", is_flag=True, help="Skip the root and tooling checks")
@click.option("--debug", is_flag=True, help="Show debug logging on the console")
@click.version_option(__version__, prog_name="semaphore-installer")
def main(
    distro: str,
    conf_dir: Optional[Path],
    release_url: Optional[str],
    settle_delay: Optional[float],
    terraform: Optional[bool],
    opentofu: Optional[bool],
    keep_workspace: bool,
    skip_preflight: bool,
    debug: bool,
) -> None:
    """Install and activate Semaphore on this host."""
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)
    atexit.register(cleanup)

    if distro == "auto":
        detected = detect_distro()
        if detected is None:
            print_error("Could not detect a Debian or RHEL family system; pass --distro.")
            sys.exit(1)
        distro = detected

    overrides = {
        "install_terraform": terraform,
        "install_opentofu": opentofu,
        "keep_workspace": keep_workspace,
    }
    if conf_dir is not None:
        overrides["conf_dir"] = conf_dir
    if release_url:
        overrides["release_url"] = release_url
    if settle_delay is not None:
        overrides["settle_delay"] = settle_delay
    config = Config.for_distro(distro, **overrides)

    workspace = create_workspace()
    _run_state["workspace"] = workspace
    _run_state["remove"] = False

    console.print(create_header())
    ctx = build_context(config, workspace, debug)
    ctx.logger.debug(f"Configuration: {config.to_dict()}")
    console.print(f"Plan: [bold {NordColors.SNOW_STORM_1}]{distro}[/]")
    console.print(f"Log file: [bold {NordColors.SNOW_STORM_1}]{ctx.log_file}[/]")

    try:
        report = Provisioner(ctx, PLANS[distro](skip_preflight=skip_preflight)).run()
        if report.succeeded:
            report.access_url = access_url(ctx)
    finally:
        ctx.session.close()

    print_report(report)
    failure = report.failure
    if failure is not None:
        print_error(failure.message)
        error_console.print(
            f"An error occurred. Please check the log file at {ctx.log_file} for more details."
        )
        sys.exit(1)

    _run_state["remove"] = not config.keep_workspace
    print_success(
        f"Semaphore has been successfully installed. "
        f"It should be accessible at {report.access_url}"
    )
    ctx.logger.debug(f"Installation finished: {report.access_url}")
    sys.exit(0)
