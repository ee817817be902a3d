"""
Installer steps common to the Debian and RHEL plans.

Every step takes the RunContext, raises StepFailure with an operator-facing
message when something goes wrong, and may return a short success message.
"""

import os
import shutil
import socket
from pathlib import Path
from typing import List, Optional, Union

from semaphore_installer.context import RunContext
from semaphore_installer.download import download_file
from semaphore_installer.errors import InstallerError, StepFailure
from semaphore_installer.release import resolve_latest_asset_url


def run_step_command(
    ctx: RunContext,
    step: str,
    cmd: List[str],
    failure: str,
    interactive: bool = False,
    stdin_file: Optional[Union[str, Path]] = None,
    cwd: Optional[Union[str, Path]] = None,
) -> None:
    try:
        ctx.runner.run(cmd, interactive=interactive, stdin_file=stdin_file, cwd=cwd)
    except InstallerError as e:
        ctx.logger.debug(str(e))
        raise StepFailure(step, failure) from e


def required_tools(ctx: RunContext) -> List[str]:
    if ctx.config.package_manager == "apt":
        account_tools = ["adduser"]
    else:
        account_tools = ["groupadd", "useradd"]
    return [ctx.config.package_manager, "systemctl"] + account_tools


def preflight(ctx: RunContext) -> str:
    if os.geteuid() != 0:
        raise StepFailure("preflight", "This installer must be run as root (e.g., using sudo)")
    missing = [tool for tool in required_tools(ctx) if shutil.which(tool) is None]
    if missing:
        raise StepFailure("preflight", f"Required commands not found: {', '.join(missing)}")
    return "Root privileges and required commands confirmed"


def resolve_asset_url(ctx: RunContext) -> str:
    config = ctx.config
    try:
        ctx.asset_url = resolve_latest_asset_url(
            ctx.session,
            config.release_url,
            config.package_suffix,
            timeout=config.http_timeout,
            token=config.github_token,
        )
    except InstallerError as e:
        ctx.logger.debug(str(e))
        raise StepFailure(
            "resolve_asset_url",
            f"Failed to find the latest {config.package_suffix} release asset: {e}",
        ) from e
    ctx.logger.info(f"Latest package: {ctx.asset_url}")
    return "Latest release asset resolved"


def download_package(ctx: RunContext) -> str:
    destination = ctx.workspace / ctx.config.package_filename
    kind = destination.suffix
    try:
        download_file(ctx.session, ctx.asset_url or "", destination, timeout=ctx.config.http_timeout)
    except InstallerError as e:
        ctx.logger.debug(str(e))
        raise StepFailure(
            "download_package", f"Failed to download the latest semaphore {kind} package"
        ) from e
    if not destination.is_file():
        raise StepFailure("download_package", f"Could not download latest {kind} package!")
    ctx.package_path = destination
    return f"Downloaded {destination.name}"


def install_dependencies(ctx: RunContext) -> str:
    run_step_command(
        ctx,
        "install_dependencies",
        [ctx.config.package_manager, "install", "-y", "ansible"],
        "Failed to install Ansible",
    )
    return "Ansible installed"


def install_package(ctx: RunContext) -> str:
    if ctx.package_path is None:
        raise StepFailure("install_package", "No downloaded package to install")
    kind = ctx.package_path.suffix
    run_step_command(
        ctx,
        "install_package",
        [ctx.config.package_manager, "install", "-y", str(ctx.package_path)],
        f"Failed to install Semaphore {kind} package",
    )
    return "Semaphore package installed"


def run_post_install_setup(ctx: RunContext) -> str:
    # semaphore setup writes config.json into the directory it runs in
    run_step_command(
        ctx,
        "run_post_install_setup",
        [ctx.config.service_name, "setup"],
        "Failed to setup Semaphore",
        interactive=True,
        cwd=ctx.config.work_dir,
    )
    return "Semaphore setup completed"


def relocate_config(ctx: RunContext) -> str:
    config = ctx.config
    config_dir = str(config.config_dir)
    artifact = config.work_dir / config.config_artifact
    run_step_command(
        ctx, "relocate_config", ["mkdir", config_dir], f"Failed to create {config_dir} directory"
    )
    run_step_command(
        ctx,
        "relocate_config",
        ["mv", str(artifact), config_dir + "/"],
        f"Failed to move {config.config_artifact} to {config_dir}",
    )
    run_step_command(
        ctx,
        "relocate_config",
        ["chown", "-R", f"{config.service_user}:{config.service_group}", config_dir],
        f"Failed to set permissions for {config_dir}",
    )
    return f"Configuration moved to {config_dir}"


def activate_service(ctx: RunContext) -> str:
    unit = ctx.config.unit_name
    commands = [
        (["systemctl", "daemon-reload"], "Failed to reload systemd daemon"),
        (["systemctl", "enable", unit], "Failed to enable semaphore service"),
        (["systemctl", "start", unit], "Failed to start semaphore service"),
        (["systemctl", "status", "--no-pager", unit], "Failed to get semaphore service status"),
    ]
    for cmd, failure in commands:
        run_step_command(ctx, "activate_service", cmd, failure)
    return f"{unit} enabled and running"


def detect_host_ip(ctx: RunContext) -> str:
    """First address reported by `hostname -I`, or the hostname."""
    try:
        addresses = ctx.runner.capture(["hostname", "-I"]).split()
    except InstallerError as e:
        ctx.logger.debug(f"Could not determine host IP: {e}")
        addresses = []
    return addresses[0] if addresses else socket.gethostname()


def access_url(ctx: RunContext) -> str:
    return f"http://{detect_host_ip(ctx)}:{ctx.config.web_port}"
