"""
Install plan for Debian and Ubuntu hosts (apt, .deb release asset).
"""

from typing import List

from semaphore_installer import steps
from semaphore_installer.context import RunContext
from semaphore_installer.download import download_file
from semaphore_installer.errors import InstallerError, StepFailure
from semaphore_installer.provisioner import Step


def create_service_account(ctx: RunContext) -> str:
    config = ctx.config
    steps.run_step_command(
        ctx,
        "create_service_account",
        [
            "adduser",
            "--system",
            "--group",
            "--home",
            str(config.service_home),
            config.service_user,
        ],
        f"Failed to create {config.service_user} user",
    )
    return f"System user {config.service_user} created"


def install_systemd_unit(ctx: RunContext) -> str:
    config = ctx.config
    try:
        download_file(ctx.session, config.unit_url, config.unit_path, timeout=config.http_timeout)
    except InstallerError as e:
        ctx.logger.debug(str(e))
        raise StepFailure("install_systemd_unit", "Failed to download systemd service file") from e
    return f"Service file installed at {config.unit_path}"


def build_plan(skip_preflight: bool = False) -> List[Step]:
    plan = [
        Step("preflight", "Preflight Checks", steps.preflight),
        Step("resolve_asset_url", "Resolving Latest Release", steps.resolve_asset_url),
        Step("create_service_account", "Creating Service Account", create_service_account),
        Step("download_package", "Downloading Semaphore Package", steps.download_package),
        Step("install_dependencies", "Installing Ansible", steps.install_dependencies),
        Step("install_package", "Installing Semaphore", steps.install_package),
        Step("run_post_install_setup", "Semaphore Setup", steps.run_post_install_setup),
        Step("relocate_config", "Relocating Configuration", steps.relocate_config),
        Step("install_systemd_unit", "Installing Systemd Service", install_systemd_unit),
        Step("activate_service", "Activating Service", steps.activate_service),
    ]
    if skip_preflight:
        plan = plan[1:]
    return plan
