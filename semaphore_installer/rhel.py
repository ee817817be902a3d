"""
Install plan for RHEL, Fedora, Rocky and Alma hosts (dnf, .rpm release
asset). On top of the Debian flow this sets up MariaDB and offers optional
Terraform and OpenTofu installs.
"""

from typing import List

from semaphore_installer import steps
from semaphore_installer.config import HASHICORP_REPO_URL, OPENTOFU_INSTALLER_URL
from semaphore_installer.context import RunContext
from semaphore_installer.download import download_file
from semaphore_installer.errors import InstallerError, StepFailure
from semaphore_installer.provisioner import Step

MARIADB_BOOTSTRAP = "mariadb.conf"


def create_service_account(ctx: RunContext) -> str:
    config = ctx.config
    steps.run_step_command(
        ctx,
        "create_service_account",
        ["groupadd", config.service_group],
        f"Failed to create {config.service_group} group",
    )
    steps.run_step_command(
        ctx,
        "create_service_account",
        [
            "useradd",
            "--system",
            "--create-home",
            "--home",
            str(config.service_home),
            "--shell",
            "/bin/false",
            "--gid",
            config.service_group,
            config.service_user,
        ],
        f"Failed to create {config.service_user} user",
    )
    return f"System user {config.service_user} created"


def install_database(ctx: RunContext) -> str:
    bootstrap = ctx.config.conf_dir / MARIADB_BOOTSTRAP
    if not bootstrap.is_file():
        raise StepFailure("install_database", f"MariaDB bootstrap script not found at {bootstrap}")

    steps.run_step_command(
        ctx,
        "install_database",
        ["dnf", "install", "-y", "mariadb-server", "mariadb"],
        "Failed to install MariaDB",
    )
    steps.run_step_command(
        ctx,
        "install_database",
        ["systemctl", "enable", "--now", "mariadb"],
        "Failed to start MariaDB",
    )
    steps.run_step_command(
        ctx,
        "install_database",
        ["mysql_secure_installation"],
        "Failed to secure MariaDB installation",
        interactive=True,
    )
    steps.run_step_command(
        ctx,
        "install_database",
        ["mysql", "-u", "root"],
        "Failed to import MariaDB config",
        stdin_file=bootstrap,
    )
    if ctx.config.settle_delay > 0:
        ctx.logger.debug(f"Waiting {ctx.config.settle_delay}s for MariaDB to settle")
        ctx.sleep(ctx.config.settle_delay)
    return "MariaDB installed and bootstrapped"


def install_systemd_unit(ctx: RunContext) -> str:
    config = ctx.config
    source = config.conf_dir / config.unit_name
    steps.run_step_command(
        ctx,
        "install_systemd_unit",
        ["cp", str(source), str(config.unit_path)],
        "Failed to copy systemd service file",
    )
    return "Service file copied successfully."


def install_terraform(ctx: RunContext) -> str:
    commands = [
        (["dnf", "-y", "install", "yum-utils"], "Failed to install yum-utils"),
        (["yum-config-manager", "--add-repo", HASHICORP_REPO_URL], "Failed to add HashiCorp repository"),
        (["dnf", "-y", "install", "terraform"], "Failed to install Terraform"),
    ]
    for cmd, failure in commands:
        steps.run_step_command(ctx, "install_terraform", cmd, failure)
    return "Terraform installed successfully."


def install_opentofu(ctx: RunContext) -> str:
    script = ctx.workspace / "install-opentofu.sh"
    try:
        download_file(ctx.session, OPENTOFU_INSTALLER_URL, script, timeout=ctx.config.http_timeout)
    except InstallerError as e:
        ctx.logger.debug(str(e))
        raise StepFailure("install_opentofu", "Failed to download OpenTofu install script") from e
    try:
        script.chmod(0o755)
    except OSError as e:
        raise StepFailure(
            "install_opentofu", "Failed to make OpenTofu install script executable"
        ) from e
    steps.run_step_command(
        ctx,
        "install_opentofu",
        [str(script), "--install-method", "rpm"],
        "Failed to install OpenTofu",
        cwd=ctx.workspace,
    )
    script.unlink()
    return "OpenTofu installed successfully."


def wants_terraform(ctx: RunContext) -> bool:
    if ctx.config.install_terraform is not None:
        return ctx.config.install_terraform
    return ctx.confirm("Would you like to install Terraform?")


def wants_opentofu(ctx: RunContext) -> bool:
    if ctx.config.install_opentofu is not None:
        return ctx.config.install_opentofu
    return ctx.confirm("Would you like to install OpenTofu?")


def build_plan(skip_preflight: bool = False) -> List[Step]:
    plan = [
        Step("preflight", "Preflight Checks", steps.preflight),
        Step("resolve_asset_url", "Resolving Latest Release", steps.resolve_asset_url),
        Step("create_service_account", "Creating Service Account", create_service_account),
        Step("install_database", "Installing MariaDB", install_database),
        Step("download_package", "Downloading Semaphore Package", steps.download_package),
        Step("install_dependencies", "Installing Ansible", steps.install_dependencies),
        Step("install_package", "Installing Semaphore", steps.install_package),
        Step("run_post_install_setup", "Semaphore Setup", steps.run_post_install_setup),
        Step("relocate_config", "Relocating Configuration", steps.relocate_config),
        Step("install_systemd_unit", "Installing Systemd Service", install_systemd_unit),
        Step(
            "install_terraform",
            "Installing Terraform",
            install_terraform,
            gate=wants_terraform,
            skip_message="Skipping Terraform installation.",
        ),
        Step(
            "install_opentofu",
            "Installing OpenTofu",
            install_opentofu,
            gate=wants_opentofu,
            skip_message="Skipping OpenTofu installation.",
        ),
        Step("activate_service", "Activating Service", steps.activate_service),
    ]
    if skip_preflight:
        plan = plan[1:]
    return plan
