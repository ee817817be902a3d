import os
from dataclasses import dataclass, field, asdict, replace
from pathlib import Path
from typing import Any, Dict, Optional

DEBIAN = "debian"
RHEL = "rhel"

RELEASE_API_URL = "https://api.github.com/repos/semaphoreui/semaphore/releases/latest"
UNIT_FILE_URL = (
    "https://raw.githubusercontent.com/ColoredBytes/SemaUwU/main/assets/files/semaphore.service"
)
HASHICORP_REPO_URL = "https://rpm.releases.hashicorp.com/RHEL/hashicorp.repo"
OPENTOFU_INSTALLER_URL = "https://get.opentofu.org/install-opentofu.sh"

PACKAGE_SUFFIXES: Dict[str, str] = {
    DEBIAN: "_linux_amd64.deb",
    RHEL: "_linux_amd64.rpm",
}

# ID / ID_LIKE values from /etc/os-release mapped to a plan
DEBIAN_IDS = {"debian", "ubuntu", "linuxmint", "pop", "raspbian"}
RHEL_IDS = {"rhel", "fedora", "centos", "rocky", "almalinux", "ol"}

BUNDLED_CONF_DIR = Path(__file__).resolve().parent / "conf"


def default_conf_dir(work_dir: Path) -> Path:
    """A conf/ directory in the working directory overrides the bundled copy."""
    local = Path(work_dir) / "conf"
    return local if local.is_dir() else BUNDLED_CONF_DIR


@dataclass
class Config:
    distro: str = DEBIAN
    service_name: str = "semaphore"
    service_user: str = "semaphore"
    service_group: str = "semaphore"
    service_home: Path = field(default_factory=lambda: Path("/home/semaphore"))

    release_url: str = RELEASE_API_URL
    unit_url: str = UNIT_FILE_URL
    github_token: Optional[str] = None

    work_dir: Path = field(default_factory=Path.cwd)
    conf_dir: Path = BUNDLED_CONF_DIR
    config_dir: Path = field(default_factory=lambda: Path("/etc/semaphore"))
    unit_dir: Path = field(default_factory=lambda: Path("/etc/systemd/system"))
    config_artifact: str = "config.json"

    web_port: int = 3000
    settle_delay: float = 5.0
    http_timeout: int = 60

    install_terraform: Optional[bool] = None
    install_opentofu: Optional[bool] = None
    keep_workspace: bool = False

    @classmethod
    def for_distro(cls, distro: str, **overrides: Any) -> "Config":
        if distro not in PACKAGE_SUFFIXES:
            raise ValueError(f"Unsupported distribution family: {distro}")
        config = cls(distro=distro, github_token=os.environ.get("GITHUB_TOKEN") or None)
        config = replace(config, **overrides)
        if "conf_dir" not in overrides:
            config = replace(config, conf_dir=default_conf_dir(config.work_dir))
        return config

    @property
    def package_suffix(self) -> str:
        return PACKAGE_SUFFIXES[self.distro]

    @property
    def package_manager(self) -> str:
        return "apt" if self.distro == DEBIAN else "dnf"

    @property
    def unit_name(self) -> str:
        return f"{self.service_name}.service"

    @property
    def unit_path(self) -> Path:
        return self.unit_dir / self.unit_name

    @property
    def package_filename(self) -> str:
        return f"{self.service_name}.{'deb' if self.distro == DEBIAN else 'rpm'}"

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        if data.get("github_token"):
            data["github_token"] = "***"
        return data


def read_os_release(path: Path = Path("/etc/os-release")) -> Dict[str, str]:
    os_info: Dict[str, str] = {}
    if not path.is_file():
        return os_info
    with open(path) as f:
        for line in f:
            if "=" in line:
                k, v = line.strip().split("=", 1)
                os_info[k] = v.strip('"')
    return os_info


def detect_distro(os_release: Optional[Dict[str, str]] = None) -> Optional[str]:
    """
    Map /etc/os-release to one of the supported install plans.

    Returns:
        "debian", "rhel" or None when the family is not recognised
    """
    info = read_os_release() if os_release is None else os_release
    ids = [info.get("ID", "").lower()] + info.get("ID_LIKE", "").lower().split()
    for os_id in ids:
        if os_id in DEBIAN_IDS:
            return DEBIAN
        if os_id in RHEL_IDS:
            return RHEL
    return None
