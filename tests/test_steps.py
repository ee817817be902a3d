import pytest

from semaphore_installer import steps
from semaphore_installer.errors import StepFailure

from fakes import FakeRunner


def test_preflight_requires_root(make_context, monkeypatch):
    monkeypatch.setattr(steps.os, "geteuid", lambda: 1000)

    with pytest.raises(StepFailure, match="must be run as root"):
        steps.preflight(make_context())


def test_preflight_reports_missing_tools(make_context, monkeypatch):
    monkeypatch.setattr(steps.os, "geteuid", lambda: 0)
    monkeypatch.setattr(steps.shutil, "which", lambda tool: None if tool == "dnf" else f"/usr/bin/{tool}")

    with pytest.raises(StepFailure, match="Required commands not found: dnf"):
        steps.preflight(make_context("rhel"))


def test_preflight_passes(make_context, monkeypatch):
    monkeypatch.setattr(steps.os, "geteuid", lambda: 0)
    monkeypatch.setattr(steps.shutil, "which", lambda tool: f"/usr/bin/{tool}")

    assert steps.preflight(make_context("debian"))


def test_required_tools_per_distro(make_context):
    assert steps.required_tools(make_context("debian")) == ["apt", "systemctl", "adduser"]
    assert steps.required_tools(make_context("rhel")) == ["dnf", "systemctl", "groupadd", "useradd"]


def test_access_url_uses_first_address(make_context):
    ctx = make_context(runner=FakeRunner(host_ip="192.168.1.20 10.0.0.1"))
    assert steps.access_url(ctx) == "http://192.168.1.20:3000"


def test_access_url_falls_back_to_hostname(make_context, monkeypatch):
    monkeypatch.setattr(steps.socket, "gethostname", lambda: "semaphore-host")
    ctx = make_context(runner=FakeRunner(host_ip=None))
    assert steps.access_url(ctx) == "http://semaphore-host:3000"


def test_install_package_needs_download(make_context):
    with pytest.raises(StepFailure, match="No downloaded package"):
        steps.install_package(make_context())


def test_download_without_resolved_url(make_context):
    ctx = make_context()
    with pytest.raises(StepFailure, match="Failed to download the latest semaphore .deb package"):
        steps.download_package(ctx)
    assert ctx.package_path is None
