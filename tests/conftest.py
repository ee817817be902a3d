import logging
from dataclasses import replace
from pathlib import Path

import pytest

from semaphore_installer.config import Config
from semaphore_installer.context import RunContext

from fakes import FakeRunner, FakeSession, default_routes


@pytest.fixture
def make_context(tmp_path):
    def factory(distro="debian", runner=None, session=None, confirm=None, **overrides):
        workspace = tmp_path / "workspace"
        workspace.mkdir(exist_ok=True)
        work_dir = tmp_path / "cwd"
        work_dir.mkdir(exist_ok=True)
        unit_dir = tmp_path / "systemd"
        unit_dir.mkdir(exist_ok=True)
        config = Config.for_distro(distro)
        config = replace(
            config,
            work_dir=work_dir,
            unit_dir=unit_dir,
            config_dir=tmp_path / "etc" / "semaphore",
            **overrides,
        )
        if session is None:
            session = FakeSession()
            default_routes(session, config)
        ctx = RunContext(
            config=config,
            workspace=workspace,
            runner=runner or FakeRunner(),
            session=session,
            logger=logging.getLogger("semaphore_installer.tests"),
            sleep=lambda seconds: None,
        )
        if confirm is not None:
            ctx.confirm = confirm
        return ctx

    return factory


@pytest.fixture
def conf_dir(tmp_path) -> Path:
    path = tmp_path / "conf"
    path.mkdir()
    (path / "semaphore.service").write_text("[Unit]\nDescription=Semaphore\n")
    (path / "mariadb.conf").write_text("CREATE DATABASE semaphore;\n")
    return path
