import logging
import shutil
import tempfile
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

import requests

from semaphore_installer.commands import CommandRunner
from semaphore_installer.config import Config
from semaphore_installer.logger import LOGGER_NAME
from semaphore_installer.prompts import prompt_yes_no

LOG_FILENAME = "errors.log"


@dataclass
class RunContext:
    """
    Everything a step needs for one installer run. Steps receive it
    explicitly and record what later steps depend on (resolved URL,
    downloaded package) on it.
    """

    config: Config
    workspace: Path
    runner: CommandRunner
    session: requests.Session
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger(LOGGER_NAME))
    confirm: Callable[[str], bool] = prompt_yes_no
    sleep: Callable[[float], None] = time.sleep

    asset_url: Optional[str] = None
    package_path: Optional[Path] = None

    @property
    def log_file(self) -> Path:
        return self.workspace / LOG_FILENAME


def create_workspace() -> Path:
    return Path(tempfile.mkdtemp(prefix="semaphore-"))


def remove_workspace(workspace: Path) -> None:
    shutil.rmtree(workspace, ignore_errors=True)
