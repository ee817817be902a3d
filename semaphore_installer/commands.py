"""
Command execution with output mirrored to the terminal and the run log.
"""

import logging
import os
import subprocess
from pathlib import Path
from typing import List, Optional, Union

from semaphore_installer.errors import CommandError
from semaphore_installer.logger import LOGGER_NAME, OUTPUT_LOGGER_NAME
from semaphore_installer.ui import NordColors, console

# seconds an interrupted child gets to exit after SIGTERM before SIGKILL
STOP_TIMEOUT = 5


class CommandRunner:
    """
    Runs system commands for the installer.

    Non-interactive commands have stdout and stderr merged and streamed line
    by line to the console and to the log file. Interactive commands inherit
    the terminal so the operator can answer their prompts; only the command
    line and exit status reach the log.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(LOGGER_NAME)
        self.output_logger = logging.getLogger(OUTPUT_LOGGER_NAME)

    def run(
        self,
        cmd: List[str],
        interactive: bool = False,
        stdin_file: Optional[Union[str, Path]] = None,
        cwd: Optional[Union[str, Path]] = None,
    ) -> None:
        cmd_str = " ".join(str(part) for part in cmd)
        self.logger.debug(f"Executing: {cmd_str}")
        try:
            if interactive:
                returncode = subprocess.run(
                    cmd, cwd=cwd, env=os.environ.copy(), check=False
                ).returncode
            else:
                returncode = self._stream(cmd, stdin_file, cwd)
        except FileNotFoundError as e:
            raise CommandError(cmd, None, f"not found ({e.filename or cmd[0]})") from e
        except OSError as e:
            raise CommandError(cmd, None, str(e)) from e

        self.logger.debug(f"Exit status {returncode}: {cmd_str}")
        if returncode != 0:
            raise CommandError(cmd, returncode)

    def _stream(
        self,
        cmd: List[str],
        stdin_file: Optional[Union[str, Path]],
        cwd: Optional[Union[str, Path]],
    ) -> int:
        stdin = open(stdin_file, "rb") if stdin_file is not None else subprocess.DEVNULL
        try:
            process = subprocess.Popen(
                cmd,
                cwd=cwd,
                env=os.environ.copy(),
                stdin=stdin,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
                bufsize=1,
            )
            try:
                for line in process.stdout:
                    line = line.rstrip()
                    console.print(line, style=NordColors.SNOW_STORM_1, markup=False)
                    self.output_logger.info(line)
            except BaseException:
                # the child must not outlive an interrupted installer
                self._stop(process)
                raise
            process.stdout.close()
            return process.wait()
        finally:
            if stdin_file is not None:
                stdin.close()

    def _stop(self, process: subprocess.Popen) -> None:
        if process.poll() is None:
            self.logger.warning(f"Stopping {process.args[0]} (pid {process.pid})")
            process.terminate()
            try:
                process.wait(timeout=STOP_TIMEOUT)
            except subprocess.TimeoutExpired:
                process.kill()
                process.wait()
        process.stdout.close()

    def capture(self, cmd: List[str]) -> str:
        """Run a quiet query command and return its stdout."""
        self.logger.debug(f"Querying: {' '.join(cmd)}")
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, check=True)
        except subprocess.CalledProcessError as e:
            raise CommandError(cmd, e.returncode, (e.stderr or "").strip()) from e
        except OSError as e:
            raise CommandError(cmd, None, str(e)) from e
        return result.stdout
