from typing import List, Optional


class InstallerError(Exception):
    """Base exception for installer errors."""

    pass


class CommandError(InstallerError):
    """Raised when a system command exits non-zero or cannot be started."""

    def __init__(self, cmd: List[str], returncode: Optional[int], detail: str = ""):
        self.cmd = cmd
        self.returncode = returncode
        message = f"Command failed (code {returncode}): {' '.join(cmd)}"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class DownloadError(InstallerError):
    """Raised when a network fetch fails."""

    pass


class StepFailure(InstallerError):
    """
    Raised by a provisioning step. Carries the step name and the message
    shown to the operator.
    """

    def __init__(self, step: str, message: str):
        self.step = step
        self.message = message
        super().__init__(message)


class PromptError(InstallerError):
    """Raised when a question cannot be answered because input has ended."""

    pass
