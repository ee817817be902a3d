"""
Ordered execution of installer steps.

A plan is a list of Step objects. The Provisioner runs them in order and
stops at the first failure; nothing is retried. Any exception raised by a
step or by its gate fails that step. A step may carry a gate, a yes/no
decision taken just before it runs; a declined gate skips the step and the
run carries on.
"""

import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from semaphore_installer.context import RunContext
from semaphore_installer.errors import InstallerError, StepFailure
from semaphore_installer.ui import print_section, print_step, print_success

SUCCESS = "success"
SKIPPED = "skipped"
FAILED = "failed"


@dataclass
class Step:
    name: str
    title: str
    action: Callable[[RunContext], Optional[str]]
    gate: Optional[Callable[[RunContext], bool]] = None
    skip_message: str = ""


@dataclass
class StepResult:
    name: str
    status: str
    message: str = ""
    elapsed: float = 0.0


@dataclass
class RunReport:
    results: List[StepResult] = field(default_factory=list)
    access_url: Optional[str] = None

    @property
    def failure(self) -> Optional[StepResult]:
        for result in self.results:
            if result.status == FAILED:
                return result
        return None

    @property
    def succeeded(self) -> bool:
        return self.failure is None

    @property
    def executed(self) -> List[str]:
        return [r.name for r in self.results if r.status != SKIPPED]

    @property
    def skipped(self) -> List[str]:
        return [r.name for r in self.results if r.status == SKIPPED]


class Provisioner:
    def __init__(self, ctx: RunContext, steps: List[Step]):
        self.ctx = ctx
        self.steps = steps

    def run(self) -> RunReport:
        report = RunReport()
        logger = self.ctx.logger
        for step in self.steps:
            start = time.time()
            try:
                if step.gate is not None and not step.gate(self.ctx):
                    message = step.skip_message or f"Skipping {step.title}."
                    print_step(message)
                    logger.debug(message)
                    report.results.append(StepResult(step.name, SKIPPED, message))
                    continue

                print_section(step.title)
                logger.debug(f"Starting step {step.name}")
                start = time.time()
                message = step.action(self.ctx) or ""
            except StepFailure as e:
                report.results.append(self._failed(step, e.message, start))
                return report
            except InstallerError as e:
                report.results.append(self._failed(step, str(e), start))
                return report
            except Exception as e:
                logger.exception(f"Unexpected error in step {step.name}")
                report.results.append(self._failed(step, f"Unexpected error: {e}", start))
                return report

            elapsed = time.time() - start
            logger.debug(f"{step.name} completed in {elapsed:.2f}s")
            if message:
                print_success(message)
            report.results.append(StepResult(step.name, SUCCESS, message, elapsed))
        return report

    def _failed(self, step: Step, message: str, start: float) -> StepResult:
        elapsed = time.time() - start
        self.ctx.logger.error(f"{step.name} failed after {elapsed:.2f}s: {message}")
        return StepResult(step.name, FAILED, message, elapsed)
