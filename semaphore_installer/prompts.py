from typing import Callable, Optional

from rich.prompt import Prompt

from semaphore_installer.errors import PromptError
from semaphore_installer.ui import NordColors, console

AFFIRMATIVE = frozenset({"yes", "Yes", "YES", "y", "Y"})
NEGATIVE = frozenset({"no", "No", "NO", "n", "N"})


def parse_yes_no(raw: str) -> Optional[bool]:
    """
    Map an answer to True (yes), False (no) or None (unrecognised).
    """
    answer = raw.strip()
    if answer in AFFIRMATIVE:
        return True
    if answer in NEGATIVE:
        return False
    return None


def _ask(question: str) -> str:
    try:
        return Prompt.ask(f"[bold {NordColors.FROST_2}]{question}[/] (yes/no)", console=console)
    except EOFError as e:
        raise PromptError(f'No answer to "{question}": input closed') from e


def prompt_yes_no(question: str, ask: Callable[[str], str] = _ask) -> bool:
    """Ask until the answer is one of the recognised yes/no tokens."""
    while True:
        choice = parse_yes_no(ask(question))
        if choice is not None:
            return choice
        console.print(f"[{NordColors.YELLOW}]Invalid input. Please enter yes or no.[/]")
