"""
Terminal presentation helpers shared by every installer step.
"""

from typing import List

import pyfiglet
from rich.console import Console
from rich.panel import Panel
from rich.style import Style
from rich.table import Table
from rich.text import Text

from semaphore_installer import __version__


# ----------------------------------------------------------------
# Nord-Themed Colors
# ----------------------------------------------------------------
class NordColors:
    POLAR_NIGHT_1: str = "#2E3440"
    POLAR_NIGHT_4: str = "#4C566A"
    SNOW_STORM_1: str = "#D8DEE9"
    SNOW_STORM_2: str = "#E5E9F0"
    FROST_1: str = "#8FBCBB"
    FROST_2: str = "#88C0D0"
    FROST_3: str = "#81A1C1"
    FROST_4: str = "#5E81AC"
    RED: str = "#BF616A"
    YELLOW: str = "#EBCB8B"
    GREEN: str = "#A3BE8C"


console: Console = Console(highlight=False)
error_console: Console = Console(stderr=True, highlight=False)

APP_NAME: str = "Semaphore"
APP_SUBTITLE: str = "Ansible UI Installer"


def create_header() -> Panel:
    """
    Build the startup banner.

    Returns:
        Panel containing the styled ASCII art header
    """
    ascii_art = ""
    for font_name in ["slant", "small", "mini"]:
        try:
            ascii_art = pyfiglet.Figlet(font=font_name, width=60).renderText(APP_NAME)
        except pyfiglet.FontNotFound:
            continue
        if ascii_art.strip():
            break

    ascii_lines = [line for line in ascii_art.split("\n") if line.strip()] or [APP_NAME]
    colors = [NordColors.FROST_1, NordColors.FROST_2, NordColors.FROST_3, NordColors.FROST_2]
    styled_text = ""
    for i, line in enumerate(ascii_lines):
        styled_text += f"[bold {colors[i % len(colors)]}]{line}[/]\n"

    return Panel(
        Text.from_markup(styled_text.rstrip("\n")),
        border_style=Style(color=NordColors.FROST_1),
        padding=(1, 1),
        title=f"[bold {NordColors.SNOW_STORM_2}]v{__version__}[/]",
        title_align="right",
        subtitle=f"[bold {NordColors.SNOW_STORM_1}]{APP_SUBTITLE}[/]",
        subtitle_align="center",
    )


def print_section(title: str) -> None:
    console.print(f"\n[bold {NordColors.FROST_2}]{title}[/]")
    console.print(f"[{NordColors.FROST_3}]{'─' * 60}[/]")


def print_step(text: str) -> None:
    console.print(f"[{NordColors.FROST_2}]• {text}[/]")


def print_success(text: str) -> None:
    console.print(f"[bold {NordColors.GREEN}]✓ {text}[/]")


def print_warning(text: str) -> None:
    console.print(f"[bold {NordColors.YELLOW}]⚠ {text}[/]")


def print_error(text: str) -> None:
    error_console.print(f"[bold {NordColors.RED}]✗ {text}[/]")


STATUS_CELLS = {
    "success": f"[{NordColors.GREEN}]✓ OK[/]",
    "skipped": f"[{NordColors.YELLOW}]– SKIPPED[/]",
    "failed": f"[{NordColors.RED}]✗ FAILED[/]",
}


def results_table(rows: List[tuple]) -> Table:
    """Summary table of (step, status, elapsed, message) rows."""
    table = Table(
        title="Installation Summary",
        border_style=NordColors.FROST_3,
        header_style=f"bold {NordColors.FROST_2}",
    )
    table.add_column("Step", style=NordColors.SNOW_STORM_1)
    table.add_column("Status", justify="center")
    table.add_column("Time", justify="right", style=NordColors.POLAR_NIGHT_4)
    table.add_column("Details", style=NordColors.SNOW_STORM_1)
    for name, status, elapsed, message in rows:
        table.add_row(name, STATUS_CELLS[status], f"{elapsed:.1f}s", message)
    return table
