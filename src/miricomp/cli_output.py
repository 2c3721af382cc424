"""
Colored CLI output utilities for miricomp.

Styled terminal output: colors, status symbols, progress bars and a
stage tracker for the analysis pipeline.

Author: Olivier Vitrac, PhD, HDR
        Generative Simulation Initiative
        olivier.vitrac@gmail.com
"""

from __future__ import annotations

import os
import sys
import time

from colorama import Fore, Style, init as colorama_init
from tqdm import tqdm

colorama_init(autoreset=True)


class Colors:
    """Color constants for consistent styling."""

    HEADER = Fore.CYAN + Style.BRIGHT
    STAGE = Fore.BLUE + Style.BRIGHT

    SUCCESS = Fore.GREEN + Style.BRIGHT
    WARNING = Fore.YELLOW
    ERROR = Fore.RED + Style.BRIGHT
    INFO = Fore.WHITE

    VALUE = Fore.YELLOW + Style.BRIGHT
    METRIC = Fore.MAGENTA
    PATH = Fore.CYAN

    PROGRESS = Fore.GREEN
    RESET = Style.RESET_ALL


class Symbols:
    """Unicode symbols for status indicators."""

    CHECK = "\u2714"  # ✔
    CROSS = "\u2718"  # ✘
    ARROW = "\u2192"  # →
    BULLET = "\u2022"  # •
    SPARKLE = "\u2728"  # ✨
    TELESCOPE = "\U0001F52D"  # 🔭
    FILE = "\U0001F4C4"  # 📄
    CHART = "\U0001F4CA"  # 📊
    PALETTE = "\U0001F3A8"  # 🎨

    @classmethod
    def use_ascii(cls):
        """Switch to ASCII-only fallbacks."""
        cls.CHECK = "[OK]"
        cls.CROSS = "[X]"
        cls.ARROW = "->"
        cls.BULLET = "*"
        cls.SPARKLE = "*"
        cls.TELESCOPE = "[T]"
        cls.FILE = "[F]"
        cls.CHART = "[C]"
        cls.PALETTE = "[P]"


def print_banner(version: str) -> None:
    """Print the miricomp startup banner."""
    print(
        f"\n{Colors.HEADER}{Symbols.TELESCOPE}  miricomp {version}"
        f"  |  MIRI three-filter composite and analysis{Colors.RESET}\n"
    )


def print_header(text: str, width: int = 60) -> None:
    """Print a styled section header."""
    line = "═" * width
    print(f"\n{Colors.HEADER}{line}")
    print(f"  {text}")
    print(f"{line}{Colors.RESET}")


def print_success(text: str) -> None:
    print(f"{Colors.SUCCESS}{Symbols.CHECK} {text}{Colors.RESET}")


def print_warning(text: str) -> None:
    print(f"{Colors.WARNING}! {text}{Colors.RESET}")


def print_error(text: str) -> None:
    print(f"{Colors.ERROR}{Symbols.CROSS} {text}{Colors.RESET}", file=sys.stderr)


def print_info(text: str) -> None:
    print(f"{Colors.INFO}{Symbols.BULLET} {text}{Colors.RESET}")


def print_metric(name: str, value: str | int | float, unit: str = "") -> None:
    """Print a metric with value."""
    suffix = f" {unit}" if unit else ""
    print(f"  {Colors.METRIC}{name}: {Colors.VALUE}{value}{Colors.RESET}{suffix}")


def print_path(label: str, path: str) -> None:
    print(f"  {Colors.INFO}{label}: {Colors.PATH}{path}{Colors.RESET}")


def print_table(lines: list[str]) -> None:
    """Print pre-formatted table lines, indented."""
    for line in lines:
        print(f"  {line}")


def print_summary_box(lines: list[str], title: str = "Summary") -> None:
    """Print a summary box with multiple lines."""
    width = max(max((len(line) for line in lines), default=0) + 4, len(title) + 4)

    print(f"\n{Colors.SUCCESS}╔" + "═" * width + "╗")
    print(f"║ {title:^{width - 2}} ║")
    print("╟" + "─" * width + "╢")
    for line in lines:
        print(f"║  {line:<{width - 3}}║")
    print("╚" + "═" * width + f"╝{Colors.RESET}")


def format_duration(seconds: float) -> str:
    """Format duration in human-readable form."""
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes = int(seconds // 60)
    return f"{minutes}m {seconds % 60:.0f}s"


def create_progress_bar(
    total: int,
    desc: str,
    unit: str = "filter",
    disable: bool = False,
) -> tqdm:
    """
    Create a styled progress bar.

    Parameters
    ----------
    total : int
        Total number of items.
    desc : str
        Description text.
    unit : str, default "filter"
        Unit name for items.
    disable : bool, default False
        Disable the progress bar.
    """
    return tqdm(
        total=total,
        desc=f"{Colors.PROGRESS}{desc}{Colors.RESET}",
        unit=unit,
        bar_format="{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}]",
        ncols=80,
        colour="green",
        leave=False,
        disable=disable,
    )


class PipelineProgress:
    """
    Track and display progress through the pipeline stages.

    Example
    -------
    >>> progress = PipelineProgress(total_stages=4)
    >>> progress.start_stage(1, "Loading", emoji=Symbols.FILE)
    >>> progress.update_detail("f770w: 1024x1024")
    >>> progress.complete_stage()
    """

    def __init__(self, total_stages: int = 4, quiet: bool = False):
        self.total_stages = total_stages
        self.current_stage = 0
        self.quiet = quiet
        self._stage_start_time = None

    def start_stage(self, stage_num: int, name: str, emoji: str = "") -> None:
        if self.quiet:
            return

        self.current_stage = stage_num
        self._stage_start_time = time.time()

        stage_text = f"Stage {stage_num}/{self.total_stages}: {name}"
        marker = emoji if emoji else "▶"
        print(f"\n{Colors.STAGE}{marker}  {stage_text}{Colors.RESET}")

    def update_detail(self, text: str) -> None:
        if self.quiet:
            return
        print(f"   {Colors.INFO}{text}{Colors.RESET}")

    def complete_stage(self, message: str = "") -> None:
        if self.quiet:
            return

        text = message or "Complete"
        if self._stage_start_time:
            text = f"{text} ({format_duration(time.time() - self._stage_start_time)})"
        print(f"   {Colors.SUCCESS}{Symbols.CHECK} {text}{Colors.RESET}")

    def fail_stage(self, message: str) -> None:
        if self.quiet:
            return
        print(f"   {Colors.ERROR}{Symbols.CROSS} {message}{Colors.RESET}")


def setup_terminal() -> None:
    """Fall back to ASCII symbols when the terminal is unlikely to render unicode."""
    encoding = (getattr(sys.stdout, "encoding", None) or "").lower()
    if "utf" not in encoding or os.environ.get("TERM") == "dumb":
        Symbols.use_ascii()
