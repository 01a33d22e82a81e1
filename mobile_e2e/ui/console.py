import logging
from typing import Dict

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.traceback import install

# Install rich traceback handler
install()

# Configure console logger
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Create a global console instance
console = Console()


def print_banner(title: str, details: Dict[str, str], border_style: str = "blue"):
    """Print a titled panel with key/value details."""
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold")
    table.add_column()
    for key, value in details.items():
        table.add_row(f"{key}:", str(value))
    console.print(Panel(table, title=title, border_style=border_style))
    logger.info(f"{title}: " + ", ".join(f"{k}={v}" for k, v in details.items()))


def print_section(title: str):
    """Print a section heading."""
    console.print(f"\n[bold blue]{title}[/bold blue]")
    logger.info(title)


def print_status(message: str, ok: bool = True):
    """Print a check result line."""
    mark = "[green]OK[/green]" if ok else "[red]FAIL[/red]"
    console.print(f"  {mark} {message}")
    if ok:
        logger.info(message)
    else:
        logger.warning(message)


def print_error(message: str):
    """Print an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")
    logger.error(message)


def print_warning(message: str):
    """Print a warning message."""
    console.print(f"[bold yellow]Warning:[/bold yellow] {message}")
    logger.warning(message)


def print_success(message: str):
    """Print a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")
    logger.info(f"Success: {message}")


def print_appium_status(message: str, is_error: bool = False):
    """Print Appium server status."""
    style = "red" if is_error else "green"
    console.print(f"[bold {style}]Appium Status:[/bold {style}] {message}")
    if is_error:
        logger.error(f"Appium status: {message}")
    else:
        logger.info(f"Appium status: {message}")
