"""
Rich Logging Module for the Trader Performance API.

Installs a rich console handler on the root logger and renders
cache statistics as a table on shutdown.
"""
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich import box
from typing import Any, Dict, Iterable, List
import logging

console = Console()
std_logger = logging.getLogger(__name__)

LOG_FORMAT = "%(name)s - %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """
    Configure root logging with a RichHandler.

    Args:
        level: Log level name (case-insensitive); unknown names fall back to INFO
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def create_styled_table(columns: List[str], header_style: str = "bold cyan") -> Table:
    """Create consistently styled table with given columns."""
    table = Table(show_header=True, header_style=header_style, box=box.ROUNDED)
    for col in columns:
        table.add_column(col, style="cyan" if col != columns[-1] else "yellow")
    return table


def build_cache_table(cache_infos: Iterable[Dict[str, Any]]) -> Table:
    """Build a summary table from TTLCache.get_info() dicts."""
    table = create_styled_table(["Cache", "Size", "TTL (s)", "Hits", "Misses", "Hit Rate"])
    for info in cache_infos:
        table.add_row(
            str(info["name"]),
            str(info["size"]),
            str(info["ttl_seconds"]),
            str(info["hits"]),
            str(info["misses"]),
            f"{info['hit_rate'] * 100:.1f}%",
        )
    return table


def log_cache_summary(cache_infos: Iterable[Dict[str, Any]]) -> None:
    """Print cache statistics to the console."""
    console.print(build_cache_table(cache_infos))
