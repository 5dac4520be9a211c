"""Console output for the CLI.

Provides a Console class that wraps rich for consistent output.
All CLI output should go through this module.
"""

from datetime import UTC, datetime
from typing import Any

from rich.console import Console as RichConsole
from rich.console import Group
from rich.panel import Panel
from rich.table import Table

from viralgrowth.application.autopilot import DashboardSnapshot
from viralgrowth.domain.upload.model.record import UploadRecord
from viralgrowth.domain.upload.model.value import UploadStatus

_STATUS_STYLES = {
    UploadStatus.PENDING: "yellow",
    UploadStatus.PROCESSING: "cyan",
    UploadStatus.UPLOADED: "green",
    UploadStatus.FAILED: "red",
}


def relative_time(timestamp: datetime) -> str:
    """Convert a timestamp to a short relative string (e.g., '2m ago')."""
    seconds = (datetime.now(UTC) - timestamp).total_seconds()
    if seconds < 60:
        return "just now"
    elif seconds < 3600:
        return f"{int(seconds // 60)}m ago"
    elif seconds < 86400:
        return f"{int(seconds // 3600)}h ago"
    return timestamp.strftime("%Y-%m-%d %H:%M")


class Console:
    """CLI output manager wrapping rich."""

    def __init__(
        self,
        *,
        force_terminal: bool | None = None,
        quiet: bool = False,
    ) -> None:
        """Initialize the console.

        Args:
            force_terminal: Force terminal mode (True/False) or auto-detect (None).
            quiet: Suppress non-essential output.
        """
        self._console = RichConsole(force_terminal=force_terminal, stderr=False)
        self._err_console = RichConsole(force_terminal=force_terminal, stderr=True)
        self._quiet = quiet

    @property
    def rich(self) -> RichConsole:
        """Underlying rich console (for Live displays)."""
        return self._console

    # -------------------------------------------------------------------------
    # Status messages
    # -------------------------------------------------------------------------

    def success(self, message: str) -> None:
        """Print a success message."""
        self._console.print(f"[green]✓[/green] {message}")

    def error(self, message: str, *, hint: str | None = None) -> None:
        """Print an error message to stderr."""
        self._err_console.print(f"[red]✗[/red] {message}")
        if hint:
            self._err_console.print(f"  [dim]{hint}[/dim]")

    def warning(self, message: str) -> None:
        """Print a warning message."""
        self._console.print(f"[yellow]⚠[/yellow] {message}")

    def info(self, message: str) -> None:
        """Print an info message (suppressed in quiet mode)."""
        if not self._quiet:
            self._console.print(f"[dim]{message}[/dim]")

    def print(self, *args: Any, **kwargs: Any) -> None:
        """Print to console (pass-through to rich)."""
        self._console.print(*args, **kwargs)

    def print_json(self, data: str) -> None:
        """Print pretty JSON."""
        self._console.print_json(data)

    # -------------------------------------------------------------------------
    # Dashboard
    # -------------------------------------------------------------------------

    def record_detail(self, record: UploadRecord) -> None:
        """Print one record in a panel."""
        style = _STATUS_STYLES[record.status]
        lines = [record.description, ""]
        lines.append(
            f"[cyan]Status:[/cyan] [{style}]{record.status}[/{style}]    "
            f"[cyan]Stage:[/cyan] {record.stage}    [cyan]Format:[/cyan] {record.format}"
        )
        if record.trend_source:
            lines.append(f"[cyan]Trend:[/cyan] {record.trend_source}")
        if record.metrics:
            shown = record.metrics.display()
            lines.append(
                f"[cyan]CTR:[/cyan] {shown['ctr']}    "
                f"[cyan]Retention:[/cyan] {shown['retention']}"
            )
        for source in record.sources or []:
            lines.append(f"[dim]• {source.title} ({source.uri})[/dim]")

        self._console.print(
            Panel(
                "\n".join(lines),
                title=f"[bold]{record.title}[/bold]",
                subtitle=f"[dim]{record.id}[/dim]",
                border_style=style,
                padding=(1, 2),
            )
        )


def render_dashboard(snapshot: DashboardSnapshot, *, limit: int = 10) -> Group:
    """Build a renderable for a dashboard snapshot (used with rich Live)."""
    channel = snapshot.channel
    header = Table.grid(padding=(0, 2))
    header.add_row(
        f"[bold]Channel:[/bold] {channel.name + ' ' + channel.handle if channel else '-'}",
        f"[bold]Connection:[/bold] {snapshot.connection}",
        f"[bold]Auto:[/bold] {'on' if snapshot.auto_active else 'off'}",
        f"[bold]Next run in:[/bold] {snapshot.countdown}s" if snapshot.auto_active else "",
        "[cyan]busy[/cyan]" if snapshot.busy else "[dim]idle[/dim]",
    )
    header.add_row(
        f"[dim]niche={snapshot.settings.niche}[/dim]",
        f"[dim]tone={snapshot.settings.tone}[/dim]",
        f"[dim]format={snapshot.settings.format}[/dim]",
        "",
        "",
    )

    table = Table(show_header=True, header_style="bold", expand=True)
    table.add_column("When", style="dim", width=9)
    table.add_column("Title", ratio=3)
    table.add_column("Status", width=11)
    table.add_column("Stage", width=18)
    table.add_column("CTR", width=6)
    table.add_column("Retention", width=9)

    for record in snapshot.records[:limit]:
        style = _STATUS_STYLES[record.status]
        shown = record.metrics.display() if record.metrics else {"ctr": "", "retention": ""}
        table.add_row(
            relative_time(record.timestamp),
            record.title,
            f"[{style}]{record.status}[/{style}]",
            str(record.stage),
            shown["ctr"],
            shown["retention"],
        )

    return Group(Panel(header, border_style="dim"), table)


_default: Console | None = None


def get_console() -> Console:
    """Get the default console instance."""
    global _default
    if _default is None:
        _default = Console()
    return _default
