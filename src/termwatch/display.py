"""
Display manager for the Rich-based watch face.

Renders the snapshot as terminal prompt lines, either once or as a live
view that refreshes whenever the aggregator reports a change.
"""

import logging
from typing import Optional

from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from .core import PROMPT_IDLE, PROMPT_NOW
from .snapshot import StatusSnapshot

logger = logging.getLogger(__name__)

# (label, snapshot field, value style)
LINES = (
    ("[TIME]", "time", "white"),
    ("[DATE]", "date", "blue"),
    ("[BATT]", "battery_percent", "green"),
    ("[STEP]", "step_count", "cyan"),
    ("[L_HR]", "heart_rate_bpm", "red"),
    ("[TEMP]", "temperature_c", "yellow"),
)


class DisplayManager:
    """Manages watch face output with Rich library."""

    # Consoles this narrow get the compact layout without the border
    COMPACT_WIDTH = 30

    def __init__(self, console: Optional[Console] = None):
        """Initialize display manager.

        Args:
            console: Rich Console instance (creates one if None)
        """
        self.console = console or Console()
        self.live_enabled = False
        self._live: Optional[Live] = None

    def render(self, snapshot: StatusSnapshot) -> Panel | Group:
        """Build the watch face renderable.

        Args:
            snapshot: Values to show

        Returns:
            Rich renderable with the prompt and readout lines
        """
        lines = [Text(PROMPT_NOW, style="bold white")]
        for label, field, style in LINES:
            line = Text(no_wrap=True, overflow="ellipsis")
            line.append(label, style="bold white")
            line.append(" ")
            line.append(getattr(snapshot, field), style=style)
            lines.append(line)
        lines.append(Text(""))
        lines.append(Text(PROMPT_IDLE, style="bold white"))

        body = Group(*lines)
        if self.console.width <= self.COMPACT_WIDTH:
            return body
        return Panel(body, style="on black", expand=False)

    def print_snapshot(self, snapshot: StatusSnapshot) -> None:
        """Print one frame of the watch face."""
        self.console.print(self.render(snapshot))

    def print_error(self, message: str) -> None:
        """Print red error message."""
        self.console.print(f"[red]Error:[/red] {message}", highlight=False)

    def print_info(self, message: str) -> None:
        """Print cyan info message."""
        self.console.print(f"[cyan]Info:[/cyan] {message}", highlight=False)

    def start_live(self, snapshot: StatusSnapshot) -> None:
        """Start live display refresh mode.

        Args:
            snapshot: Initial values to show
        """
        if self.live_enabled:
            return

        self.live_enabled = True
        self._live = Live(
            self.render(snapshot), console=self.console, refresh_per_second=4
        )
        self._live.start()

    def stop_live(self) -> None:
        """Stop live display refresh mode."""
        if not self.live_enabled:
            return

        self.live_enabled = False
        if self._live is not None:
            self._live.stop()
            self._live = None

    def update_live(self, snapshot: StatusSnapshot) -> None:
        """Redraw the live display with new values.

        Args:
            snapshot: Current values
        """
        if not self.live_enabled or self._live is None:
            return

        try:
            self._live.update(self.render(snapshot))
        except Exception as e:
            logger.error(f"Live update error: {e}")
