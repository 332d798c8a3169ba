"""Terminal interface for recording and browsing voice notes."""

import time
import logging
from typing import Optional

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..config import VoiceNotesConfig
from ..services.controller import VoiceNotesController
from ..services.note_store import LEFT, RIGHT
from .keyboard_input import KeyboardInputHandler
from .typewriter import TypewriterFeed

logger = logging.getLogger(__name__)

LEVEL_METER_WIDTH = 20
PREVIEW_CHARS = 60

HELP_TEXT = (
    "[bold green]space[/bold green] record/stop  "
    "[bold]o[/bold] open newest  [bold]a[/bold]/[bold]d[/bold] previous/next  "
    "[bold]e[/bold] edit  [bold]s[/bold] save  [bold]x[/bold] delete  "
    "[bold]c[/bold] close  [bold red]q[/bold red] quit"
)


class VoiceNotesScreen:
    """Redraws the application state and maps keys to controller operations."""

    def __init__(self, controller: VoiceNotesController, config: VoiceNotesConfig,
                 console: Optional[Console] = None):
        self.controller = controller
        self.console = console or Console()
        self.typewriter = TypewriterFeed()
        self.typing_interval = config.get('ui.typing_interval_seconds', 0.05)
        self.redraw_interval = 0.2
        self.running = False
        self.editing = False
        self.input_handler = KeyboardInputHandler(self.handle_key)

    def render(self) -> Group:
        """Build the full screen for the current state."""
        state = self.controller.state
        parts = [Text("🎙️  Voice Notes", style="bold blue")]

        if state.is_recording:
            stats = self.controller.capture.get_recording_stats()
            level = min(stats.peak_level, 1.0)
            meter = "█" * int(level * LEVEL_METER_WIDTH)
            parts.append(Text(f"🔴 RECORDING  {stats.duration_seconds:5.1f}s  "
                              f"[{meter:<{LEVEL_METER_WIDTH}}]", style="bold red"))
            parts.append(Panel(Text(self.typewriter.displayed_text + "▌", style="white"),
                               title="Live transcript", border_style="blue"))
        else:
            parts.append(Text("⏹️  STOPPED", style="bold yellow"))

        if state.pending_finalizations:
            parts.append(Text(f"⏳ Transcribing {state.pending_finalizations} recording(s)...",
                              style="cyan"))

        parts.append(self._render_notes())

        selected = self.controller.selected_note
        if selected is not None:
            parts.append(self._render_detail(selected))

        toast = self.controller.notifier.message
        if toast:
            parts.append(Text(toast, style="bold black on green"))

        parts.append(Text.from_markup(HELP_TEXT))
        return Group(*parts)

    def _render_notes(self) -> Table:
        table = Table(title=f"Notes ({len(self.controller.note_store)})", expand=True)
        table.add_column("Title", style="bold")
        table.add_column("Date", style="dim")
        table.add_column("Content")

        selected_id = self.controller.state.selected_note_id
        for note in self.controller.notes:
            preview = note.content if len(note.content) <= PREVIEW_CHARS else note.content[:PREVIEW_CHARS] + "…"
            style = "reverse" if note.id == selected_id else None
            table.add_row(note.title, note.timestamp, preview, style=style)
        return table

    def _render_detail(self, note) -> Panel:
        state = self.controller.state
        body = Text()
        body.append("Title: ", style="dim")
        body.append(f"{state.edited_title}\n")
        body.append("Date:  ", style="dim")
        body.append(f"{note.timestamp}\n")
        if note.url:
            body.append("Source: ", style="dim")
            body.append(f"{note.url}\n")
        body.append("\n")
        body.append(state.edited_content)
        if state.is_saving:
            body.append("\n\n⏳ Saving...", style="yellow")
        return Panel(body, title="Note Details", border_style="green")

    def show_status(self) -> None:
        self.console.clear()
        self.console.print(self.render())

    def handle_key(self, key: str) -> bool:
        """Apply one keypress. Returns False to quit."""
        if key == "q":
            self.running = False
            return False

        if key == " ":
            self.controller.toggle_recording()
        elif key == "o":
            notes = self.controller.notes
            if notes:
                self.controller.open_note(notes[0].id)
        elif key == "a":
            self.controller.navigate_notes(LEFT)
        elif key == "d":
            self.controller.navigate_notes(RIGHT)
        elif key == "x":
            self.controller.delete_note()
        elif key == "s":
            self.controller.save_note()
        elif key == "c":
            self.controller.close_note()
        elif key == "e":
            self._edit_selected()
        return True

    def _edit_selected(self) -> None:
        state = self.controller.state
        if state.selected_note_id is None:
            return

        self.editing = True
        try:
            with self.input_handler.line_input():
                self.console.print()
                title = self.console.input(f"Title [{state.edited_title}]: ")
                content = self.console.input("Content (empty keeps current): ")
        finally:
            self.editing = False

        self.controller.edit_note(title=title or None, content=content or None)

    def run(self) -> None:
        """Run the UI loop until the user quits."""
        self.running = True
        self.input_handler.start()
        next_redraw = 0.0
        try:
            while self.running and self.input_handler.running:
                self.controller.process_pending()
                self.typewriter.update(self.controller.state.running_transcript)
                self.typewriter.tick()

                now = time.monotonic()
                if not self.editing and now >= next_redraw:
                    self.show_status()
                    next_redraw = now + self.redraw_interval

                time.sleep(self.typing_interval)
        except KeyboardInterrupt:
            logger.info("UI interrupted by user")
        finally:
            self.running = False
            self.input_handler.stop()
