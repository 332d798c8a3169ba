"""Auto mode: record for a fixed time, finalize, print the note and exit."""

import time
import logging
from typing import Optional

from rich.console import Console
from rich.panel import Panel

from .config import VoiceNotesConfig
from .models.notes import Note
from .services.controller import VoiceNotesController, create_controller

logger = logging.getLogger(__name__)

FINALIZE_TIMEOUT_SECONDS = 120.0


def run_auto_mode(config: VoiceNotesConfig, duration_seconds: int = 10,
                  console: Optional[Console] = None) -> Optional[Note]:
    """Record for ``duration_seconds`` and return the finalized note.

    Returns:
        The new note, or None if recording or finalization failed
    """
    console = console or Console()
    logger.info(f"🤖 Starting auto mode: {duration_seconds}s recording")

    controller = create_controller(config)
    try:
        return _record_and_finalize(controller, duration_seconds, console)
    except KeyboardInterrupt:
        console.print("\n🛑 Auto mode interrupted by user")
        logger.info("Auto mode interrupted by KeyboardInterrupt")
        return None
    finally:
        console.print("🧹 Cleaning up...")
        controller.shutdown()


def _record_and_finalize(controller: VoiceNotesController, duration_seconds: int,
                         console: Console) -> Optional[Note]:
    if not controller.start_recording():
        console.print(f"❌ Cannot record: {controller.state.last_error}", style="red")
        return None

    console.print(f"🔴 Recording for {duration_seconds} seconds...")
    for elapsed in range(1, duration_seconds + 1):
        time.sleep(1)
        controller.process_pending()
        progress_bar = "█" * elapsed + "░" * (duration_seconds - elapsed)
        console.print(f"   [{progress_bar}] {elapsed:2d}/{duration_seconds}s  "
                      f"{controller.state.running_transcript[-60:]}")

    notes_before = len(controller.note_store)
    controller.stop_recording()
    console.print("⏹️  Stopped, waiting for final transcription...")

    finished = controller.wait_for(lambda state: state.pending_finalizations == 0,
                                   timeout=FINALIZE_TIMEOUT_SECONDS)
    if not finished:
        console.print("❌ Timed out waiting for the final transcription", style="red")
        return None

    if len(controller.note_store) == notes_before:
        console.print(f"❌ Transcription failed: {controller.state.last_error}", style="red")
        return None

    note = controller.notes[0]
    console.print(Panel(note.content or "(empty)", title=f"{note.title} · {note.timestamp}",
                        border_style="green"))
    logger.info(f"Auto mode completed: note {note.id}")
    return note
