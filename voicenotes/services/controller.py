"""Application controller: owns all state and applies every event to it.

Audio capture, uploads and saves run on background threads. They only post
events; ``process_pending()`` applies queued events one at a time, in order,
under a single lock. User actions go through the same path via ``dispatch``.
"""

import time
import queue
import asyncio
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import Any, Callable, List, Optional, Tuple

from pubsub import pub

from ..audio.audio_pub import AudioPublisher, AUDIO_CHUNK_TOPIC
from ..audio.capture import CaptureController
from ..config import VoiceNotesConfig
from ..exceptions import MediaAccessDeniedError, InvalidStateError
from ..models.events import (
    AudioChunkEvent,
    RecordingStarted,
    RecordingFailed,
    RecordingStopped,
    ChunkTranscribed,
    ChunkFailed,
    FinalTranscriptReady,
    FinalTranscriptFailed,
    OpenNote,
    CloseNote,
    NavigateNotes,
    EditNote,
    DeleteNote,
    SaveRequested,
    NoteSaved,
    NoteSaveFailed,
)
from ..models.notes import Note
from ..models.ui import AppState
from ..models.session import RecordingSession
from ..transcription.client import TranscriptionClient
from ..transcription.publisher import TranscriptionPublisher, REALTIME_TOPIC, FINAL_TOPIC
from ..transcription.uploader import ChunkUploader
from ..ui.notifier import ToastNotifier
from .note_store import NoteStore, LEFT, RIGHT
from .repository import NoteRepository, InMemoryNoteRepository

logger = logging.getLogger(__name__)

MEDIA_DENIED_MESSAGE = "Microphone access denied"
TRANSCRIPTION_FAILED_MESSAGE = "Transcription failed"
SAVE_SUCCESS_MESSAGE = "Note saved successfully"
SAVE_FAILURE_MESSAGE = "Error saving note"


class VoiceNotesController:
    """Single owner of the recording session, the notes and the note selection."""

    def __init__(self,
                 capture: CaptureController,
                 uploader: ChunkUploader,
                 note_store: Optional[NoteStore] = None,
                 repository: Optional[NoteRepository] = None,
                 notifier: Optional[ToastNotifier] = None,
                 source_url: Optional[str] = None,
                 topics: Optional[List[str]] = None,
                 audio_topic: Optional[str] = None):
        """Initialize controller.

        Args:
            capture: Microphone capture controller
            uploader: Uploader used for incremental chunks and finalization
            note_store: Note collection (a new empty store by default)
            repository: Save target for edited notes
            notifier: Receives user-visible messages
            source_url: Recorded as the ``url`` of every new note
            topics: Pub/sub topics carrying audio chunks and upload outcomes
            audio_topic: If given, the uploader is subscribed to audio chunks
                         on this topic until shutdown
        """
        self.capture = capture
        self.uploader = uploader
        self.note_store = note_store if note_store is not None else NoteStore()
        self.repository = repository if repository is not None else InMemoryNoteRepository()
        self.notifier = notifier if notifier is not None else ToastNotifier()
        self.source_url = source_url

        self.state = AppState()
        self._events: "queue.Queue[Any]" = queue.Queue()
        self._lock = threading.RLock()
        self._session_counter = 0
        self._save_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="note_save")

        self._handlers = {
            AudioChunkEvent: self._on_audio_chunk,
            RecordingStarted: self._on_recording_started,
            RecordingFailed: self._on_recording_failed,
            RecordingStopped: self._on_recording_stopped,
            ChunkTranscribed: self._on_chunk_transcribed,
            ChunkFailed: self._on_chunk_failed,
            FinalTranscriptReady: self._on_final_transcript,
            FinalTranscriptFailed: self._on_final_transcript_failed,
            OpenNote: self._on_open_note,
            CloseNote: self._on_close_note,
            NavigateNotes: self._on_navigate_notes,
            EditNote: self._on_edit_note,
            DeleteNote: self._on_delete_note,
            SaveRequested: self._on_save_requested,
            NoteSaved: self._on_note_saved,
            NoteSaveFailed: self._on_note_save_failed,
        }

        self.topics = topics if topics is not None else [AUDIO_CHUNK_TOPIC, REALTIME_TOPIC, FINAL_TOPIC]
        self._subscriptions: List[Tuple[Callable[..., None], str]] = [
            (self.post, topic) for topic in self.topics]
        if audio_topic is not None:
            self._subscriptions.append((self.uploader.on_audio_chunk, audio_topic))
        for listener, topic in self._subscriptions:
            pub.subscribe(listener, topic)

        logger.info("VoiceNotesController initialized")

    # ------------------------------------------------------------------
    # Event queue
    # ------------------------------------------------------------------

    def post(self, event: Any) -> None:
        """Queue an event from any thread."""
        self._events.put(event)

    def process_pending(self) -> int:
        """Apply every queued event in order. Returns how many were applied."""
        applied = 0
        with self._lock:
            while True:
                try:
                    event = self._events.get_nowait()
                except queue.Empty:
                    break
                self._apply(event)
                applied += 1
        return applied

    def dispatch(self, event: Any) -> None:
        """Queue an event and apply everything pending, including it."""
        self.post(event)
        self.process_pending()

    def wait_for(self, predicate: Callable[[AppState], bool], timeout: float = 5.0,
                 poll_interval: float = 0.01) -> bool:
        """Process events until ``predicate(state)`` holds or ``timeout`` passes."""
        deadline = time.monotonic() + timeout
        while True:
            self.process_pending()
            if predicate(self.state):
                return True
            if time.monotonic() >= deadline:
                return False
            time.sleep(poll_interval)

    def _apply(self, event: Any) -> None:
        handler = self._handlers.get(type(event))
        if handler is None:
            logger.warning(f"Ignoring unknown event: {event!r}")
            return
        handler(event)

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def start_recording(self) -> bool:
        """Acquire the microphone and start a new session.

        Returns:
            False if already recording or the microphone is unavailable
        """
        with self._lock:
            if self.state.is_recording:
                logger.warning("Recording already in progress")
                return False
            self._session_counter += 1
            session_id = self._session_counter

        try:
            self.capture.start(session_id)
        except MediaAccessDeniedError as e:
            self.dispatch(RecordingFailed(session_id, e))
            return False

        self.dispatch(RecordingStarted(session_id))
        return True

    def stop_recording(self) -> bool:
        """Stop the current session and send its audio for finalization.

        Returns:
            False if nothing was recording
        """
        with self._lock:
            session = self.state.session
            if session is None or not session.is_recording:
                logger.warning("No recording in progress")
                return False

        try:
            audio = self.capture.stop()
        except InvalidStateError as e:
            logger.error(f"Capture was not recording: {e}")
            return False

        self.dispatch(RecordingStopped(session.session_id, len(audio)))
        self.uploader.finalize(session.session_id, audio,
                               sample_rate=self.capture.sample_rate,
                               channels=self.capture.channels)
        return True

    def toggle_recording(self) -> bool:
        if self.state.is_recording:
            return self.stop_recording()
        return self.start_recording()

    def _on_recording_started(self, event: RecordingStarted) -> None:
        self.state.session = RecordingSession(session_id=event.session_id)
        self.state.last_error = None
        logger.info(f"Recording session {event.session_id} started")

    def _on_recording_failed(self, event: RecordingFailed) -> None:
        self.state.last_error = event.error
        logger.error(f"Error accessing microphone: {event.error}")
        self.notifier.show(MEDIA_DENIED_MESSAGE)

    def _on_recording_stopped(self, event: RecordingStopped) -> None:
        session = self.state.session
        if session is not None and session.session_id == event.session_id:
            session.is_recording = False
        self.state.pending_finalizations += 1
        logger.info(f"Recording session {event.session_id} stopped ({event.audio_bytes} bytes)")

    def _current_session(self, session_id: int) -> Optional[RecordingSession]:
        session = self.state.session
        if session is None or session.session_id != session_id:
            return None
        return session

    def _on_audio_chunk(self, event: AudioChunkEvent) -> None:
        session = self._current_session(event.session_id)
        if session is None:
            logger.debug(f"Discarding audio chunk of stale session {event.session_id}")
            return
        if event.audio_data:
            session.audio_chunks.append(event.audio_data)

    def _on_chunk_transcribed(self, event: ChunkTranscribed) -> None:
        session = self._current_session(event.session_id)
        if session is None:
            logger.debug(f"Discarding transcript of stale session {event.session_id}")
            return
        if session.append_chunk_text(event.text):
            logger.debug(f"Running transcript now {len(session.running_transcript)} chars")

    def _on_chunk_failed(self, event: ChunkFailed) -> None:
        session = self._current_session(event.session_id)
        if session is not None:
            session.failed_chunks += 1

    def _on_final_transcript(self, event: FinalTranscriptReady) -> None:
        self.state.pending_finalizations = max(0, self.state.pending_finalizations - 1)
        note = self.note_store.create(event.text, url=self.source_url)
        logger.info(f"Session {event.session_id} finalized as note {note.id}")

    def _on_final_transcript_failed(self, event: FinalTranscriptFailed) -> None:
        self.state.pending_finalizations = max(0, self.state.pending_finalizations - 1)
        self.state.last_error = event.error
        logger.error(f"Finalization of session {event.session_id} failed: {event.error}")
        self.notifier.show(TRANSCRIPTION_FAILED_MESSAGE)

    # ------------------------------------------------------------------
    # Notes
    # ------------------------------------------------------------------

    @property
    def notes(self) -> List[Note]:
        return self.note_store.notes

    @property
    def selected_note(self) -> Optional[Note]:
        if self.state.selected_note_id is None:
            return None
        return self.note_store.get(self.state.selected_note_id)

    def open_note(self, note_id: int) -> None:
        self.dispatch(OpenNote(note_id))

    def close_note(self) -> None:
        self.dispatch(CloseNote())

    def navigate_notes(self, direction: str) -> None:
        self.dispatch(NavigateNotes(direction))

    def edit_note(self, title: Optional[str] = None, content: Optional[str] = None) -> None:
        self.dispatch(EditNote(title, content))

    def delete_note(self) -> None:
        self.dispatch(DeleteNote())

    def save_note(self) -> None:
        self.dispatch(SaveRequested())

    def _select(self, note: Note) -> None:
        self.state.selected_note_id = note.id
        self.state.edited_title = note.title
        self.state.edited_content = note.content

    def _on_open_note(self, event: OpenNote) -> None:
        note = self.note_store.get(event.note_id)
        if note is None:
            logger.warning(f"Cannot open missing note {event.note_id}")
            return
        self._select(note)

    def _on_close_note(self, event: CloseNote) -> None:
        self.state.selected_note_id = None
        self.state.edited_title = ""
        self.state.edited_content = ""

    def _on_navigate_notes(self, event: NavigateNotes) -> None:
        if event.direction not in (LEFT, RIGHT):
            logger.warning(f"Ignoring navigation in unknown direction: {event.direction!r}")
            return
        if self.selected_note is None:
            return
        self._select(self.note_store.neighbour(self.state.selected_note_id, event.direction))

    def _on_edit_note(self, event: EditNote) -> None:
        if self.state.selected_note_id is None:
            return
        if event.title is not None:
            self.state.edited_title = event.title
        if event.content is not None:
            self.state.edited_content = event.content

    def _on_delete_note(self, event: DeleteNote) -> None:
        note_id = self.state.selected_note_id
        if note_id is None:
            return
        self.note_store.delete(note_id)
        self._on_close_note(CloseNote())

    def _on_save_requested(self, event: SaveRequested) -> None:
        note = self.selected_note
        if note is None or self.state.is_saving:
            return

        updated = replace(note, title=self.state.edited_title, content=self.state.edited_content)
        self.state.is_saving = True
        self._save_executor.submit(self._run_save, updated)

    def _run_save(self, note: Note) -> None:
        """Runs on the save thread; reports back through the event queue."""
        try:
            saved = asyncio.run(self.repository.save(note))
        except Exception as e:
            logger.error(f"Error saving note: {e}", exc_info=True)
            self.post(NoteSaveFailed(note.id, e))
            return
        self.post(NoteSaved(saved))

    def _on_note_saved(self, event: NoteSaved) -> None:
        self.state.is_saving = False
        note = event.note
        if note.id not in self.note_store:
            # Deleted while the save was in flight; it stays deleted
            logger.info(f"Note {note.id} was deleted before its save completed")
            return
        self.note_store.update(note.id, note.title, note.content)
        self.notifier.show(SAVE_SUCCESS_MESSAGE)

    def _on_note_save_failed(self, event: NoteSaveFailed) -> None:
        self.state.is_saving = False
        self.state.last_error = event.error
        self.notifier.show(SAVE_FAILURE_MESSAGE)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def shutdown(self) -> None:
        """Stop recording, drain uploads and saves, and unsubscribe."""
        if self.capture.is_recording:
            self.capture.stop()
        for listener, topic in self._subscriptions:
            pub.unsubscribe(listener, topic)
        self.uploader.shutdown()
        self._save_executor.shutdown(wait=True)
        self.process_pending()
        logger.info("VoiceNotesController shut down")


def create_controller(config: VoiceNotesConfig) -> VoiceNotesController:
    """Wire capture, uploader and controller together from configuration."""
    audio_publisher = AudioPublisher(AUDIO_CHUNK_TOPIC)
    capture = CaptureController(
        callback=audio_publisher.publish_audio_event,
        sample_rate=config.get('audio.sample_rate'),
        chunk_size=config.get('audio.chunk_size'),
        channels=config.get('audio.channels'),
        chunk_interval_seconds=config.get('audio.chunk_interval_seconds'),
    )

    server_url = config.get_server_url()
    uploader = ChunkUploader(
        client=TranscriptionClient(server_url),
        realtime_callback=TranscriptionPublisher(REALTIME_TOPIC).get_callback(),
        final_callback=TranscriptionPublisher(FINAL_TOPIC).get_callback(),
        max_concurrent_uploads=config.get('upload.max_concurrent_uploads'),
    )
    return VoiceNotesController(
        capture=capture,
        uploader=uploader,
        repository=InMemoryNoteRepository(config.get('notes.save_delay_seconds')),
        notifier=ToastNotifier(config.get('ui.toast_seconds')),
        source_url=server_url,
        audio_topic=AUDIO_CHUNK_TOPIC,
    )
