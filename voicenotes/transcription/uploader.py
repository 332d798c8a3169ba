"""Chunk uploader: sends captured audio to the transcription proxy."""

import time
import asyncio
import logging
import threading
import queue
from typing import Any, Callable, NamedTuple, Optional

from ..audio.wav import pcm_to_wav
from ..exceptions import VoiceNotesError
from ..models.events import (
    AudioChunkEvent,
    ChunkTranscribed,
    ChunkFailed,
    FinalTranscriptReady,
    FinalTranscriptFailed,
)
from .client import TranscriptionClient

logger = logging.getLogger(__name__)

REALTIME = "realtime"
FINAL = "final"


class UploadTask(NamedTuple):
    """A request to be sent by a worker thread."""
    mode: str  # REALTIME or FINAL
    session_id: int
    sequence_number: int
    audio: bytes  # WAV


class ChunkUploader:
    """Manages a pool of worker threads that upload audio concurrently.

    Realtime chunks are independent: results are reported in completion
    order, and a failed chunk is reported as ChunkFailed and otherwise
    dropped. Nothing is retried.
    """

    def __init__(self,
                 client: TranscriptionClient,
                 realtime_callback: Optional[Callable[[Any], None]] = None,
                 final_callback: Optional[Callable[[Any], None]] = None,
                 max_concurrent_uploads: int = 4):
        self.client = client
        self.realtime_callback = realtime_callback
        self.final_callback = final_callback
        self.max_concurrent_uploads = max_concurrent_uploads

        self.task_queue: "queue.Queue[Optional[UploadTask]]" = queue.Queue()
        self.worker_threads = []
        self.shutdown_event = threading.Event()

        self._start_workers()

    def _start_workers(self):
        """Create and start the pool of worker threads."""
        for i in range(self.max_concurrent_uploads):
            thread = threading.Thread(target=self._worker_loop)
            thread.name = f"upload_worker_{i}"
            thread.daemon = True
            thread.start()
            self.worker_threads.append(thread)
        logger.info(f"Started {len(self.worker_threads)} upload workers")

    def _worker_loop(self):
        """The main loop for each worker thread. Owns one asyncio loop."""
        thread_name = threading.current_thread().name
        logger.debug(f"Worker thread {thread_name} starting")

        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)

        try:
            while True:
                task = self.task_queue.get()

                if task is None:
                    logger.debug(f"Worker {thread_name} received sentinel, exiting.")
                    self.task_queue.task_done()
                    break

                try:
                    loop.run_until_complete(self._upload(task))
                except Exception as e:
                    logger.error(f"Unhandled exception in upload task for {thread_name}: {e}", exc_info=True)
                finally:
                    self.task_queue.task_done()
        finally:
            loop.close()
            logger.debug(f"Worker thread {thread_name} exiting and closing its event loop.")

    def on_audio_chunk(self, event: AudioChunkEvent) -> None:
        """Queue an incremental chunk for realtime transcription."""
        if self.shutdown_event.is_set():
            return
        if not event.audio_data:
            logger.warning("Skipping upload of empty audio chunk")
            return

        audio = pcm_to_wav(event.audio_data, event.sample_rate, event.channels)
        self.task_queue.put(UploadTask(REALTIME, event.session_id, event.sequence_number, audio))

    def finalize(self, session_id: int, pcm_audio: bytes, sample_rate: int = 16000,
                 channels: int = 1) -> None:
        """Queue the complete session audio for final transcription."""
        audio = pcm_to_wav(pcm_audio, sample_rate, channels)
        logger.info(f"Queueing final transcription for session {session_id} ({len(audio)} bytes)")
        self.task_queue.put(UploadTask(FINAL, session_id, 0, audio))

    async def _upload(self, task: UploadTask) -> None:
        if task.mode == FINAL:
            try:
                text = await self.client.transcribe_session(task.audio)
            except VoiceNotesError as e:
                logger.error(f"Error sending audio to server: {e}")
                self._report(self.final_callback, FinalTranscriptFailed(task.session_id, e))
                return
            logger.info(f"Final transcript for session {task.session_id}: {len(text)} chars")
            self._report(self.final_callback, FinalTranscriptReady(task.session_id, text))
            return

        try:
            text = await self.client.transcribe_chunk(task.audio)
        except VoiceNotesError as e:
            logger.warning(f"Dropping chunk {task.session_id}.{task.sequence_number}: {e}")
            self._report(self.realtime_callback, ChunkFailed(task.session_id, task.sequence_number, e))
            return
        logger.debug(f"Chunk {task.session_id}.{task.sequence_number}: '{text}'")
        self._report(self.realtime_callback, ChunkTranscribed(task.session_id, task.sequence_number, text))

    @staticmethod
    def _report(callback: Optional[Callable[[Any], None]], event: Any) -> None:
        if callback:
            callback(event)

    def shutdown(self, timeout: float = 30.0) -> bool:
        """Stop accepting chunks, let queued uploads finish and stop the workers.

        Returns:
            True if the queue drained before ``timeout``
        """
        logger.info("Shutting down chunk uploader...")
        self.shutdown_event.set()

        drained = True
        start_time = time.time()
        while self.task_queue.unfinished_tasks > 0:
            if time.time() - start_time >= timeout:
                logger.warning(f"Timeout reached while waiting for uploads. "
                               f"{self.task_queue.unfinished_tasks} tasks remain.")
                drained = False
                break
            time.sleep(0.05)

        for _ in self.worker_threads:
            self.task_queue.put(None)

        for thread in self.worker_threads:
            thread.join(2.0)
            if thread.is_alive():
                logger.warning(f"Worker thread {thread.name} did not terminate cleanly.")

        logger.info("Chunk uploader shutdown complete.")
        return drained

    def get_pending_task_count(self) -> int:
        """Get the number of queued uploads."""
        return self.task_queue.qsize()
