"""Transcription publisher module for pub/sub event publishing."""

import logging
from typing import Any, Callable
from pubsub import pub

logger = logging.getLogger(__name__)

REALTIME_TOPIC = "transcription.realtime"
FINAL_TOPIC = "transcription.final"


class TranscriptionPublisher:
    """Publishes upload outcomes using pubsub.pub."""

    def __init__(self, topic: str):
        """Initialize transcription publisher.

        Args:
            topic: Pub/sub topic name for transcription outcomes
        """
        self.topic = topic
        logger.info(f"TranscriptionPublisher initialized with topic: {topic}")

    def publish(self, event: Any) -> None:
        """Publish a transcription outcome event to the pub/sub topic."""
        pub.sendMessage(self.topic, event=event)
        logger.debug(f"Published {type(event).__name__} on {self.topic}")

    def get_callback(self) -> Callable[[Any], None]:
        """Get callback function for ChunkUploader to use."""
        return self.publish
