"""Audio publisher module for pub/sub event publishing."""

import logging
from pubsub import pub
from ..models.events import AudioChunkEvent

logger = logging.getLogger(__name__)

AUDIO_CHUNK_TOPIC = "audio.chunk"


class AudioPublisher:
    """Publishes captured audio chunks using pubsub.pub."""

    def __init__(self, topic: str = AUDIO_CHUNK_TOPIC):
        """Initialize audio publisher.

        Args:
            topic: Pub/sub topic name for audio chunk events
        """
        self.topic = topic
        logger.info(f"AudioPublisher initialized with topic: {topic}")

    def publish_audio_event(self, audio_event: AudioChunkEvent) -> None:
        """Publish an audio chunk to the pub/sub topic.

        Args:
            audio_event: AudioChunkEvent to publish
        """
        pub.sendMessage(self.topic, event=audio_event)
        logger.debug(f"Published audio chunk {audio_event.session_id}.{audio_event.sequence_number} "
                     f"({len(audio_event.audio_data)} bytes, final={audio_event.final})")
