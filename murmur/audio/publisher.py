"""Pub/sub publisher for pipeline events (download progress, recording state)."""

import logging
from typing import Any

from pubsub import pub

logger = logging.getLogger(__name__)

DOWNLOAD_PROGRESS_TOPIC = "models.download_progress"
RECORDING_STATE_TOPIC = "recording.state"


class EventPublisher:
    """Publishes events on a pypubsub topic."""

    def __init__(self, topic: str):
        """Initialize publisher.

        Args:
            topic: Pub/sub topic name
        """
        self.topic = topic
        logger.info(f"EventPublisher initialized with topic: {topic}")

    def publish(self, event: Any) -> None:
        """Send one event to every subscriber of the topic."""
        pub.sendMessage(self.topic, event=event)
