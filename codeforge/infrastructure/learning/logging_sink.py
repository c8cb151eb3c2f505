import json
import logging

from codeforge.application.interfaces.ilearning_sink import ILearningSink
from codeforge.domain.models import LearningEvent

logger = logging.getLogger(__name__)


class LoggingLearningSink(ILearningSink):
    """Writes each learning event to the log as one JSON line."""

    def __init__(self, level: int = logging.INFO):
        self.level = level

    def record(self, event: LearningEvent) -> None:
        payload = {
            "prompt": event.prompt,
            "success": event.success,
            "recorded_at": event.recorded_at.isoformat(),
            "outcome": dict(event.outcome),
        }
        logger.log(self.level, f"learning_event {json.dumps(payload, default=str)}")
