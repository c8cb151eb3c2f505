from .entity_base import EntityBase
from .learning_event import LearningEventEntity

__all__ = ["EntityBase", "LearningEventEntity"]
