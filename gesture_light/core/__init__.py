"""Pipeline orchestration and event bus."""
from .events import EventBus, Events

__all__ = ["EventBus", "Events"]
