"""Transactional outbox models and helpers."""

from skilltrack.skilltrack_platform.outbox.models import OutboxMessage
from skilltrack.skilltrack_platform.outbox.services import (
    EventBusAdapter,
    dequeue_batch,
    dispatch_ready,
    enqueue,
    mark_failed,
    mark_sent,
)

__all__ = [
    "OutboxMessage",
    "enqueue",
    "dequeue_batch",
    "dispatch_ready",
    "mark_sent",
    "mark_failed",
    "EventBusAdapter",
]
