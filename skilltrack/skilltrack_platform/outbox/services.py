"""Outbox staging, dispatch and retry bookkeeping."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from sqlalchemy import or_

from skilltrack.core.events.event_bus import EventBus, event_bus
from skilltrack.core.events.event_models import EventRecord
from skilltrack.extensions import db
from skilltrack.skilltrack_platform.outbox.models import OutboxMessage

logger = logging.getLogger(__name__)

STATUS_PENDING = "pending"
STATUS_SENDING = "sending"
STATUS_SENT = "sent"
STATUS_RETRY = "retry"
STATUS_DEAD = "dead"

MAX_DISPATCH_ATTEMPTS = 5
DEFAULT_RETRY_IN = timedelta(minutes=5)


class EventBusAdapter:
    """Publish outbox messages to the in-process bus and keep an event log row."""

    def __init__(self, bus: Optional[EventBus] = None) -> None:
        self.bus = bus or event_bus

    def dispatch(self, message: OutboxMessage) -> EventRecord:
        payload = dict(message.payload or {})
        payload.setdefault("external_id", f"{message.event_type}:{message.id}")
        payload.setdefault("event_id", message.id)

        event = EventRecord(
            event_type=message.event_type,
            payload=payload,
            user_id=message.user_id,
            created_at=message.created_at,
        )
        self.bus.publish(event)
        db.session.add(event)
        return event


def enqueue(
    event_name: str,
    payload: dict,
    user_id: Optional[int],
    available_at: Optional[datetime] = None,
) -> OutboxMessage:
    """
    Stage an event in the outbox. Caller should commit alongside domain changes.
    """
    message = OutboxMessage(
        event_type=event_name,
        payload=payload or {},
        user_id=user_id,
        available_at=available_at or datetime.utcnow(),
        status=STATUS_PENDING,
        attempts=0,
    )
    db.session.add(message)
    return message


def dequeue_batch(limit: int = 50) -> List[OutboxMessage]:
    """Lock and return ready messages, marking them as sending."""
    now = datetime.utcnow()
    ready = (
        OutboxMessage.query.filter(
            OutboxMessage.available_at <= now,
            or_(
                OutboxMessage.status == STATUS_PENDING,
                OutboxMessage.status == STATUS_RETRY,
            ),
        )
        .order_by(OutboxMessage.available_at, OutboxMessage.id)
        .with_for_update(skip_locked=True)
        .limit(limit)
        .all()
    )

    for message in ready:
        message.status = STATUS_SENDING
        message.attempts += 1
    db.session.commit()
    return ready


def mark_sent(ids: Sequence[int]) -> int:
    if not ids:
        return 0
    updated = OutboxMessage.query.filter(
        OutboxMessage.id.in_(list(ids)),
        OutboxMessage.status == STATUS_SENDING,
    ).update(
        {"status": STATUS_SENT, "last_error": None},
        synchronize_session=False,
    )
    db.session.commit()
    return updated


def mark_failed(
    message_id: int,
    err: Exception | str,
    retry_in: timedelta = DEFAULT_RETRY_IN,
) -> Optional[OutboxMessage]:
    message = (
        OutboxMessage.query.filter(
            OutboxMessage.id == message_id,
            OutboxMessage.status == STATUS_SENDING,
        )
        .with_for_update()
        .one_or_none()
    )
    if not message:
        return None

    message.last_error = str(err)
    message.available_at = datetime.utcnow() + retry_in
    if message.attempts >= MAX_DISPATCH_ATTEMPTS:
        message.status = STATUS_DEAD
        logger.error("Outbox message %s is dead after %d attempts: %s", message.id, message.attempts, err)
    else:
        message.status = STATUS_RETRY
        logger.warning("Outbox message %s failed (attempt %d): %s", message.id, message.attempts, err)
    db.session.commit()
    return message


def dispatch_ready(
    limit: int = 50,
    retry_in: timedelta = DEFAULT_RETRY_IN,
    bus_adapter: Optional[EventBusAdapter] = None,
) -> List[int]:
    """Publish every ready message; failures are rescheduled, successes marked sent."""
    adapter = bus_adapter or EventBusAdapter()
    messages = dequeue_batch(limit=limit)
    sent_ids: List[int] = []

    for message in messages:
        try:
            adapter.dispatch(message)
            db.session.commit()
            sent_ids.append(message.id)
        except Exception as err:
            db.session.rollback()
            mark_failed(message.id, err, retry_in=retry_in)

    if sent_ids:
        mark_sent(sent_ids)

    return sent_ids
