"""Asynchronous tasks of the core module."""

import structlog
from celery import shared_task
from django.conf import settings
from django.db import transaction

from modules.core.models import EventStatus, OutboxEvent
from shared.infrastructure.bus import event_bus

logger = structlog.get_logger(__name__)

OUTBOX_PUBLISH_BATCH_SIZE: int = settings.OUTBOX_PUBLISH_BATCH_SIZE


@shared_task(name="core.publish_outbox_events")
def publish_outbox_events(batch_size: int = OUTBOX_PUBLISH_BATCH_SIZE) -> dict:
    """Drain pending outbox rows into the in-process event bus.

    Rows are processed oldest first.  The batch is claimed with
    ``SELECT ... FOR UPDATE SKIP LOCKED`` and held until the run commits,
    so overlapping runs never publish the same row.  A row whose event type
    has no subscriber, or whose handler raises, is marked ``FAILED`` and
    the batch carries on with the next row.
    """
    published = failed = 0

    with transaction.atomic():
        pending = list(
            OutboxEvent.objects.select_for_update(skip_locked=True)
            .filter(status=EventStatus.PENDING)
            .order_by("created_at")[:batch_size]
        )

        for outbox_event in pending:
            log = logger.bind(
                outbox_event_id=str(outbox_event.id),
                event_type=outbox_event.event_type,
                aggregate_id=outbox_event.aggregate_id,
            )
            event_class = event_bus.event_class_for(outbox_event.event_type)
            if event_class is None:
                outbox_event.mark_as_failed(f"No handler for {outbox_event.event_type}")
                log.warning("outbox.unknown_event_type")
                failed += 1
                continue
            try:
                event_bus.publish(event_class.from_payload(outbox_event.payload))
            except Exception as exc:
                outbox_event.mark_as_failed(str(exc))
                log.exception("outbox.publish_failed")
                failed += 1
                continue
            outbox_event.mark_as_published()
            published += 1

    logger.info("outbox.batch_processed", published=published, failed=failed)
    return {"published": published, "failed": failed}
