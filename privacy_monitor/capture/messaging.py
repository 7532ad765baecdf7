"""Delivery of captured events to the aggregation side.

A page can be torn down while an event is in flight.  The sink
signals that with :class:`RecipientGoneError`, which is dropped
here; anything else is a bug and propagates.  Sinks are plain
callables: a coroutine function passed as a sink is rejected rather
than left unawaited.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable

from privacy_monitor.models import events
from privacy_monitor.utils import errors, logger

log = logger.create_logger("Messaging")

EventSink = Callable[[events.RawEvent], None]


def safely_send(sink: EventSink, event: events.RawEvent) -> bool:
    """Hand *event* to *sink*.  Returns False if the recipient is gone."""
    try:
        result = sink(event)
        if inspect.isawaitable(result):
            if inspect.iscoroutine(result):
                result.close()
            raise TypeError("Event sinks must be synchronous; use PrivacyMonitor.submit")
    except errors.RecipientGoneError as exc:
        log.debug(
            "Recipient gone, event dropped",
            {"kind": event.kind.value, "tabId": event.tab_id, "reason": errors.get_error_message(exc)},
        )
        return False
    except Exception as exc:
        log.error(
            "Event sink failed",
            {"kind": event.kind.value, "tabId": event.tab_id, "error": errors.get_error_message(exc)},
        )
        raise
    return True
