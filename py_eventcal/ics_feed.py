"""ICS feed endpoint for calendar subscriptions.

Provides read-only HTTP access to a user's events via .ics URL:
    GET /feed.ics?user=UID

Recurring series are already materialized, so every instance is exported as
its own VEVENT; members of a series carry the series id in RELATED-TO.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from icalendar import Calendar as iCalendar
from icalendar import Event as iEvent
from starlette.requests import Request
from starlette.responses import Response

from .events import Event, EventRepository
from .internal import CalendarError

logger = logging.getLogger(__name__)


def event_to_vevent(event: Event) -> iEvent:
    """Convert an event instance to a VEVENT component."""
    vevent = iEvent()
    vevent.add("uid", event.id or "")
    vevent.add("summary", event.title)
    vevent.add("dtstart", event.start_date.astimezone(UTC))
    vevent.add("dtend", event.end_date.astimezone(UTC))
    if event.description:
        vevent.add("description", event.description)
    vevent.add("class", "PRIVATE" if event.private else "PUBLIC")
    if event.series_id:
        vevent.add("related-to", event.series_id)
    vevent.add("dtstamp", datetime.now(UTC))
    return vevent


def events_to_ical(events: list[Event], user_id: str) -> str:
    """Build a single VCALENDAR holding one VEVENT per event."""
    cal = iCalendar()
    cal.add("prodid", "-//py-eventcal ICS Feed//")
    cal.add("version", "2.0")
    cal.add("calscale", "GREGORIAN")
    cal.add("method", "PUBLISH")
    cal.add("x-wr-calname", f"Events - {user_id}")

    for event in events:
        cal.add_component(event_to_vevent(event))

    return cal.to_ical().decode("utf-8")


class ICSFeedHandler:
    """Handler for the ICS feed endpoint."""

    def __init__(self, repository: EventRepository) -> None:
        self.repository = repository

    async def handle_feed_request(self, request: Request) -> Response:
        """Handle GET /feed.ics?user=UID.

        Returns:
            text/calendar response with the user's events, 400 when the
            ``user`` parameter is missing, or the error's status code when the
            store fails
        """
        user_id = request.query_params.get("user")
        if not user_id:
            return Response(
                content="Missing required 'user' parameter. Usage: /feed.ics?user=UID",
                status_code=400,
                media_type="text/plain",
            )

        try:
            events = await self.repository.query_by_participant(user_id)
        except CalendarError as e:
            logger.error("Error generating feed for %s: %s", user_id, e)
            return Response(
                content=f"Error generating calendar feed: {e}",
                status_code=e.code if e.code >= 500 else 500,
                media_type="text/plain",
            )

        events.sort(key=lambda e: e.start_date)
        logger.debug("Feed for %s: %d events", user_id, len(events))

        return Response(
            content=events_to_ical(events, user_id),
            media_type="text/calendar; charset=utf-8",
            headers={
                "Content-Disposition": f'inline; filename="calendar-{user_id}.ics"',
                "Cache-Control": "private, max-age=300",
            },
        )
