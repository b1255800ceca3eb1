"""Starlette application serving the ICS feed."""

from __future__ import annotations

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Route

from .events import EventRepository
from .ics_feed import ICSFeedHandler
from .storage import Store


def create_app(store: Store) -> Starlette:
    """Create the ASGI app for ``store``."""
    handler = ICSFeedHandler(EventRepository(store))

    async def feed(request: Request) -> Response:
        return await handler.handle_feed_request(request)

    return Starlette(routes=[Route("/feed.ics", feed, methods=["GET"])])
