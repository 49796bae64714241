"""Entry points: one per event kind.

Each entry point validates the settings, checks that the event carries
the payload it expects, maps payload and context into tracking
parameters and assembles the outbound request. Nothing is kept between
calls.
"""

import logging
from collections.abc import Mapping

from src.collector.schemas import Event, EventType, OutboundRequest
from src.matomo.cvar import CVAR_KEY, to_cvar
from src.matomo.errors import EventKindMismatch
from src.matomo.fields import (
    map_campaign,
    map_client,
    map_page,
    map_session,
    map_track,
    map_user,
)
from src.matomo.request import build_request
from src.matomo.settings import Settings

logger = logging.getLogger(__name__)

_PAYLOAD_MAPPERS = {
    EventType.PAGE: map_page,
    EventType.TRACK: map_track,
    EventType.USER: map_user,
}


def build(event: Event, settings: Settings) -> OutboundRequest:
    """Turn any event into a request, dispatching on its payload kind."""
    params: dict[str, str] = {}
    cvars: dict[str, str] = {}

    _PAYLOAD_MAPPERS[event.event_type](params, event.data, cvars)

    ctx = event.context
    map_client(params, ctx.client, cvars, settings.include_location)
    map_session(params, ctx.session, cvars)
    map_campaign(params, ctx.campaign)

    cvar = to_cvar(cvars)
    if cvar is not None:
        params[CVAR_KEY] = cvar

    request = build_request(params, event, settings)
    logger.debug("built %s %s request for event %s", request.method.value, event.event_type.value, event.uuid)
    return request


def _handle(expected: EventType, event: Event, settings: Mapping[str, str]) -> OutboundRequest:
    if event.event_type is not expected:
        raise EventKindMismatch(expected.value, event.event_type.value)
    return build(event, Settings.from_dict(settings))


def page(event: Event, settings: Mapping[str, str]) -> OutboundRequest:
    return _handle(EventType.PAGE, event, settings)


def track(event: Event, settings: Mapping[str, str]) -> OutboundRequest:
    return _handle(EventType.TRACK, event, settings)


def user(event: Event, settings: Mapping[str, str]) -> OutboundRequest:
    return _handle(EventType.USER, event, settings)


HANDLERS = {
    EventType.PAGE: page,
    EventType.TRACK: track,
    EventType.USER: user,
}
