"""Event schema definitions for the Matomo collector.

Every event carries one typed payload (page, track or user) plus the
shared client/session/campaign context. The payload is a tagged union
discriminated on ``kind``.
"""

from collections.abc import Mapping
from enum import Enum
from typing import Annotated, Literal, Union
from uuid import uuid4

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


def _as_pairs(v):
    if isinstance(v, Mapping):
        return [(str(k), str(val)) for k, val in v.items()]
    return v


# Ordered key/value pairs. A JSON object is accepted and kept in its order.
Properties = Annotated[list[tuple[str, str]], BeforeValidator(_as_pairs)]


class EventType(str, Enum):
    PAGE = "page"
    TRACK = "track"
    USER = "user"


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class PageData(_Frozen):
    kind: Literal["page"] = "page"
    title: str = ""
    url: str = ""
    referrer: str = ""
    search: str = ""
    name: str = ""
    path: str = ""
    category: str = ""
    properties: Properties = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)


class TrackData(_Frozen):
    """Custom event.

    ``category``, ``label`` and ``value`` properties are promoted to the
    Matomo event fields; products are expected to carry sku, name,
    category, price and quantity.
    """

    kind: Literal["track"] = "track"
    name: str = ""
    properties: Properties = Field(default_factory=list)
    products: list[Properties] = Field(default_factory=list)


class UserData(_Frozen):
    kind: Literal["user"] = "user"
    user_id: str = ""
    anonymous_id: str = ""
    properties: Properties = Field(default_factory=list)


class Client(_Frozen):
    user_agent: str = ""
    locale: str = ""
    timezone: str = ""
    screen_width: int = 0
    screen_height: int = 0
    os_name: str = ""
    os_version: str = ""
    user_agent_model: str = ""
    country_code: str = ""
    region: str = ""
    city: str = ""


class Session(_Frozen):
    session_start: bool = False
    session_count: int = 0
    first_seen: int = 0
    last_seen: int = 0


class Campaign(_Frozen):
    name: str = ""
    term: str = ""


class Context(_Frozen):
    client: Client = Field(default_factory=Client)
    session: Session = Field(default_factory=Session)
    campaign: Campaign = Field(default_factory=Campaign)


EventData = Annotated[Union[PageData, TrackData, UserData], Field(discriminator="kind")]


class Event(_Frozen):
    """Core event envelope, consumed once per outbound request."""

    uuid: str = Field(default_factory=lambda: uuid4().hex)
    timestamp_millis: int = 0
    data: EventData
    context: Context = Field(default_factory=Context)

    @property
    def event_type(self) -> EventType:
        return EventType(self.data.kind)


class OutboundRequest(_Frozen):
    """Request descriptor handed to the host's HTTP transport."""

    method: HttpMethod
    url: str
    headers: list[tuple[str, str]] = Field(default_factory=list)
    forward_client_headers: bool = False
    body: str = ""


class CollectRequest(BaseModel):
    """Body accepted by the collector endpoints."""

    event: Event
    settings: dict[str, str] = Field(default_factory=dict)
