"""Map event payloads and context onto Matomo tracking API parameters.

Each ``map_*`` function writes first-class parameters into ``params`` and
secondary values into ``cvars`` (the custom-variable bag encoded later
by :mod:`src.matomo.cvar`). Empty or whitespace-only values are never
written to ``params``.
"""

import json
import logging
import math
import re

from src.collector.schemas import (
    Campaign,
    Client,
    PageData,
    Properties,
    Session,
    TrackData,
    UserData,
)

logger = logging.getLogger(__name__)

Params = dict[str, str]

# Track properties promoted to Matomo event fields
_TRACK_FIELDS = {"category": "e_c", "label": "e_n", "value": "e_v"}

CID_LENGTH = 16

# Plain decimal forms only: no underscores, no surrounding whitespace
_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")
_I32_MIN, _I32_MAX = -(2**31), 2**31 - 1


def insert_if_nonempty(params: Params, key: str, value: str) -> None:
    if value.strip():
        params[key] = value


def prefixed(prefix: str, key: str) -> str:
    """Overflow key for a custom property; keys already carrying the prefix are kept as is."""
    return key if key.startswith(prefix) else prefix + key


def map_page(params: Params, page: PageData, cvars: Params) -> None:
    insert_if_nonempty(params, "action_name", page.title)
    insert_if_nonempty(params, "url", page.url)
    insert_if_nonempty(params, "urlref", page.referrer)
    insert_if_nonempty(params, "search", page.search)
    insert_if_nonempty(params, "e_n", page.name)
    insert_if_nonempty(params, "e_v", page.path)
    insert_if_nonempty(params, "e_c", page.category)

    for key, value in page.properties:
        cvars[prefixed("page_", key)] = value

    if page.keywords:
        cvars["page_keywords"] = ",".join(page.keywords)


def map_track(params: Params, track: TrackData, cvars: Params) -> None:
    insert_if_nonempty(params, "e_a", track.name)
    params["e_c"] = "track"

    for key, value in track.properties:
        field = _TRACK_FIELDS.get(key)
        if field:
            insert_if_nonempty(params, field, value)
        else:
            cvars[prefixed("track_", key)] = value

    if track.products:
        items = [_product_item(p) for p in track.products]
        params["ec_items"] = json.dumps(items, separators=(",", ":"), ensure_ascii=False)


def _product_item(product: Properties) -> list:
    """Reduce a product to Matomo's [sku, name, category, price, quantity]."""
    fields = dict(product)

    price = _parse_price(fields.get("price", ""))
    if price is None:
        logger.debug("product %r: unparsable price, using 0.0", fields.get("sku"))
        price = 0.0

    quantity = _parse_quantity(fields.get("quantity", ""))
    if quantity is None:
        logger.debug("product %r: unparsable quantity, using 1", fields.get("sku"))
        quantity = 1

    return [
        fields.get("sku", ""),
        fields.get("name", ""),
        fields.get("category", ""),
        price,
        quantity,
    ]


def _parse_price(raw: str) -> float | None:
    if not _FLOAT_RE.fullmatch(raw):
        return None
    price = float(raw)
    return price if math.isfinite(price) else None


def _parse_quantity(raw: str) -> int | None:
    if not _INT_RE.fullmatch(raw):
        return None
    quantity = int(raw)
    return quantity if _I32_MIN <= quantity <= _I32_MAX else None


def anonymous_cid(anonymous_id: str) -> str:
    """Visitor id derived from the anonymous id: hex of its bytes, first 16 chars."""
    return anonymous_id.encode("utf-8").hex()[:CID_LENGTH]


def map_user(params: Params, user: UserData, cvars: Params) -> None:
    if user.user_id.strip():
        params["uid"] = user.user_id
    else:
        # Matomo needs some visitor identity when there is no user id
        insert_if_nonempty(params, "cid", anonymous_cid(user.anonymous_id))

    for key, value in user.properties:
        cvars[prefixed("user_", key)] = value


def map_client(params: Params, client: Client, cvars: Params, include_location: bool) -> None:
    insert_if_nonempty(params, "ua", client.user_agent)
    insert_if_nonempty(params, "lang", client.locale)
    insert_if_nonempty(params, "timezone", client.timezone)
    insert_if_nonempty(params, "res", f"{client.screen_width}x{client.screen_height}")
    insert_if_nonempty(params, "os", client.os_name)
    insert_if_nonempty(params, "os_version", client.os_version)

    if client.user_agent_model.strip():
        cvars["client_model"] = client.user_agent_model

    country = client.country_code.lower()
    if include_location:
        insert_if_nonempty(params, "country", country)
        insert_if_nonempty(params, "region", client.region)
        insert_if_nonempty(params, "city", client.city)
    else:
        cvars["client_country"] = country
        cvars["client_region"] = client.region
        cvars["client_city"] = client.city


def map_session(params: Params, session: Session, cvars: Params) -> None:
    if session.session_start:
        params["new_visit"] = "1"
    params["session_count"] = str(session.session_count)
    cvars["session_first_seen"] = str(session.first_seen)
    cvars["session_last_seen"] = str(session.last_seen)


def map_campaign(params: Params, campaign: Campaign) -> None:
    insert_if_nonempty(params, "_rcn", campaign.name)
    insert_if_nonempty(params, "_rck", campaign.term)
