"""Assemble the outbound Matomo tracking request.

Two transport shapes are supported: a GET with the parameters in the
query string (the ambient client headers are forwarded by the host) and
a POST with a form-encoded body and fixed headers.
"""

from urllib.parse import urlencode

from src.collector.schemas import Event, HttpMethod, OutboundRequest
from src.matomo.settings import Settings, Transport

TRACKER_PATH = "/matomo.php"
DEFAULT_USER_AGENT = "matomo-collector/0.1.0"


def tracking_params(params: dict[str, str], event: Event, settings: Settings) -> dict[str, str]:
    """Add the fixed tracking API parameters to the mapped ones."""
    out = {
        "idsite": settings.site_id,
        "rec": "1",
        "apiv": "1",
        "rand": str(event.timestamp_millis),
    }
    out.update(params)
    if settings.token_auth:
        out["token_auth"] = settings.token_auth
    return out


def tracker_url(settings: Settings) -> str:
    return settings.endpoint_url.rstrip("/") + TRACKER_PATH


def build_request(params: dict[str, str], event: Event, settings: Settings) -> OutboundRequest:
    encoded = urlencode(tracking_params(params, event, settings))

    if settings.transport is Transport.FORM:
        user_agent = event.context.client.user_agent.strip() or DEFAULT_USER_AGENT
        return OutboundRequest(
            method=HttpMethod.POST,
            url=tracker_url(settings),
            headers=[
                ("User-Agent", user_agent),
                ("Accept", "*/*"),
                ("Content-Type", "application/x-www-form-urlencoded"),
            ],
            forward_client_headers=False,
            body=encoded,
        )

    return OutboundRequest(
        method=HttpMethod.GET,
        url=f"{tracker_url(settings)}?{encoded}",
        headers=[],
        forward_client_headers=True,
        body="",
    )
