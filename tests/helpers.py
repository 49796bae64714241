"""Event builders shared by the transform tests."""

from urllib.parse import parse_qs, urlsplit

from src.collector.schemas import Campaign, Client, Context, Event, Session


def full_context(**client_overrides) -> Context:
    client = {
        "user_agent": "Mozilla/5.0 (X11; Linux x86_64)",
        "locale": "en-US",
        "timezone": "Europe/Paris",
        "screen_width": 1920,
        "screen_height": 1080,
        "os_name": "Linux",
        "os_version": "6.1",
        "user_agent_model": "",
        "country_code": "FR",
        "region": "Ile-de-France",
        "city": "Paris",
        **client_overrides,
    }
    return Context(
        client=Client(**client),
        session=Session(session_start=True, session_count=3, first_seen=1700000000, last_seen=1700000500),
        campaign=Campaign(name="spring_sale", term="shoes"),
    )


def make_event(data, context: Context | None = None) -> Event:
    return Event(
        timestamp_millis=1733400000123,
        data=data,
        context=context if context is not None else full_context(),
    )


def query_params(url: str) -> dict[str, list[str]]:
    return parse_qs(urlsplit(url).query, keep_blank_values=True)
