"""CLI entrypoint: build the Matomo request for an event file.

Reads one event as JSON, builds the tracking request with the given
settings and prints the request descriptor as JSON.

Usage:
    python -m src.collector.run event.json --site-id 5 --endpoint https://matomo.example.com
    python -m src.collector.run event.json --settings settings.json --transport form
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from src.collector.schemas import Event, OutboundRequest
from src.matomo import component
from src.matomo.errors import ConfigurationError, TransformError
from src.matomo.settings import env_defaults


def read_settings_file(path: str) -> dict[str, str]:
    """Settings mapping from a JSON object; null entries count as unset."""
    raw = json.loads(Path(path).read_text())
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{path}: settings file must hold a JSON object")

    settings = {}
    for key, value in raw.items():
        if value is None:
            continue
        if isinstance(value, (dict, list)):
            raise ConfigurationError(f"{path}: setting {key!r} must be a string or number")
        settings[key] = str(value)
    return settings


def load_settings(opts: argparse.Namespace) -> dict[str, str]:
    """Merge settings: environment, then settings file, then flags."""
    settings = env_defaults()
    if opts.settings:
        settings.update(read_settings_file(opts.settings))
    flags = {
        "site_id": opts.site_id,
        "endpoint_url": opts.endpoint,
        "authentication_token": opts.token,
        "transport": opts.transport,
    }
    settings.update({k: v for k, v in flags.items() if v is not None})
    return settings


def build_from_file(event_path: str, settings: dict[str, str]) -> OutboundRequest:
    event = Event.model_validate_json(Path(event_path).read_text())
    handler = component.HANDLERS[event.event_type]
    return handler(event, settings)


def main(args: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Build a Matomo tracking request for an event")
    parser.add_argument("event", help="Path to an event JSON file")
    parser.add_argument("--settings", help="JSON file with a settings mapping")
    parser.add_argument("--site-id", dest="site_id", help="Matomo site id")
    parser.add_argument("--endpoint", help="Matomo base URL")
    parser.add_argument("--token", help="Matomo authentication token")
    parser.add_argument("--transport", choices=["query", "form"], help="Request shape")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    opts = parser.parse_args(args)

    logging.basicConfig(level=logging.DEBUG if opts.verbose else logging.WARNING)

    try:
        request = build_from_file(opts.event, load_settings(opts))
    except (TransformError, ValidationError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(request.model_dump_json(indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
