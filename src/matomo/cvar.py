"""Encode the overflow bag as Matomo custom variables (``_cvar``).

Matomo accepts up to five custom variables per request, encoded as
``{"1": ["key", "value"], "2": ["key", "value"], ...}``.
"""

import json
import logging

logger = logging.getLogger(__name__)

CVAR_KEY = "_cvar"
CVAR_CAPACITY = 5


def to_cvar(cvars: dict[str, str], capacity: int = CVAR_CAPACITY) -> str | None:
    """Serialize non-empty entries into a ``_cvar`` JSON string.

    Entries keep the bag's insertion order; anything beyond ``capacity``
    is dropped. Returns None when nothing is left to send.
    """
    kept = [(k, v) for k, v in cvars.items() if v.strip()]
    if not kept:
        return None

    if len(kept) > capacity:
        logger.debug(
            "dropping %d custom variable(s) over capacity: %s",
            len(kept) - capacity,
            [k for k, _ in kept[capacity:]],
        )

    slots = {str(idx): [k, v] for idx, (k, v) in enumerate(kept[:capacity], start=1)}
    return json.dumps(slots, separators=(",", ":"), ensure_ascii=False)
