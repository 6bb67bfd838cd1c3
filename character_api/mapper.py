"""Row <-> document mapping for characters.

A stored row is flat: origin/location live in four scalar columns and the
episode list is a JSON array serialized into `episode_urls`. The public
document nests those back into `{"name", "url"}` objects and a list.

Nothing here validates field contents; the mapper only reshapes.
"""

import json
import logging
from collections.abc import Mapping
from typing import Any, Dict, List

from . import metrics
from .models import ROW_COLUMNS

log = logging.getLogger(__name__)


def decode_episodes(raw: str | None) -> List[str]:
    """Parse the `episode_urls` column into a list of episode URLs.

    Known leniency: a value that is not a JSON array of strings yields `[]` instead of
    an error, so one corrupt row never fails a list or get. Callers receive
    partial data; the failure is only visible in logs and metrics.
    """
    if raw is None:
        return []
    try:
        value = json.loads(raw)
    except (TypeError, ValueError) as exc:
        log.warning("mapper.episode_decode_failed raw=%.80r error=%s", raw, exc)
        metrics.record_episode_decode_failure()
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        log.warning(
            "mapper.episode_decode_failed raw=%.80r error=not a list of strings", raw
        )
        metrics.record_episode_decode_failure()
        return []
    return value


def encode_episodes(episode: List[str] | None) -> str:
    """Serialize an episode list for the `episode_urls` column."""
    return json.dumps(list(episode or []))


def row_to_document(row: Any) -> Dict[str, Any]:
    """Build the nested Character document from a stored row.

    Args:
        row: A `CharacterRow` instance or any mapping keyed by column name.

    Returns:
        Dict in the public document shape, `id` first.
    """
    if isinstance(row, Mapping):
        values = {col: row[col] for col in ROW_COLUMNS}
    else:
        values = {col: getattr(row, col) for col in ROW_COLUMNS}

    return {
        "id": values["id"],
        "name": values["name"],
        "status": values["status"],
        "species": values["species"],
        "type": values["type"],
        "gender": values["gender"],
        "origin": {"name": values["origin_name"], "url": values["origin_url"]},
        "location": {
            "name": values["location_name"],
            "url": values["location_url"],
        },
        "image": values["image"],
        "episode": decode_episodes(values["episode_urls"]),
        "url": values["url"],
        "created": values["created"],
    }


def document_to_row(doc: Mapping) -> Dict[str, Any]:
    """Flatten a Character document into column values (without `id`).

    Missing keys fall back to empty strings / an empty episode list, the same
    defaults the request schema applies.
    """
    origin = doc.get("origin") or {}
    location = doc.get("location") or {}
    return {
        "name": doc.get("name", ""),
        "status": doc.get("status", ""),
        "species": doc.get("species", ""),
        "type": doc.get("type", ""),
        "gender": doc.get("gender", ""),
        "origin_name": origin.get("name", ""),
        "origin_url": origin.get("url", ""),
        "location_name": location.get("name", ""),
        "location_url": location.get("url", ""),
        "image": doc.get("image", ""),
        "episode_urls": encode_episodes(doc.get("episode")),
        "url": doc.get("url", ""),
        "created": doc.get("created", ""),
    }
