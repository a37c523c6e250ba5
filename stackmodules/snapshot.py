"""Deployment snapshot (checkpoint) loading.

Accepted documents:
    - a checkpoint: {"latest": {"resources": [...]}} or {"deployment": {"resources": [...]}}
    - a bare deployment: {"resources": [...]}
    - a bare resource list: [...]
"""

from pathlib import Path
from typing import Any, List, Union
import json
import logging

from stackmodules.exceptions import SnapshotError
from stackmodules.resources import ResourceRecord

logger = logging.getLogger(__name__)


def _resource_list(data: Any) -> List[Any]:
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in ("latest", "deployment", "checkpoint"):
            if key not in data:
                continue
            nested = data[key]
            # A stack that was never deployed, or was destroyed, has no snapshot
            if nested is None:
                return []
            if isinstance(nested, dict):
                return _resource_list(nested)
        if "resources" in data and data["resources"] is None:
            return []
        if isinstance(data.get("resources"), list):
            return data["resources"]
    raise SnapshotError("Snapshot holds no resource list")


def record_from_dict(raw: dict) -> ResourceRecord:
    return ResourceRecord(
        urn=raw.get("urn") or "",
        type=raw["type"],
        id=raw.get("id") or "",
        inputs=dict(raw.get("inputs") or {}),
        outputs=dict(raw.get("outputs") or {}),
    )


def resources_from_checkpoint(data: Any) -> List[ResourceRecord]:
    """Convert a parsed checkpoint document into resource records.

    Entries without a type token are skipped.
    """
    records = []
    for raw in _resource_list(data):
        if not isinstance(raw, dict) or not raw.get("type"):
            logger.debug(f"Ignoring untyped snapshot entry: {raw!r}")
            continue
        records.append(record_from_dict(raw))
    return records


def load_snapshot(path: Union[str, Path]) -> List[ResourceRecord]:
    """Read a checkpoint JSON file into resource records.

    Raises:
        SnapshotError: If the file cannot be read or parsed
    """
    try:
        with open(path, "r") as file:
            data = json.load(file)
    except (OSError, json.JSONDecodeError) as e:
        raise SnapshotError("Unable to read snapshot", {"path": str(path), "error": e})
    return resources_from_checkpoint(data)
