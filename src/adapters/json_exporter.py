"""JSON export of local records.

The orchestrator persists records as JSON; the CLI uses the same rendering
for `--json` output and `--output` files.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from core.domain.models import LocalRecord, is_unknown


def record_payload(record: LocalRecord) -> dict[str, Any]:
    """Plain JSON-compatible mapping; unknown values are rendered as null."""

    return {
        "kind": record.kind.value,
        "id": record.id,
        "state": record.state.value,
        "values": {k: (None if is_unknown(v) else v) for k, v in record.values.items()},
    }


def dumps_record(record: LocalRecord) -> str:
    return json.dumps(record_payload(record), ensure_ascii=False, indent=2, sort_keys=True)


def export_record_json(*, record: LocalRecord, output_path: Path) -> Path:
    """Export a `LocalRecord` as UTF-8 JSON with stable formatting."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(dumps_record(record) + "\n", encoding="utf-8")
    return output_path
