"""Optional on-disk cache of an exported index.

The snapshot is the JSON rendering of :meth:`InvertedIndex.export`; it is
written and read in one piece, the index itself stays in memory.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import orjson

from cognishelf_search.search.models import SnapshotValidationError


if TYPE_CHECKING:
    from cognishelf_search.search.inverted_index import InvertedIndex


logger = logging.getLogger(__name__)


def save_snapshot(index: InvertedIndex, path: Path) -> int:
    """Write ``index`` to ``path`` atomically and return the byte count."""
    payload = orjson.dumps(index.export(), option=orjson.OPT_NON_STR_KEYS)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        tmp_path.write_bytes(payload)
        tmp_path.replace(path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise
    logger.info("Saved index snapshot to %s (%d bytes)", path, len(payload))
    return len(payload)


def load_snapshot(index: InvertedIndex, path: Path) -> None:
    """Replace the contents of ``index`` with the snapshot stored at ``path``.

    Raises:
        FileNotFoundError: when ``path`` does not exist.
        SnapshotValidationError: when the file is not valid snapshot JSON.
    """
    data = path.read_bytes()
    try:
        payload = orjson.loads(data)
    except orjson.JSONDecodeError as exc:
        msg = f"Snapshot {path} is not valid JSON: {exc}"
        raise SnapshotValidationError(msg) from exc
    index.import_data(payload)
    logger.info("Loaded index snapshot from %s", path)
