"""Read every JSON array file in a directory into one ordered record list.

Assumptions
-----------
* Each ``*.json`` file holds a top-level array. Anything else (an object, a
  scalar) is skipped with a warning rather than aborting the run.
* Files are read in name order so repeated runs see the same sequence.
* A file that is not valid JSON or an unreadable directory is fatal.
"""

from __future__ import annotations

import json
import os
from typing import Any, List, Tuple

from prompt_batch.errors import DataLoadError
from prompt_batch.logger import get_logger


log = get_logger(__name__)


def _list_json_files(data_dir: str) -> List[str]:
    try:
        names = sorted(os.listdir(data_dir))
    except OSError as exc:
        raise DataLoadError(f"Unable to read data directory {data_dir}: {exc}") from exc

    return [
        os.path.join(data_dir, name)
        for name in names
        if name.lower().endswith(".json") and os.path.isfile(os.path.join(data_dir, name))
    ]


def _read_json(path: str) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as fh:
            return json.load(fh)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DataLoadError(f"{path} is not valid JSON: {exc}") from exc
    except OSError as exc:
        raise DataLoadError(f"Unable to read {path}: {exc}") from exc


def load_records(data_dir: str) -> Tuple[List[Any], int]:
    """Return ``(records, file_count)`` for all JSON files in *data_dir*.

    *records* is the concatenation of every array, in file order then element
    order. *file_count* counts the ``.json`` files that were parsed, including
    the ones skipped for not being arrays.
    """

    records: List[Any] = []
    file_count = 0

    for path in _list_json_files(data_dir):
        data = _read_json(path)
        file_count += 1

        if not isinstance(data, list):
            log.warning("%s does not contain a JSON array – skipped", path)
            continue

        records.extend(data)
        log.info("Read %d records from %s", len(data), os.path.basename(path))

    log.info("Loaded %d records from %d files in %s", len(records), file_count, data_dir)
    return records, file_count
