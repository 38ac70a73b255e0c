#!/usr/bin/env python

import json
import logging
import os
import tempfile
from datetime import datetime

import pandas as pd

import config

# Configure logging
logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
logger = logging.getLogger(__name__)

APPS_INDEX_FILE = "apps.json"
RUN_STATUS_FILE = "status.json"

SNAPSHOT_COLUMNS = ["country_code", "pricing", "genre", "entries", "modified"]


def _data_dir(data_dir=None):
    return data_dir or config.DATA_DIR


def snapshot_path(country_code, pricing, genre_name, data_dir=None):
    """Path of the snapshot file for one country, pricing and genre."""
    return os.path.join(_data_dir(data_dir), country_code, pricing, f"{genre_name}.json")


def read_json_file(path):
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def write_json_file(path, content):
    """
    Write content as 2-space indented JSON.

    The file is written next to its destination first and then moved in
    place, so readers never see a half-written snapshot.
    """
    # One temp file per writer, so concurrent writers never share it
    with tempfile.NamedTemporaryFile("w", encoding="utf-8", dir=os.path.dirname(path) or ".",
                                     prefix=f"{os.path.basename(path)}.", suffix=".tmp",
                                     delete=False) as f:
        tmp_path = f.name
        try:
            json.dump(content, f, indent=2, ensure_ascii=False)
        except Exception:
            f.close()
            os.remove(tmp_path)
            raise
    os.replace(tmp_path, path)


def ensure_json_file(path):
    """
    Make sure a JSON file exists, creating it with an empty list if needed.
    """
    if os.path.exists(path):
        return

    os.makedirs(os.path.dirname(path), exist_ok=True)
    write_json_file(path, [])
    logger.info(f"Created empty snapshot {path}")


def write_apps_index(apps, data_dir=None):
    """
    Write the bundle id index of the latest run.

    Args:
        apps: Dictionary mapping bundle id to a list of positions
        data_dir: Optional data directory (defaults to config.DATA_DIR)

    Returns:
        Path of the written index file
    """
    data_dir = _data_dir(data_dir)
    os.makedirs(data_dir, exist_ok=True)
    path = os.path.join(data_dir, APPS_INDEX_FILE)
    write_json_file(path, apps)
    logger.info(f"Wrote apps index with {len(apps)} bundle ids to {path}")
    return path


def load_apps_index(data_dir=None):
    """
    Load the bundle id index.

    Returns:
        Dictionary mapping bundle id to positions, empty if no index was written yet
    """
    path = os.path.join(_data_dir(data_dir), APPS_INDEX_FILE)
    if not os.path.exists(path):
        logger.warning(f"Apps index does not exist: {path}")
        return {}
    return read_json_file(path)


def write_run_status(status, started_at, tasks=0, changed=0, error=None, data_dir=None):
    data_dir = _data_dir(data_dir)
    os.makedirs(data_dir, exist_ok=True)
    record = {
        "status": status,
        "started_at": started_at.strftime('%Y-%m-%d %H:%M:%S'),
        "finished_at": datetime.now().strftime('%Y-%m-%d %H:%M:%S'),
        "tasks": tasks,
        "changed": changed,
        "error": error,
    }
    write_json_file(os.path.join(data_dir, RUN_STATUS_FILE), record)
    return record


def load_run_status(data_dir=None):
    """Return the status of the last update run, or None if none was recorded."""
    path = os.path.join(_data_dir(data_dir), RUN_STATUS_FILE)
    if not os.path.exists(path):
        return None
    try:
        return read_json_file(path)
    except (OSError, ValueError) as e:
        logger.error(f"Error reading run status: {str(e)}")
        return None


def list_snapshots(data_dir=None):
    """
    Inventory of the snapshot files on disk.

    Returns:
        DataFrame with one row per snapshot: country_code, pricing, genre,
        entries, modified
    """
    data_dir = _data_dir(data_dir)
    rows = []

    if not os.path.isdir(data_dir):
        return pd.DataFrame(columns=SNAPSHOT_COLUMNS)

    for country_code in sorted(os.listdir(data_dir)):
        country_dir = os.path.join(data_dir, country_code)
        if not os.path.isdir(country_dir):
            continue
        for pricing in sorted(os.listdir(country_dir)):
            pricing_dir = os.path.join(country_dir, pricing)
            if not os.path.isdir(pricing_dir):
                continue
            for filename in sorted(os.listdir(pricing_dir)):
                if not filename.endswith(".json"):
                    continue
                path = os.path.join(pricing_dir, filename)
                try:
                    entries = len(read_json_file(path))
                except (OSError, ValueError) as e:
                    logger.warning(f"Skipping unreadable snapshot {path}: {str(e)}")
                    entries = None
                rows.append({
                    "country_code": country_code,
                    "pricing": pricing,
                    "genre": filename[:-len(".json")],
                    "entries": entries,
                    "modified": datetime.fromtimestamp(os.path.getmtime(path)),
                })

    return pd.DataFrame(rows, columns=SNAPSHOT_COLUMNS)


if __name__ == "__main__":
    # Test the functions
    print(load_run_status())
    print(list_snapshots().head(20))
