#!/usr/bin/env python

import logging
import os

import pandas as pd

import config
import data_manager
from charts import store_config

# Configure logging
logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
logger = logging.getLogger(__name__)

POSITION_COLUMNS = ["country_code", "pricing", "genre", "index", "total"]

# Loaded data, keyed by data directory
_apps_cache = {}
_charts_cache = {}


def _resolve(data_dir):
    return os.path.abspath(data_dir or config.DATA_DIR)


def reload():
    """Forget cached data so the next lookup reads the files again."""
    _apps_cache.clear()
    _charts_cache.clear()


def get_apps_index(data_dir=None):
    key = _resolve(data_dir)
    if key not in _apps_cache:
        _apps_cache[key] = data_manager.load_apps_index(key)
    return _apps_cache[key]


def get_app_positions(bundle_id, country_code=None, pricing=None, genre=None, data_dir=None):
    """
    Get app top position(s).

    Args:
        bundle_id: App bundle identifier (e.g. "com.alertus.zenly")
        country_code: Optional country code filter
        pricing: Optional pricing filter ("paid" or "free")
        genre: Optional genre name filter
        data_dir: Optional data directory (defaults to config.DATA_DIR)

    Returns:
        List of matching positions, or None when the app is not in any
        matching chart

    Raises:
        ValueError: if bundle_id is empty
    """
    if not bundle_id:
        raise ValueError("Missing bundle identifier")

    positions = get_apps_index(data_dir).get(bundle_id)
    if not positions:
        return None

    positions = [
        position for position in positions
        if (not country_code or position.get("country_code") == country_code)
        and (not pricing or position.get("pricing") == pricing)
        and (not genre or position.get("genre") == genre)
    ]

    return positions if len(positions) > 0 else None


def is_app_top(bundle_id, country_code=None, pricing=None, genre=None, data_dir=None):
    """Whether the app appears in at least one matching top chart."""
    return get_app_positions(bundle_id, country_code, pricing, genre, data_dir) is not None


def get_app_positions_df(bundle_id, country_code=None, pricing=None, genre=None, data_dir=None) -> pd.DataFrame:
    """Convenience wrapper returning the positions as a DataFrame."""
    positions = get_app_positions(bundle_id, country_code, pricing, genre, data_dir)
    return pd.DataFrame(positions or [], columns=POSITION_COLUMNS)


def _read_snapshot(path):
    if not os.path.exists(path):
        return None
    try:
        return data_manager.read_json_file(path)
    except (OSError, ValueError) as e:
        logger.warning(f"Ignoring unreadable snapshot {path}: {str(e)}")
        return None


def load_charts(data_dir=None):
    """
    Load every snapshot on disk, grouped by country and pricing.

    Keys are "<country>", "<country>_<pricing>" and
    "<country>_<pricing>_<genre>", e.g. "fr", "fr_free", "fr_free_book".
    Country and country/pricing lists concatenate their genre snapshots in
    configuration order. A genre key is None when its snapshot is missing.
    """
    key = _resolve(data_dir)
    if key in _charts_cache:
        return _charts_cache[key]

    charts = {}
    for _, country_code in store_config.STORE_FRONTS:
        country_apps = []
        for pricing in store_config.PRICINGS:
            pricing_apps = []
            for _, genre_name in store_config.GENRES:
                snapshot = _read_snapshot(
                    data_manager.snapshot_path(country_code, pricing, genre_name, key)
                )
                if snapshot:
                    country_apps.extend(snapshot)
                    pricing_apps.extend(snapshot)
                charts[f"{country_code}_{pricing}_{genre_name}"] = snapshot
            charts[f"{country_code}_{pricing}"] = pricing_apps
        charts[country_code] = country_apps

    _charts_cache[key] = charts
    return charts


def get_chart(country_code, pricing=None, genre=None, data_dir=None):
    """
    Get the apps charted for a country, optionally narrowed to a pricing and genre.

    Returns:
        List of chart entries; None if a single genre chart was asked for and
        has no snapshot
    """
    parts = [country_code]
    if pricing:
        parts.append(pricing)
        if genre:
            parts.append(genre)
    elif genre:
        # A genre without pricing spans both pricing tiers
        charts = load_charts(data_dir)
        apps = []
        for tier in store_config.PRICINGS:
            apps.extend(charts.get(f"{country_code}_{tier}_{genre}") or [])
        return apps

    return load_charts(data_dir).get("_".join(parts))


if __name__ == "__main__":
    # Test the functions
    print(get_app_positions("com.alertus.zenly"))
    print(is_app_top("fr.lemonde.matin", "fr"))
