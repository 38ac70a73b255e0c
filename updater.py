#!/usr/bin/env python

import argparse
import logging
import os
import sys
import time
from datetime import datetime

import config
import data_manager
from charts import store_config
from charts.app_store import build_positions, extract_entries, fetch_feed, get_bundle_id

# Configure logging
logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
logger = logging.getLogger(__name__)

STATUS_UPDATED = "updated"
STATUS_NONE_UPDATED = "none_updated"
STATUS_FAILED = "failed"


def execute_sequentially(tasks, delay=None):
    """
    Run callables one after another, sleeping before each one.

    Args:
        tasks: Iterable of zero-argument callables
        delay: Seconds to wait before each task (defaults to config.ACTION_DELAY)

    Returns:
        List of the task results, in order
    """
    delay = config.ACTION_DELAY if delay is None else delay
    results = []
    for task in tasks:
        time.sleep(delay)
        results.append(task())
    return results


def update_apps(store_front, pricing, genre, apps_index, data_dir=None, **fetch_options):
    """
    Refresh the snapshot of one chart (store front, pricing and genre).

    Every fetched position is added to apps_index, whether the snapshot
    changed or not.

    Args:
        store_front: (store_front_id, country_code)
        pricing: "paid" or "free"
        genre: (genre_id, genre_name)
        apps_index: Dictionary of bundle id -> positions, filled in place
        data_dir: Optional data directory (defaults to config.DATA_DIR)
        fetch_options: Extra keyword arguments for fetch_feed

    Returns:
        True if the remote chart differs from the local snapshot
    """
    store_front_id, country_code = store_front
    genre_id, genre_name = genre

    logger.info(f"update_apps:{country_code}:{pricing}:{genre_name}")

    path = data_manager.snapshot_path(country_code, pricing, genre_name, data_dir)
    data_manager.ensure_json_file(path)
    existing_apps = data_manager.read_json_file(path)

    body = fetch_feed(store_front_id, pricing, genre_id, **fetch_options)
    new_apps = build_positions(extract_entries(body), country_code, pricing, genre_name)

    for app in new_apps:
        bundle_id = get_bundle_id(app)
        if bundle_id is None:
            logger.warning(f"Entry without bundle id in {country_code}/{pricing}/{genre_name}")
            continue
        apps_index.setdefault(bundle_id, []).append(app["$position"])

    apps_changed = new_apps != existing_apps

    if apps_changed and len(new_apps) > 0:
        data_manager.write_json_file(path, new_apps)
        logger.info(f"Updated {path} ({len(new_apps)} apps)")

    return apps_changed


def build_tasks(store_fronts, pricings, genres, apps_index, data_dir=None, **fetch_options):
    """Map every store front x pricing x genre combination to an update task."""
    tasks = []
    for store_front in store_fronts:
        for pricing in pricings:
            for genre in genres:
                tasks.append(
                    lambda sf=store_front, p=pricing, g=genre: update_apps(
                        sf, p, g, apps_index, data_dir=data_dir, **fetch_options
                    )
                )
    return tasks


def run_update(store_fronts=None, pricings=None, genres=None, data_dir=None, delay=None,
               **fetch_options):
    """
    Refresh every configured chart and rebuild the apps index.

    Args:
        store_fronts: Store fronts to poll (defaults to all)
        pricings: Pricings to poll (defaults to all)
        genres: Genres to poll (defaults to all)
        data_dir: Optional data directory (defaults to config.DATA_DIR)
        delay: Seconds to wait before each request
        fetch_options: Extra keyword arguments for fetch_feed

    Returns:
        Tuple of (status, results) where status is "updated" when at least
        one chart changed and "none_updated" otherwise
    """
    store_fronts = store_config.STORE_FRONTS if store_fronts is None else store_fronts
    pricings = store_config.PRICINGS if pricings is None else pricings
    genres = store_config.GENRES if genres is None else genres

    started_at = datetime.now()
    apps_index = {}
    tasks = build_tasks(store_fronts, pricings, genres, apps_index, data_dir, **fetch_options)
    logger.info(f"Running {len(tasks)} chart updates")

    try:
        # Execute updates sequentially & with a delay, to avoid Apple's rate limit
        results = execute_sequentially(tasks, delay)
        data_manager.write_apps_index(apps_index, data_dir)
    except Exception as e:
        try:
            data_manager.write_run_status(
                STATUS_FAILED, started_at, tasks=len(tasks), error=str(e), data_dir=data_dir
            )
        except Exception as status_error:
            logger.error(f"Error recording failed run status: {str(status_error)}")
        raise

    changed = sum(1 for result in results if result)
    status = STATUS_UPDATED if changed else STATUS_NONE_UPDATED
    data_manager.write_run_status(status, started_at, tasks=len(tasks), changed=changed,
                                  data_dir=data_dir)
    logger.info(f"Chart update finished: {changed}/{len(tasks)} charts changed")
    return status, results


def report_status(status):
    """Expose the run status as a CI step output."""
    github_output = os.getenv("GITHUB_OUTPUT")
    if github_output:
        with open(github_output, "a", encoding="utf-8") as f:
            f.write(f"status={status}\n")
    else:
        sys.stdout.write(f"::set-output name=status::{status}{os.linesep}")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Update App Store top charts snapshots")
    parser.add_argument("--data-dir", default=None, help="Snapshot directory (default: TOPS_DATA_DIR or ./data)")
    parser.add_argument("--delay", type=float, default=None, help="Seconds to wait before each request")
    parser.add_argument("--retry-delay", type=float, default=None, help="Seconds to wait before retrying a failed request")
    parser.add_argument("--max-attempts", type=int, default=None, help="Attempts per chart before giving up")
    parser.add_argument("--limit", type=int, default=None, help="Number of apps per chart")
    parser.add_argument("--countries", nargs="+", default=None, help="Country codes to poll (default: all)")
    parser.add_argument("--pricings", nargs="+", default=None, help="Pricings to poll: paid, free (default: both)")
    parser.add_argument("--genres", nargs="+", default=None, help="Genre names to poll (default: all)")
    parser.add_argument("--log-level", default=None, help="Logging level (default: LOG_LEVEL or INFO)")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    try:
        if args.log_level:
            logging.getLogger().setLevel(args.log_level.upper())

        status, _ = run_update(
            store_fronts=store_config.select_store_fronts(args.countries),
            pricings=store_config.select_pricings(args.pricings),
            genres=store_config.select_genres(args.genres),
            data_dir=args.data_dir,
            delay=args.delay,
            retry_delay=args.retry_delay,
            max_attempts=args.max_attempts,
            limit=args.limit,
        )
    except Exception as e:
        logger.error(f"Error updating charts: {str(e)}")
        return 1

    sys.stdout.write(os.linesep)
    report_status(status)
    return 0


if __name__ == "__main__":
    sys.exit(main())
