#!/usr/bin/env python

import logging
import time

import requests

import config

# Configure logging
logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
logger = logging.getLogger(__name__)

APPLE_RSS_URL = (
    "https://itunes.apple.com/WebObjects/MZStoreServices.woa/ws/RSS/"
    "top{pricing}applications/sf={store_front}/limit={limit}/genre={genre}/json"
)


class FeedError(Exception):
    """Raised when the ranking feed cannot be fetched or decoded."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


def feed_url(store_front_id, pricing, genre_id, limit=None):
    return APPLE_RSS_URL.format(
        pricing=pricing,
        store_front=store_front_id,
        limit=limit or config.FEED_LIMIT,
        genre=genre_id,
    )


def fetch_feed(store_front_id, pricing, genre_id, limit=None, retry_delay=None,
               max_attempts=None, timeout=None):
    """
    Fetch one top chart from the App Store RSS feed.

    Non-200 responses are retried after a fixed backoff. Network errors are
    not retried and propagate to the caller.

    Args:
        store_front_id: Apple store front id (e.g. 143442 for France)
        pricing: "paid" or "free"
        genre_id: Apple genre id (e.g. 6005 for Social Networking)
        limit: Number of apps to request (defaults to config.FEED_LIMIT)
        retry_delay: Seconds to wait before retrying a non-200 response
        max_attempts: Total number of attempts before giving up

    Returns:
        Decoded JSON body as a dictionary ({} when the body is empty)

    Raises:
        FeedError: when every attempt returned a non-200 status or the body
            is not valid JSON
    """
    url = feed_url(store_front_id, pricing, genre_id, limit)
    retry_delay = config.RETRY_DELAY if retry_delay is None else retry_delay
    max_attempts = max_attempts or config.MAX_ATTEMPTS
    timeout = timeout or config.REQUEST_TIMEOUT

    status_code = None
    for attempt in range(1, max_attempts + 1):
        r = requests.get(url, timeout=timeout)
        status_code = r.status_code

        if status_code != 200:
            logger.error(f"Got error: {status_code} ({attempt}/{max_attempts}) for {url}")
            if attempt < max_attempts:
                # Schedule next attempt
                time.sleep(retry_delay)
            continue

        if not r.content:
            return {}

        try:
            return r.json()
        except ValueError as e:
            raise FeedError(f"Invalid JSON from {url}: {str(e)}", status_code) from e

    raise FeedError(f"Got error: {status_code} after {max_attempts} attempts for {url}", status_code)


def extract_entries(body):
    """Return the list of chart entries from a feed body."""
    entries = ((body or {}).get("feed") or {}).get("entry") or []

    # Only one entry?
    if isinstance(entries, dict):
        entries = [entries]

    return entries


def get_bundle_id(entry):
    try:
        return entry["id"]["attributes"]["im:bundleId"]
    except (KeyError, TypeError):
        return None


def build_positions(entries, country_code, pricing, genre_name):
    """
    Attach the chart position to every entry.

    Args:
        entries: Feed entries in chart order
        country_code: Store front country code
        pricing: "paid" or "free"
        genre_name: Genre name from charts.store_config.GENRES

    Returns:
        List of new entry dictionaries with a "$position" key first
    """
    total = len(entries)
    positioned = []
    for index, entry in enumerate(entries, start=1):
        position = {
            "country_code": country_code,
            "pricing": pricing,
            "genre": genre_name,
            "index": index,
            "total": total,
        }
        positioned.append({"$position": position, **entry})
    return positioned


if __name__ == "__main__":
    # Test the function
    body = fetch_feed(143441, "free", 6005)
    entries = build_positions(extract_entries(body), "us", "free", "social_networking")
    for entry in entries[:10]:
        print(entry["$position"]["index"], get_bundle_id(entry))
