#!/usr/bin/env python

import os

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name, default=False):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Where snapshots, the apps index and the run status live
DATA_DIR = os.getenv("TOPS_DATA_DIR", os.path.join(os.getcwd(), "data"))

# Delay before each feed request, in seconds (keeps us under Apple's rate limit)
ACTION_DELAY = float(os.getenv("TOPS_ACTION_DELAY", "0.5"))

# Backoff before retrying a non-200 response, in seconds
RETRY_DELAY = float(os.getenv("TOPS_RETRY_DELAY", "10"))
MAX_ATTEMPTS = int(os.getenv("TOPS_MAX_ATTEMPTS", "5"))

FEED_LIMIT = int(os.getenv("TOPS_FEED_LIMIT", "100"))
REQUEST_TIMEOUT = float(os.getenv("TOPS_REQUEST_TIMEOUT", "30"))

# Scheduler
SCHEDULE_HOUR = int(os.getenv("TOPS_SCHEDULE_HOUR", "6"))
SCHEDULE_MINUTE = int(os.getenv("TOPS_SCHEDULE_MINUTE", "0"))
SCHEDULE_TIMEZONE = os.getenv("TOPS_SCHEDULE_TIMEZONE", "UTC")
BACKUP_INTERVAL_HOURS = int(os.getenv("TOPS_BACKUP_INTERVAL_HOURS", "12"))
DASHBOARD_SCHEDULER = _env_bool("DASHBOARD_SCHEDULER")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
