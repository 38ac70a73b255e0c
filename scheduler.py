#!/usr/bin/env python

import logging
import threading
from datetime import datetime

import pytz
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

import config
import top_apps
from updater import run_update

# Configure logging
logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
logger = logging.getLogger(__name__)

# Create a scheduler
scheduler = BackgroundScheduler()

# Held while a chart update runs
update_lock = threading.Lock()


def _now():
    tz = pytz.timezone(config.SCHEDULE_TIMEZONE)
    return datetime.now(pytz.UTC).astimezone(tz).strftime('%Y-%m-%d %H:%M:%S %Z')


def start_scheduler(run_now=True):
    """
    Start the background scheduler with the chart update jobs.

    Args:
        run_now: Whether to run one update immediately after starting
    """
    try:
        if not scheduler.running:
            tz = pytz.timezone(config.SCHEDULE_TIMEZONE)

            # Daily chart update; never let two runs overlap
            scheduler.add_job(
                func=scheduled_update,
                trigger=CronTrigger(hour=config.SCHEDULE_HOUR, minute=config.SCHEDULE_MINUTE, timezone=tz),
                id='update_charts_job',
                name='Daily chart update',
                replace_existing=True,
                max_instances=1,
                coalesce=True,
            )

            # Backup interval job in case the process restarts and misses the daily trigger
            scheduler.add_job(
                func=scheduled_update,
                trigger=IntervalTrigger(hours=config.BACKUP_INTERVAL_HOURS),
                id='backup_update_charts_job',
                name=f'Backup chart update every {config.BACKUP_INTERVAL_HOURS} hours',
                replace_existing=True,
                max_instances=1,
                coalesce=True,
            )

            scheduler.start()
            logger.info(
                f"Scheduler started with daily update at "
                f"{config.SCHEDULE_HOUR:02d}:{config.SCHEDULE_MINUTE:02d} {config.SCHEDULE_TIMEZONE}"
            )

            if run_now:
                scheduler.add_job(func=scheduled_update, id='initial_update_charts_job',
                                  replace_existing=True, max_instances=1)
        else:
            logger.info("Scheduler is already running")
    except Exception as e:
        logger.error(f"Error starting scheduler: {str(e)}")


def stop_scheduler():
    """
    Stop the background scheduler.
    """
    if scheduler.running:
        scheduler.shutdown()
        logger.info("Scheduler stopped")


class UpdateInProgress(Exception):
    """Raised when a chart update is requested while another one is running."""


def run_exclusive_update():
    """
    Run one chart update unless another one is already running in this process.

    The cron, backup and initial jobs are separate APScheduler jobs, so
    max_instances alone does not keep them from overlapping.

    Returns:
        The run status ("updated" or "none_updated")

    Raises:
        UpdateInProgress: if an update is already running
    """
    if not update_lock.acquire(blocking=False):
        raise UpdateInProgress("A chart update is already running")
    try:
        status, _ = run_update()

        # Lookups in this process should see the fresh index
        top_apps.reload()
        return status
    finally:
        update_lock.release()


def scheduled_update():
    """
    Function to be called by the scheduler to refresh every chart.

    Returns:
        The run status, or None if the update failed or was skipped
    """
    try:
        logger.info(f"Running scheduled chart update at {_now()}")
        status = run_exclusive_update()
        logger.info(f"Scheduled chart update completed ({status}) at {_now()}")
        return status
    except UpdateInProgress:
        logger.warning("Chart update already running, skipping this trigger")
        return None
    except Exception as e:
        logger.error(f"Error in scheduled chart update: {str(e)}")
        return None


if __name__ == "__main__":
    start_scheduler()

    # Keep the script running so the scheduler can do its work
    try:
        import time
        while True:
            time.sleep(1)
    except (KeyboardInterrupt, SystemExit):
        stop_scheduler()
