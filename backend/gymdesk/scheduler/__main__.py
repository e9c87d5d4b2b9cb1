"""Scheduler entry point: python -m gymdesk.scheduler"""
import signal
import sys

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

from gymdesk.core.config import settings
from gymdesk.core.logging import setup_logging, get_logger
from gymdesk.core.redis import get_sync_redis, write_scheduler_heartbeat
from gymdesk.scheduler.expiry_reminder import notify_expiring_members
from gymdesk.scheduler.expired_notice import notify_expired_members
from gymdesk.scheduler.pending_assignment_cleaner import cleanup_expired_assignments

setup_logging(settings.DEBUG, service="scheduler")
logger = get_logger("scheduler")

TZ = settings.SCHEDULER_TIMEZONE
scheduler = BlockingScheduler(timezone=TZ)


def signal_handler(sig, frame):
    logger.info("Scheduler received stop signal")
    scheduler.shutdown(wait=False)
    sys.exit(0)


def heartbeat():
    """Liveness marker read by /health"""
    try:
        write_scheduler_heartbeat(get_sync_redis())
    except Exception as e:
        logger.error(f"Scheduler heartbeat failed: {e}")


def register_jobs(sched) -> None:
    # 09:00: expiring-soon reminders
    sched.add_job(
        notify_expiring_members,
        CronTrigger(hour=9, minute=0, timezone=TZ),
        id="expiry_reminder",
        max_instances=1,
    )

    # 09:30: expired notices
    sched.add_job(
        notify_expired_members,
        CronTrigger(hour=9, minute=30, timezone=TZ),
        id="expired_notice",
        max_instances=1,
    )

    # every 5 minutes: stale pending card assignments
    sched.add_job(
        cleanup_expired_assignments,
        CronTrigger(minute="*/5", timezone=TZ),
        id="pending_assignment_cleaner",
        max_instances=1,
    )

    # every minute: heartbeat
    sched.add_job(
        heartbeat,
        CronTrigger(minute="*", timezone=TZ),
        id="heartbeat",
        max_instances=1,
    )


def main():
    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)
    logger.info("Scheduler starting")
    register_jobs(scheduler)
    heartbeat()

    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Scheduler stopped")


if __name__ == "__main__":
    main()
