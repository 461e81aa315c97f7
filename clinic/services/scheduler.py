import logging
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler

from clinic.config import settings
from clinic.services.otp import get_otp_manager

LOGGER = logging.getLogger(__name__)

_scheduler: Optional[BackgroundScheduler] = None


def sweep_expired_codes() -> int:
    return get_otp_manager().sweep()


def start_scheduler() -> Optional[BackgroundScheduler]:
    global _scheduler
    if not settings.otp_sweep_enabled or _scheduler is not None:
        return _scheduler
    scheduler = BackgroundScheduler()
    scheduler.add_job(
        sweep_expired_codes,
        "interval",
        minutes=settings.otp_sweep_interval_minutes,
        id="otp-sweep",
        replace_existing=True,
    )
    scheduler.start()
    LOGGER.info(
        "OTP sweep scheduled every %d minutes", settings.otp_sweep_interval_minutes
    )
    _scheduler = scheduler
    return scheduler


def stop_scheduler() -> None:
    global _scheduler
    if _scheduler is None:
        return
    _scheduler.shutdown(wait=False)
    _scheduler = None
