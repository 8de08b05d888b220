import logging

from apscheduler.schedulers.background import BackgroundScheduler

from database import SessionLocal
from modules.contracts.services.finalization_service import FinalizationService
from modules.contracts.services.retry import retry_pending_finalizations

logger = logging.getLogger(__name__)


def start_finalization_retry_job(finalizer: FinalizationService, minutes: int) -> BackgroundScheduler:
    scheduler = BackgroundScheduler()

    def job():
        with SessionLocal() as session:
            retry_pending_finalizations(session, finalizer)

    scheduler.add_job(job, 'interval', minutes=minutes, max_instances=1, coalesce=True)
    scheduler.start()
    logger.info("Finalization retry job started (every %d minutes)", minutes)
    return scheduler
