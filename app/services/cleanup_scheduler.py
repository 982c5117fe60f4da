# =============================================================================
# app/services/cleanup_scheduler.py
# =============================================================================
"""
Scheduled feedback cleanup using APScheduler.

Test and staging databases fill up with throwaway feedback; outside production a
daily job deletes everything older than ``FEEDBACK_RETENTION_DAYS``.
"""

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from app.db.session import SessionLocal
from app.services.feedback_service import FeedbackService
from app.core.config import settings
from app.core.logger import get_module_logger

logger = get_module_logger(__name__, "cleanup_scheduler.log")

class CleanupScheduler:
    """Daily feedback cleanup for non-production environments"""

    def __init__(self):
        self.scheduler = AsyncIOScheduler()
        self.is_running = False

    def start(self):
        """Start the scheduler with the cleanup job"""
        if self.is_running:
            logger.warning("Scheduler is already running")
            return

        try:
            self.scheduler.add_job(
                func=self._daily_cleanup,
                trigger=CronTrigger(
                    hour=settings.CLEANUP_HOUR,
                    minute=0,
                    timezone='UTC'
                ),
                id='daily_feedback_cleanup',
                name='Daily Feedback Cleanup',
                replace_existing=True
            )

            self.scheduler.start()
            self.is_running = True

            logger.info("Cleanup scheduler started successfully")
            for job in self.scheduler.get_jobs():
                logger.info(f"  - {job.name} (ID: {job.id}) - Next run: {job.next_run_time}")

        except Exception as e:
            logger.error(f"Failed to start cleanup scheduler: {str(e)}")
            raise

    def stop(self):
        """Stop the scheduler"""
        if not self.is_running:
            logger.warning("Scheduler is not running")
            return

        self.scheduler.shutdown(wait=False)
        self.is_running = False
        logger.info("Cleanup scheduler stopped")

    def get_scheduled_jobs(self):
        """Get list of all scheduled jobs"""
        return [
            {
                'id': job.id,
                'name': job.name,
                'next_run_time': job.next_run_time.isoformat() if job.next_run_time else None,
                'trigger': str(job.trigger)
            }
            for job in self.scheduler.get_jobs()
        ]

    async def _daily_cleanup(self):
        """Delete stale feedback (never in production)"""
        if settings.is_production:
            logger.warning("Cleanup job skipped: running in production")
            return

        logger.info("Starting daily feedback cleanup task")
        db = SessionLocal()
        try:
            deleted, cutoff = FeedbackService.cleanup_old_feedback(db)
            logger.info(f"Daily cleanup completed: {deleted} deleted (cutoff {cutoff.isoformat()})")
        except Exception as e:
            db.rollback()
            logger.error(f"Error in daily cleanup task: {str(e)}")
        finally:
            db.close()


# =============================================================================
# Global Scheduler Instance
# =============================================================================

cleanup_scheduler = CleanupScheduler()

def get_scheduler_status():
    """Get status of the global scheduler"""
    return {
        "running": cleanup_scheduler.is_running,
        "jobs": cleanup_scheduler.get_scheduled_jobs() if cleanup_scheduler.is_running else []
    }

# =============================================================================
# FastAPI Lifespan Integration
# =============================================================================

async def startup_scheduler():
    """Start scheduler on FastAPI startup (non-production, when enabled)"""
    if settings.is_production or not settings.SCHEDULER_ENABLED:
        logger.info(f"Cleanup scheduler disabled (environment={settings.ENVIRONMENT}, enabled={settings.SCHEDULER_ENABLED})")
        return
    logger.info("Starting cleanup scheduler on FastAPI startup")
    cleanup_scheduler.start()

async def shutdown_scheduler():
    """Stop scheduler on FastAPI shutdown"""
    if cleanup_scheduler.is_running:
        logger.info("Stopping cleanup scheduler on FastAPI shutdown")
        cleanup_scheduler.stop()
