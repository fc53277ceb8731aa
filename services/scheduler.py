import logging
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from config import settings
from database.database import SessionLocal
from services import storage
from services.errors import StorageError
from services.event_service import referenced_poster_paths

logger = logging.getLogger(__name__)

scheduler: AsyncIOScheduler = None


def sweep_orphaned_posters(session_factory=SessionLocal, min_age_seconds: float = 600) -> int:
    """
    Remove poster files no event points at. Returns how many were removed.

    Fresh uploads are skipped: the event referencing them may not exist yet.
    """
    db = session_factory()
    try:
        referenced = referenced_poster_paths(db)
    finally:
        db.close()

    removed = 0
    for path in storage.iter_files(older_than=min_age_seconds):
        if path in referenced:
            continue
        try:
            storage.delete_file(path)
            removed += 1
        except StorageError as e:
            logger.warning(f"Could not remove orphaned poster {path}: {e}")

    if removed:
        logger.info(f"Removed {removed} orphaned posters")
    return removed


async def run_poster_cleanup():
    try:
        sweep_orphaned_posters()
    except Exception as e:
        logger.error(f"Poster cleanup failed: {e}", exc_info=True)


def start_scheduler():
    """Start the background scheduler"""
    global scheduler
    if not settings.SCHEDULER_ENABLED:
        logger.info("Background scheduler disabled")
        return

    # A fresh scheduler binds to the running event loop
    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        run_poster_cleanup,
        trigger=IntervalTrigger(seconds=settings.POSTER_CLEANUP_INTERVAL_SECONDS),
        id="poster_cleanup",
        replace_existing=True,
    )
    scheduler.start()
    logger.info("Poster cleanup scheduler started")


def stop_scheduler():
    """Stop the background scheduler"""
    if scheduler is not None and scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Poster cleanup scheduler stopped")
