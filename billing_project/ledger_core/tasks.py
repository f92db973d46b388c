import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task  # scheduled by CELERY_BEAT_SCHEDULE
def repair_flagged_aggregates():
    """Re-run every invoice/client refresh that failed after its write committed."""
    # import lazily to avoid circular imports at module import time
    from .services.reconcile import repair_flagged

    result = repair_flagged()
    return {"refreshed": len(result.refreshed), "failed": len(result.failed)}


@shared_task
def rebuild_ledger_totals():
    """Full recompute of every invoice and client total."""
    from .services.reconcile import refresh_everything

    result = refresh_everything()
    if not result.ok:
        logger.warning("Ledger rebuild left %d aggregate(s) flagged", len(result.failed))
    return {"refreshed": len(result.refreshed), "failed": len(result.failed)}
