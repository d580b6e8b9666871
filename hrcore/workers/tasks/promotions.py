"""
Celery tasks for the promotion sweep.

``promotions.sweep_all_tenants`` is the task the daily beat entry
registered by ``PromotionScheduler`` runs.
"""

import logging

from celery import shared_task

from hrcore.services import promotion_scheduler, promotion_service

logger = logging.getLogger(__name__)


@shared_task(name=promotion_scheduler.SWEEP_ALL_TASK)
def sweep_all_tenants() -> dict:
    """Apply due promotions for every active company."""
    logger.info("Running daily promotion sweep")
    return promotion_scheduler.process_all_company_promotions().to_dict()


@shared_task(name=promotion_scheduler.SWEEP_TENANT_TASK)
def sweep_tenant(company_id: int) -> dict:
    """Apply due promotions for a single company."""
    return promotion_service.process_pending_promotions(company_id).to_dict()
