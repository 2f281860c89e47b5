"""
Cache invalidation signals
Automatically invalidate report caches when business data changes
"""
import logging

from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver

from .cache_utils import bump_cache_version, REPORTS_NAMESPACE

logger = logging.getLogger('dukabook.core')

# Models whose changes affect dashboards and reports
REPORT_SOURCE_MODELS = {
    ('catalog', 'product'),
    ('catalog', 'category'),
    ('sales', 'sale'),
    ('sales', 'saleitem'),
    ('parties', 'debtor'),
    ('parties', 'payment'),
    ('expenses', 'expense'),
    ('inventory', 'inventorytransaction'),
}


def _is_report_source(sender):
    meta = getattr(sender, '_meta', None)
    if meta is None:
        return False
    return (meta.app_label, meta.model_name) in REPORT_SOURCE_MODELS


@receiver(post_save)
def invalidate_reports_on_save(sender, instance, **kwargs):
    if _is_report_source(sender):
        bump_cache_version(REPORTS_NAMESPACE)


@receiver(post_delete)
def invalidate_reports_on_delete(sender, instance, **kwargs):
    if _is_report_source(sender):
        bump_cache_version(REPORTS_NAMESPACE)


def invalidate_reports_cache_manual():
    """Manually invalidate report caches (e.g. after bulk_create, which sends no signals)"""
    bump_cache_version(REPORTS_NAMESPACE)
    logger.info("Invalidated reports cache (manual)")
