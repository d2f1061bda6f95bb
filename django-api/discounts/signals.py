"""Django signals for cache invalidation."""

import logging

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from discounts.cache import invalidate_snapshots
from discounts.models import DiscountRule, VATConfig

logger = logging.getLogger(__name__)


@receiver([post_save, post_delete], sender=DiscountRule)
def invalidate_rule_cache(sender, instance, **kwargs):
    """Invalidate rule snapshots when a discount rule is saved or deleted."""
    logger.debug("Discount rule %s changed, invalidating snapshots", instance.pk)
    invalidate_snapshots()


@receiver([post_save, post_delete], sender=VATConfig)
def invalidate_vat_cache(sender, instance, **kwargs):
    """Invalidate rule snapshots when a VAT configuration is saved or deleted."""
    logger.debug("VAT config %s changed, invalidating snapshots", instance.pk)
    invalidate_snapshots()
