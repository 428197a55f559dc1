# products/signals.py
from __future__ import annotations

import logging

from django.db.models.signals import post_save, pre_save
from django.dispatch import receiver

from .models import Product

logger = logging.getLogger(__name__)


@receiver(pre_save, sender=Product)
def remember_previous_slug(sender, instance: Product, **kwargs):
    instance._previous_slug = None
    if instance.pk:
        instance._previous_slug = (
            Product.objects.filter(pk=instance.pk).values_list("slug", flat=True).first()
        )


@receiver(post_save, sender=Product)
def redirect_old_slug(sender, instance: Product, created: bool, **kwargs):
    old_slug = getattr(instance, "_previous_slug", None)
    if created or not old_slug or old_slug == instance.slug:
        return

    from seo.models import UrlRedirect
    from seo.services import create_on_slug_change

    redirect = create_on_slug_change(
        instance.storefront_path(old_slug),
        instance.storefront_path(),
        entity_type=UrlRedirect.EntityType.PRODUCT,
        entity_id=instance.pk,
    )
    logger.info("Slug change product=%s %s -> %s (redirect=%s)", instance.pk, old_slug, instance.slug, redirect.pk)
