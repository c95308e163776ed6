"""Open a loyalty account for every new customer."""

from django.conf import settings  # type: ignore
from django.db.models.signals import post_save  # type: ignore
from django.dispatch import receiver  # type: ignore

from .services import LoyaltyService


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def open_loyalty_account(sender, instance, created, **kwargs):  # type: ignore
    if created and instance.is_customer():
        LoyaltyService().open_account(instance.pk)
