from django.db.models.signals import post_delete, post_save
from django.dispatch import Signal, receiver

from .models import Client, Invoice, Project
from .services.dashboard import invalidate_dashboard

# Sent after a payment ledger write commits (QuerySet.update skips post_save).
ledger_updated = Signal()


@receiver(post_save, sender=Invoice)
@receiver(post_delete, sender=Invoice)
@receiver(post_save, sender=Client)
@receiver(post_delete, sender=Client)
@receiver(post_save, sender=Project)
@receiver(post_delete, sender=Project)
def refresh_dashboard_on_change(sender, instance, **kwargs):
    if instance.user_id:
        invalidate_dashboard(instance.user_id)


@receiver(ledger_updated)
def refresh_dashboard_on_payment(sender, invoice, **kwargs):
    invalidate_dashboard(invoice.user_id)
