"""
Django ORM models for persistence.
Purchases are insert-only; the key constraint is the idempotency authority.
"""

import uuid
from django.db import models
from django.db.models import Q


class PurchaseRecord(models.Model):

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    description = models.CharField(max_length=50)
    transaction_date = models.DateField(db_index=True)
    amount = models.DecimalField(max_digits=18, decimal_places=2)
    currency = models.CharField(max_length=3, default="USD")
    idempotency_key = models.CharField(max_length=255, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "purchases_purchase"
        constraints = [
            # Sole authority for idempotency; the application check is only a shortcut.
            models.UniqueConstraint(
                fields=["idempotency_key"],
                condition=Q(idempotency_key__isnull=False),
                name="unique_purchase_idempotency_key",
            )
        ]
        ordering = ["-transaction_date", "-created_at"]

    def __str__(self):
        return f"{self.description} | {self.transaction_date} | {self.currency} {self.amount}"
