# clients/models/client.py

import uuid

from django.core.exceptions import ValidationError
from django.db import models

# Reserved walk-in client. Created by migration; never deleted, never gets a wallet.
GENERAL_CLIENT_ID = uuid.UUID(int=0)
GENERAL_CLIENT_NAME = "PÚBLICO GENERAL"


class Client(models.Model):
    """
    Customer master record.

    Wallet lifecycle:
        inactive -> pending  (activation requested; accrues, cannot redeem)
        pending  -> active   (approved by an admin; can redeem)
        any      -> inactive (deactivated by an admin)

    The wallet BALANCE is never stored here; it is always derived from the
    loyalty ledger (loyalty.services.ledger.balance).
    """

    WALLET_INACTIVE = "inactive"
    WALLET_PENDING = "pending"
    WALLET_ACTIVE = "active"

    WALLET_STATUSES = [
        (WALLET_INACTIVE, "Inactivo"),
        (WALLET_PENDING, "Pendiente"),
        (WALLET_ACTIVE, "Activo"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255, db_index=True, help_text="Razón social / nombre")
    rfc = models.CharField(max_length=20, blank=True, default="")

    email = models.EmailField(blank=True, default="")
    phone = models.CharField(max_length=20, blank=True, default="", db_index=True)

    address = models.CharField(max_length=255, blank=True, default="")
    zip_code = models.CharField(max_length=10, blank=True, default="")
    colonia = models.CharField(max_length=120, blank=True, default="")
    city = models.CharField(max_length=120, blank=True, default="")
    state = models.CharField(max_length=120, blank=True, default="")

    wallet_status = models.CharField(
        max_length=10, choices=WALLET_STATUSES, default=WALLET_INACTIVE
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    @property
    def is_general(self) -> bool:
        return self.pk == GENERAL_CLIENT_ID

    @property
    def can_redeem(self) -> bool:
        return self.wallet_status == self.WALLET_ACTIVE

    def delete(self, *args, **kwargs):
        if self.is_general:
            raise ValidationError("The general client cannot be deleted")
        return super().delete(*args, **kwargs)

    def __str__(self):
        return self.name
