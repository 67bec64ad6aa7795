# store/models/store_settings.py

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models


class StoreSettings(models.Model):
    """
    Business settings singleton (always pk=1).

    Read by:
    - pricing tier resolution (medium/wholesale thresholds)
    - loyalty ledger (earn percentage)

    Thresholds are minimum quantities that trigger each tier.
    """

    SINGLETON_PK = 1

    id = models.PositiveSmallIntegerField(primary_key=True, default=SINGLETON_PK, editable=False)

    # Branding / ticket header
    company_name = models.CharField(max_length=255, default="Mi Negocio")
    razon_social = models.CharField(max_length=255, blank=True, default="")
    rfc = models.CharField(max_length=20, blank=True, default="")
    phone = models.CharField(max_length=30, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    address = models.CharField(max_length=255, blank=True, default="")
    zip_code = models.CharField(max_length=10, blank=True, default="")
    colonia = models.CharField(max_length=120, blank=True, default="")
    city = models.CharField(max_length=120, blank=True, default="")
    state = models.CharField(max_length=120, blank=True, default="")
    country = models.CharField(max_length=120, blank=True, default="México")
    logo_url = models.URLField(blank=True, default="")
    theme_id = models.CharField(max_length=40, default="blue")
    ticket_footer_message = models.CharField(max_length=255, blank=True, default="")

    # Pricing tiers
    medium_threshold = models.IntegerField(default=6)
    wholesale_threshold = models.IntegerField(default=12)

    # Loyalty earn rate (percent of sale amount)
    loyalty_percentage = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal("1.00")
    )

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Store settings"
        verbose_name_plural = "Store settings"

    def clean(self):
        if self.medium_threshold is None or int(self.medium_threshold) <= 0:
            raise ValidationError({"medium_threshold": "Must be greater than zero"})
        if self.wholesale_threshold is None or int(self.wholesale_threshold) <= 0:
            raise ValidationError({"wholesale_threshold": "Must be greater than zero"})
        if int(self.medium_threshold) > int(self.wholesale_threshold):
            raise ValidationError("medium_threshold cannot exceed wholesale_threshold")

        pct = Decimal(str(self.loyalty_percentage if self.loyalty_percentage is not None else "0"))
        if pct < Decimal("0") or pct > Decimal("100"):
            raise ValidationError({"loyalty_percentage": "Must be between 0 and 100"})

    def save(self, *args, **kwargs):
        self.pk = self.SINGLETON_PK
        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Store settings cannot be deleted")

    def __str__(self):
        return self.company_name
