# sales/models/folio_sequence.py

from django.db import models


class FolioSequence(models.Model):
    """
    Server-owned folio counter (single row, pk=1).

    Allocation locks the row (select_for_update) and increments it inside the
    confirming transaction, so two checkouts can never receive the same folio.
    A rolled-back checkout leaves a gap; folios are monotonic, not gap-free.
    """

    id = models.PositiveSmallIntegerField(primary_key=True, default=1, editable=False)
    last_value = models.PositiveIntegerField(default=0)

    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"FolioSequence({self.last_value})"
