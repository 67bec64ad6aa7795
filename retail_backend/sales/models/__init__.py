from .folio_sequence import FolioSequence
from .sale import PAYMENT_METHOD_CHOICES, Sale

__all__ = ["Sale", "FolioSequence", "PAYMENT_METHOD_CHOICES"]
