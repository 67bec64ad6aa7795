# store/services/context.py

"""
POS APPLICATION CONTEXT

Every core operation (cart, settlement, folio, loyalty) receives a PosContext
explicitly instead of reading shared state:

- actor: the authenticated staff user performing the operation
- settings: an immutable snapshot of the tier thresholds and earn rate,
  taken once at the start of the request
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from store.services.settings_service import get_store_settings


@dataclass(frozen=True)
class SettingsSnapshot:
    medium_threshold: int = 6
    wholesale_threshold: int = 12
    loyalty_percentage: Decimal = Decimal("1.00")

    @classmethod
    def from_model(cls, obj) -> "SettingsSnapshot":
        return cls(
            medium_threshold=int(obj.medium_threshold),
            wholesale_threshold=int(obj.wholesale_threshold),
            loyalty_percentage=Decimal(str(obj.loyalty_percentage)),
        )


@dataclass(frozen=True)
class PosContext:
    actor: object
    settings: SettingsSnapshot

    @property
    def actor_name(self) -> str:
        actor = self.actor
        if actor is None:
            return ""
        name = getattr(actor, "display_name", None)
        return str(name or getattr(actor, "username", "") or "")


def build_context(user, *, settings: SettingsSnapshot | None = None) -> PosContext:
    if settings is None:
        settings = SettingsSnapshot.from_model(get_store_settings())
    return PosContext(actor=user, settings=settings)
