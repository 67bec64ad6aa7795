from .store_settings import StoreSettingsSerializer

__all__ = ["StoreSettingsSerializer"]
