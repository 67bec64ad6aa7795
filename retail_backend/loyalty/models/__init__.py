from .loyalty_transaction import LoyaltyTransaction

__all__ = ["LoyaltyTransaction"]
