from .client import GENERAL_CLIENT_ID, GENERAL_CLIENT_NAME, Client

__all__ = ["Client", "GENERAL_CLIENT_ID", "GENERAL_CLIENT_NAME"]
