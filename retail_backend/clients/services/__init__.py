from .client_service import (
    ClientError,
    ClientInUseError,
    ClientPermissionError,
    DuplicatePhoneError,
    ReservedClientError,
    WalletActivationError,
    approve_wallet_activation,
    create_client,
    deactivate_wallet,
    delete_client,
    request_wallet_activation,
    update_client,
)

__all__ = [
    "create_client",
    "update_client",
    "delete_client",
    "request_wallet_activation",
    "approve_wallet_activation",
    "deactivate_wallet",
    "ClientError",
    "ClientPermissionError",
    "DuplicatePhoneError",
    "ReservedClientError",
    "ClientInUseError",
    "WalletActivationError",
]
