# clients/services/client_service.py

"""
CLIENT SERVICE

Responsibilities:
- Register / edit / delete clients with the counter rules:
  - phone numbers are unique across clients
  - nobody can register another "PÚBLICO GENERAL"
  - new clients always start with an inactive wallet
  - the reserved general client is never deleted
- Keep the client_name snapshot on sale lines in sync after a rename
- Wallet activation workflow (request -> approve -> deactivate)
"""

from __future__ import annotations

import logging
import re

from django.db import transaction
from django.db.models import ProtectedError

from clients.models import Client
from permissions.roles import (
    PERM_CLIENTS_MANAGE,
    PERM_CLIENTS_READ,
    has_permission,
    is_admin,
)

logger = logging.getLogger(__name__)

MIN_WALLET_PHONE_DIGITS = 10

RESERVED_NAME_MARKERS = ("PÚBLICO GENERAL", "PUBLICO GENERAL")

GENERIC_WALLET_NAMES = (
    "publico general",
    "público general",
    "mostrador",
    "ventas",
    "general",
    "cliente general",
)

EDITABLE_FIELDS = {
    "name",
    "rfc",
    "email",
    "phone",
    "address",
    "zip_code",
    "colonia",
    "city",
    "state",
}


class ClientError(ValueError):
    pass


class ClientPermissionError(ClientError):
    pass


class DuplicatePhoneError(ClientError):
    pass


class ReservedClientError(ClientError):
    pass


class ClientInUseError(ClientError):
    pass


class WalletActivationError(ClientError):
    pass


def normalize_phone(value) -> str:
    return re.sub(r"\D", "", str(value or ""))


def _require(actor, permission: str) -> None:
    if not has_permission(actor, permission):
        raise ClientPermissionError(f"Missing permission: {permission}")


def _phone_taken(phone: str, *, exclude_id=None) -> Client | None:
    if not phone:
        return None
    qs = Client.objects.filter(phone=phone)
    if exclude_id is not None:
        qs = qs.exclude(pk=exclude_id)
    return qs.first()


def _is_reserved_name(name: str) -> bool:
    upper = (name or "").upper()
    return any(marker in upper for marker in RESERVED_NAME_MARKERS)


@transaction.atomic
def create_client(*, actor, name: str, **fields) -> Client:
    _require(actor, PERM_CLIENTS_MANAGE)

    name = (name or "").strip()
    if not name:
        raise ClientError("Client name is required")

    if _is_reserved_name(name):
        raise ReservedClientError('Cannot register a new client named "PÚBLICO GENERAL".')

    unknown = set(fields) - EDITABLE_FIELDS
    if unknown:
        raise ClientError(f"Unknown client fields: {sorted(unknown)}")

    phone = normalize_phone(fields.pop("phone", ""))
    existing = _phone_taken(phone)
    if existing:
        raise DuplicatePhoneError(
            f"A client with phone {phone} already exists ({existing.name})."
        )

    client = Client.objects.create(
        name=name,
        phone=phone,
        wallet_status=Client.WALLET_INACTIVE,
        **fields,
    )

    logger.info("Client created", extra={"client_id": str(client.id)})
    return client


@transaction.atomic
def update_client(*, actor, client: Client, **changes) -> Client:
    _require(actor, PERM_CLIENTS_MANAGE)

    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise ClientError(f"Unknown client fields: {sorted(unknown)}")

    client = Client.objects.select_for_update().get(pk=client.pk)

    if "name" in changes:
        new_name = (changes["name"] or "").strip()
        if not new_name:
            raise ClientError("Client name is required")
        if not client.is_general and _is_reserved_name(new_name):
            raise ReservedClientError('Only the general client can be named "PÚBLICO GENERAL".')
        changes["name"] = new_name

    if "phone" in changes:
        phone = normalize_phone(changes["phone"])
        existing = _phone_taken(phone, exclude_id=client.pk)
        if existing:
            raise DuplicatePhoneError(
                f"A client with phone {phone} already exists ({existing.name})."
            )
        changes["phone"] = phone

    renamed = "name" in changes and changes["name"] != client.name

    for field, value in changes.items():
        setattr(client, field, value)
    client.save()

    if renamed:
        from sales.models import Sale

        Sale.objects.filter(client=client).update(client_name=client.name)

    return client


@transaction.atomic
def delete_client(*, actor, client: Client) -> None:
    _require(actor, PERM_CLIENTS_MANAGE)

    if client.is_general:
        raise ReservedClientError("The general client cannot be deleted.")

    try:
        client.delete()
    except ProtectedError as exc:
        raise ClientInUseError(
            "Client has sales or wallet history and cannot be deleted."
        ) from exc


# ============================================================
# WALLET ACTIVATION
# ============================================================


@transaction.atomic
def request_wallet_activation(*, actor, client: Client, phone: str | None = None) -> Client:
    """
    inactive -> pending.

    A pending wallet accrues points but cannot redeem until an admin approves.
    """
    _require(actor, PERM_CLIENTS_READ)

    client = Client.objects.select_for_update().get(pk=client.pk)

    if client.is_general:
        raise WalletActivationError("The general client cannot have a wallet.")

    lowered = client.name.lower()
    if any(generic in lowered for generic in GENERIC_WALLET_NAMES):
        raise WalletActivationError(
            "Wallets cannot be activated for generic clients. Register a specific client."
        )

    if client.wallet_status != Client.WALLET_INACTIVE:
        raise WalletActivationError(f"Wallet is already {client.wallet_status}.")

    if phone is not None:
        client.phone = normalize_phone(phone)

    if len(normalize_phone(client.phone)) < MIN_WALLET_PHONE_DIGITS:
        raise WalletActivationError("The client needs a valid phone number (10 digits).")

    duplicate = (
        Client.objects.filter(
            phone=client.phone,
            wallet_status__in=[Client.WALLET_PENDING, Client.WALLET_ACTIVE],
        )
        .exclude(pk=client.pk)
        .first()
    )
    if duplicate:
        raise WalletActivationError(
            f"This phone is already linked to another wallet ({duplicate.name})."
        )

    client.wallet_status = Client.WALLET_PENDING
    client.save(update_fields=["phone", "wallet_status", "updated_at"])

    logger.info("Wallet activation requested", extra={"client_id": str(client.id)})
    return client


@transaction.atomic
def approve_wallet_activation(*, actor, client: Client) -> Client:
    if not is_admin(actor):
        raise ClientPermissionError("Only an admin can approve wallet activation.")

    client = Client.objects.select_for_update().get(pk=client.pk)

    if client.wallet_status != Client.WALLET_PENDING:
        raise WalletActivationError("Only pending wallets can be approved.")

    client.wallet_status = Client.WALLET_ACTIVE
    client.save(update_fields=["wallet_status", "updated_at"])

    logger.info("Wallet activated", extra={"client_id": str(client.id)})
    return client


@transaction.atomic
def deactivate_wallet(*, actor, client: Client) -> Client:
    if not is_admin(actor):
        raise ClientPermissionError("Only an admin can deactivate a wallet.")

    client = Client.objects.select_for_update().get(pk=client.pk)
    client.wallet_status = Client.WALLET_INACTIVE
    client.save(update_fields=["wallet_status", "updated_at"])

    logger.info("Wallet deactivated", extra={"client_id": str(client.id)})
    return client
