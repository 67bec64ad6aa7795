# users/management/commands/seed_users.py

from __future__ import annotations

from dataclasses import dataclass

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from permissions.roles import ROLE_ADMIN, ROLE_SELLER


@dataclass(frozen=True)
class SeedUserSpec:
    username: str
    role: str
    email: str
    name: str


SEED_USERS = [
    SeedUserSpec("admin", ROLE_ADMIN, "admin@example.com", "Administrador"),
    SeedUserSpec("vendedor", ROLE_SELLER, "vendedor@example.com", "Vendedor Mostrador"),
]


class Command(BaseCommand):
    help = "Seed demo staff users (admin + seller)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--password",
            type=str,
            default="Pass1234!",
            help="Password for seeded users (default: Pass1234!)",
        )
        parser.add_argument(
            "--force-password",
            action="store_true",
            help="Reset password for existing seeded users too.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        password = options.get("password") or ""
        force_password = bool(options.get("force_password"))

        if len(password) < 6:
            raise CommandError("--password must be at least 6 characters.")

        User = get_user_model()

        created_count = 0
        updated_count = 0

        for spec in SEED_USERS:
            is_admin = spec.role == ROLE_ADMIN

            user = User.objects.filter(email=spec.email).first()
            if user is None:
                User.objects.create_user(
                    email=spec.email,
                    password=password,
                    username=spec.username,
                    name=spec.name,
                    role=spec.role,
                    is_staff=is_admin,
                    is_superuser=is_admin,
                )
                created_count += 1
                continue

            user.role = spec.role
            user.name = spec.name
            user.is_active = True
            if force_password:
                user.set_password(password)
            user.save()
            updated_count += 1

        self.stdout.write(
            self.style.SUCCESS(
                f"Seeded users: created={created_count} updated={updated_count}"
            )
        )
