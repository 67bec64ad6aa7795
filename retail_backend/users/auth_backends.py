"""
PATH: users/auth_backends.py

AUTH BACKEND: Email OR Username login

- An identifier containing "@" is looked up as email, otherwise as username.
- Supplying both email= and username= explicitly fails authentication.
- Inactive users never authenticate.
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.contrib.auth.backends import BaseBackend

User = get_user_model()


class EmailOrUsernameBackend(BaseBackend):
    def authenticate(self, request, username=None, password=None, **kwargs):
        email_kw = (kwargs.get("email") or "").strip()
        username_kw = (kwargs.get("username") or "").strip()

        if email_kw and username_kw:
            return None

        identifier = (username or email_kw or username_kw or "").strip()
        if not identifier or password is None:
            return None

        field = "email__iexact" if "@" in identifier else "username__iexact"
        user = User.objects.filter(**{field: identifier}).first()

        if user is None or not user.is_active:
            return None

        return user if user.check_password(password) else None

    def get_user(self, user_id):
        return User.objects.filter(pk=user_id).first()
