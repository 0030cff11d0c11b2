"""User persistence models for Nestly.

Authentication (passwords, sessions, tokens) is owned by the transport
layer; this table only stores the identity attributes the booking core
needs: contact data, role and the banned/active flags.
"""

from __future__ import annotations

import uuid

from django.core.validators import RegexValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


PHONE_VALIDATOR = RegexValidator(
    regex=r"^\+?\d{7,15}$",
    message=_("Invalid phone format. Use the international format without spaces."),
)


class User(models.Model):
    """Platform account: guest, host or administrator."""

    class Role(models.TextChoices):
        GUEST = "guest", _("Guest")
        HOST = "host", _("Host")
        ADMIN = "admin", _("Administrator")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(_("Email"), unique=True)
    phone = models.CharField(
        _("Phone"),
        max_length=20,
        blank=True,
        validators=[PHONE_VALIDATOR],
    )
    role = models.CharField(max_length=10, choices=Role.choices, default=Role.GUEST)
    is_banned = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name = _("User")
        verbose_name_plural = _("Users")
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["role"], name="user_role_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.email} ({self.role})"

    @staticmethod
    def normalize_phone(phone: str) -> str:
        """Strip spaces and dashes so phones are stored uniformly."""
        return phone.replace(" ", "").replace("-", "")
