"""User domain models for LocalGrid.

Users either offer skills (Skill Providers, who publish listings) or book
them (Project Creators). Platform roles are independent of that choice:
admins can act on either side. Every user carries a denormalized credit
balance that is only ever mutated together with ledger rows in
``apps.credits``.
"""

from __future__ import annotations

from typing import Any

from django.contrib.auth.models import AbstractUser, BaseUserManager  # type: ignore
from django.db import models  # type: ignore
from django.db.models import Q  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class CustomUserManager(BaseUserManager):
    """User manager that logs in by email."""

    use_in_migrations = True

    def _create_user(self, email: str, password: str | None, **extra_fields: Any):
        if not email:
            raise ValueError("Email is required to create a user.")
        email = self.normalize_email(email)

        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_user(self, email: str, password: str | None = None, **extra_fields: Any):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        extra_fields.setdefault("role", CustomUser.RoleChoices.USER)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email: str, password: str | None = None, **extra_fields: Any):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("role", CustomUser.RoleChoices.ADMIN)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self._create_user(email, password, **extra_fields)


class CustomUser(AbstractUser):
    """Marketplace user with a side of the market, a role and a credit balance."""

    class UserTypeChoices(models.TextChoices):
        SKILL_PROVIDER = "SKILL_PROVIDER", _("Skill provider")
        PROJECT_CREATOR = "PROJECT_CREATOR", _("Project creator")

    class RoleChoices(models.TextChoices):
        USER = "USER", _("User")
        MODERATOR = "MODERATOR", _("Moderator")
        ADMIN = "ADMIN", _("Admin")

    username = models.CharField(
        _("Display name"),
        max_length=150,
        blank=True,
        help_text=_("Optional, shown in notifications."),
    )
    email = models.EmailField(_("Email"), unique=True)
    name = models.CharField(_("Name"), max_length=255, blank=True)
    bio = models.TextField(_("Bio"), blank=True)
    user_type = models.CharField(
        _("User type"),
        max_length=20,
        choices=UserTypeChoices.choices,
        null=True,
        blank=True,
    )
    role = models.CharField(
        _("Role"),
        max_length=20,
        choices=RoleChoices.choices,
        default=RoleChoices.USER,
    )
    credits = models.IntegerField(
        _("Credits"),
        default=0,
        help_text=_("Cached sum of the user's credit transactions."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CustomUserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS: list[str] = []

    class Meta:
        verbose_name = _("User")
        verbose_name_plural = _("Users")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(credits__gte=0),
                name="user_credits_non_negative",
            ),
        ]

    def __str__(self) -> str:
        return self.display_name

    @property
    def display_name(self) -> str:
        return self.name or self.username or self.email

    # --- Domain helpers -----------------------------------------------------
    def is_admin(self) -> bool:
        return self.role == self.RoleChoices.ADMIN or self.is_superuser

    def is_moderator(self) -> bool:
        return self.role == self.RoleChoices.MODERATOR

    def is_skill_provider(self) -> bool:
        return self.user_type == self.UserTypeChoices.SKILL_PROVIDER

    def is_project_creator(self) -> bool:
        return self.user_type == self.UserTypeChoices.PROJECT_CREATOR


User = CustomUser
