from django.db import models

from src.common.models import BaseModel


from django.contrib.auth.models import (
    AbstractBaseUser,
    PermissionsMixin,
    BaseUserManager,
)


class UserRole(models.TextChoices):
    ADMIN = "ADMIN", "Administrator"
    USER = "USER", "User"


class UserStatus(models.TextChoices):
    ACTIVE = "ACTIVE", "Active"
    INACTIVE = "INACTIVE", "Inactive"
    LOCKED = "LOCKED", "Locked"


class UserManager(BaseUserManager):
    def create_user(self, username, password=None, **extra_fields):
        if not username:
            raise ValueError("Username is required")

        username = self.model.normalize_username(username)
        if "email" in extra_fields:
            extra_fields["email"] = self.normalize_email(extra_fields["email"])
        user = self.model(username=username, **extra_fields)

        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)

        return user

    def create_superuser(self, username, password=None, **extra_fields):
        extra_fields.update(
            {
                "is_staff": True,
                "is_superuser": True,
                "role": UserRole.ADMIN,
                "status": UserStatus.ACTIVE,
            }
        )
        return self.create_user(username, password, **extra_fields)


class User(AbstractBaseUser, BaseModel, PermissionsMixin):
    """Personnel de l'organisation : demandeurs, gardiens de sceaux, administrateurs"""

    # Identification
    username = models.CharField(max_length=150, unique=True, db_index=True)
    real_name = models.CharField(max_length=150, blank=True)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=50, blank=True)

    # Organisation
    department = models.CharField(max_length=100, blank=True)
    position = models.CharField(max_length=100, blank=True)

    # Rôle et statut
    role = models.CharField(max_length=20, choices=UserRole.choices, default=UserRole.USER)
    status = models.CharField(max_length=20, choices=UserStatus.choices, default=UserStatus.ACTIVE)

    # Django required
    is_staff = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)

    objects = UserManager()

    USERNAME_FIELD = "username"
    REQUIRED_FIELDS = []

    class Meta:
        db_table = "users"
        verbose_name = "User"
        verbose_name_plural = "Users"

    def __str__(self):
        return f"{self.username} [{self.role}]"

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def display_name(self) -> str:
        return self.real_name or self.username

    def save(self, *args, **kwargs):
        self.is_active = self.status == UserStatus.ACTIVE
        super().save(*args, **kwargs)
