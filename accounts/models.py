from django.db import models
import uuid
from django.utils import timezone
from django.contrib.auth.models import AbstractUser


class Role(models.TextChoices):
    ADMIN     = "ADMIN",     "Admin"
    HR        = "HR",        "HR"
    EVALUATOR = "EVALUATOR", "Evaluator"
    EMP       = "EMP",       "Employee"


class User(AbstractUser):
    user_id    = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name       = models.CharField(max_length=120)
    email      = models.EmailField(unique=True)
    phone      = models.CharField(max_length=30, blank=True)
    avatar     = models.URLField(blank=True)
    role       = models.CharField(max_length=10, choices=Role.choices, default=Role.EMP)
    position   = models.CharField(max_length=120, blank=True)
    # storage path / URL of the uploaded e-signature; empty means "no signature on file"
    signature  = models.CharField(max_length=255, blank=True, default="")
    # one-time dialog flags for the current login; cleared on sign-in and sign-out
    onboarding_flags = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def has_signature(self) -> bool:
        return bool((self.signature or "").strip())

    def __str__(self):
        return self.name or self.get_full_name() or self.username
