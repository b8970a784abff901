"""Account domain constants."""

from django.db import models


class Role(models.TextChoices):
    VIEWER = "viewer", "Viewer"
    ADMIN = "admin", "Admin"


INVALID_CREDENTIALS_MESSAGE = "Invalid username or password"
