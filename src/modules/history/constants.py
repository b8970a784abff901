"""History domain constants."""

from django.db import models


class HistoryEventType(models.TextChoices):
    STATUS_CHANGE = "status_change", "Status change"
    NOTE = "note", "Note"
    VIEW = "view", "View"
    MANUAL = "manual", "Manual"
