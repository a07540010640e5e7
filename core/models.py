#  cos-backend/core/models.py
from django.db import models
from django.conf import settings
from django.contrib.contenttypes.fields import GenericForeignKey
from django.contrib.contenttypes.models import ContentType


class DomainActivity(models.Model):
    """
    Immutable ledger of all business-significant actions in the system.
    Source of truth for: team history, moderation review, analytics.
    """
    # Who did it? Null for system actions (scheduled audits).
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="activities",
    )

    # What happened? (e.g., 'team.joined')
    verb = models.CharField(max_length=64, db_index=True)

    # To what? (Generic Foreign Key)
    # The target may be deleted later (dissolved teams); the ledger row stays.
    content_type = models.ForeignKey(ContentType, on_delete=models.CASCADE)
    object_id = models.PositiveBigIntegerField()
    content_object = GenericForeignKey("content_type", "object_id")

    # Scoping: hackathon period the action belongs to, blank if none
    hackathon_id = models.CharField(max_length=32, blank=True, default="", db_index=True)

    # Extra data (Snapshot logic, e.g., member ids at time of logging)
    metadata = models.JSONField(default=dict, blank=True)

    timestamp = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        verbose_name_plural = "Domain Activities"
        ordering = ["-timestamp"]
        indexes = [
            models.Index(fields=["hackathon_id", "-timestamp"], name="activity_period_ts_idx"),
            models.Index(fields=["actor", "-timestamp"], name="activity_actor_ts_idx"),      # Profile feed
        ]

    def __str__(self):
        return f"{self.actor} - {self.verb} - {self.timestamp}"
