from django.contrib.contenttypes.models import ContentType
from .models import DomainActivity


class ActivityService:
    @staticmethod
    def log_activity(actor, verb, target, hackathon_id="", metadata=None):
        """
        Logs a domain activity.

        Call inside the transaction that performs the action so the ledger
        never records a transition that was rolled back.
        """
        if metadata is None:
            metadata = {}

        # Create the immutable record
        return DomainActivity.objects.create(
            actor=actor,
            verb=verb,
            content_type=ContentType.objects.get_for_model(target),
            object_id=target.pk,
            hackathon_id=hackathon_id or "",
            metadata=metadata,
        )
