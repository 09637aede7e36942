from django.conf import settings
from rest_framework.exceptions import ValidationError


def validate_transition(instance, target):
    """
    Check that ``instance`` may move to status ``target``.

    Models declare ``STATUS_CHOICES`` and ``ALLOWED_TRANSITIONS``
    (status -> set of reachable statuses). Staying on the same status is
    always allowed. Illegal moves are only rejected while
    EMENU_ENFORCE_STATUS_TRANSITIONS is on; unknown statuses always are.
    """
    valid_statuses = {choice[0] for choice in instance.STATUS_CHOICES}

    if target not in valid_statuses:
        raise ValidationError({
            "status": [f"Invalid status value. Allowed: {', '.join(sorted(valid_statuses))}"]
        })

    current = instance.status
    if current == target or not settings.EMENU_ENFORCE_STATUS_TRANSITIONS:
        return target

    if target not in instance.ALLOWED_TRANSITIONS.get(current, ()):
        raise ValidationError({
            "status": [f"Cannot change {instance._meta.verbose_name} status from {current} to {target}"]
        })

    return target
