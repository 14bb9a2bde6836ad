from django.contrib.contenttypes.models import ContentType

from .models import Activity


def log_activity(user, action_type, instance, description=None):
    """Record an activity entry for ``instance``.

    ``user`` may be a user object, a user id or ``None`` for system writes.
    By default a generic description is generated; callers may supply a
    custom ``description`` when more context is helpful.
    """
    if description is None:
        description = f"{instance.__class__.__name__} {instance} was {action_type}."

    return Activity.objects.create(
        account_id=instance.account_id,
        user_id=getattr(user, 'pk', user),
        action_type=action_type,
        description=description[:255],
        content_type=ContentType.objects.get_for_model(instance),
        object_id=instance.pk,
    )
