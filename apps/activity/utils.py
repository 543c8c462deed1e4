# apps/activity/utils.py

import logging
from typing import Dict, Optional

from django.db import transaction
from django.forms.models import model_to_dict

from apps.core.models import ActivityLog

logger = logging.getLogger(__name__)


def snapshot(instance, exclude=()) -> Dict:
    """
    Serializable copy of a model row for the changes payload

    Foreign keys are stored as their raw ids (list -> list_id).
    """
    data = model_to_dict(instance, exclude=['labels', *exclude])
    for field in instance._meta.concrete_fields:
        if field.is_relation and field.name in data:
            data[field.attname] = data.pop(field.name)
    data['id'] = instance.pk
    return data


def log_activity(board_id: int, user, action: str, entity_type: str,
                 entity_id: int, changes: Optional[Dict] = None) -> ActivityLog:
    """
    Appends one entry to the activity log

    Must run inside the transaction of the mutation it describes: a failed
    write raises and rolls the mutation back with it.
    """
    if not transaction.get_connection().in_atomic_block:
        raise RuntimeError('log_activity must run inside transaction.atomic()')

    entry = ActivityLog.objects.create(
        board_id=board_id,
        user=user,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        changes=changes,
    )
    logger.info(f"📝 {action} {entity_type}#{entity_id} on board {board_id} by {getattr(user, 'username', None)}")
    return entry
