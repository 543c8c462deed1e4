# apps/core/signals.py

import logging

from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import Board, BoardMember

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Board)
def ensure_owner_membership(sender, instance, created, **kwargs):
    """
    Keeps the owner enrolled as a BoardMember with role 'owner'

    Runs inside the caller's transaction, so a board is never visible
    without its owner membership.
    """
    member, added = BoardMember.objects.get_or_create(
        board=instance,
        user_id=instance.owner_id,
        defaults={'role': BoardMember.ROLE_OWNER},
    )
    if not added and member.role != BoardMember.ROLE_OWNER:
        member.role = BoardMember.ROLE_OWNER
        member.save(update_fields=['role'])

    if created:
        logger.debug(f"Owner {instance.owner_id} enrolled in board {instance.id}")
