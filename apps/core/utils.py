# apps/core/utils.py

from django.db.models import Max

from .models import Task, TaskList


def next_position(queryset) -> int:
    """
    Position for a new child appended after every existing sibling

    1 + max(position), or 0 when the parent has no children yet.
    Moves never renumber siblings, so positions may collide; readers
    order by (position, id).
    """
    current = queryset.aggregate(max_position=Max('position'))['max_position']
    if current is None:
        return 0
    return current + 1


def next_list_position(board_id: int) -> int:
    """Next position for a list inside a board"""
    return next_position(TaskList.objects.filter(board_id=board_id))


def next_task_position(list_id: int) -> int:
    """Next position for a task inside a list"""
    return next_position(Task.objects.filter(list_id=list_id))


def parse_pagination(params, default_limit: int = 10, max_limit: int = 100):
    """
    Reads ?page= and ?limit= from a QueryDict

    Invalid or non-positive values fall back to the defaults.
    Returns (page, limit, offset).
    """
    def _positive_int(value, default):
        try:
            number = int(value)
        except (TypeError, ValueError):
            return default
        return number if number > 0 else default

    page = _positive_int(params.get('page'), 1)
    limit = min(_positive_int(params.get('limit'), default_limit), max_limit)
    return page, limit, (page - 1) * limit
