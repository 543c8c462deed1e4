# apps/board/__init__.py

"""
Board - collaborative Kanban boards

Features:
- REST API for boards, lists, tasks, assignments, labels and comments
- BoardService: access checks, positions and transactional activity log
- WebSocket fan-out of board events with presence tracking
"""
