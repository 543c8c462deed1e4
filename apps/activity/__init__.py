# apps/activity/__init__.py

"""
Activity - append-only audit trail of board mutations

Features:
- Transactional log writer used by BoardService
- Paginated, newest-first activity feed per board
"""
