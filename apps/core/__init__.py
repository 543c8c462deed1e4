# apps/core/__init__.py

"""
Core - base application of the task board

Contains:
- Data model (User, Board, BoardMember, TaskList, Task, Label, Comment, ActivityLog)
- Access control (BoardPermissions)
- Position allocator
- Error taxonomy and the DRF exception handler
- Authentication service and websocket JWT middleware
"""
