# apps/__init__.py

"""
Task Board - Django applications

- core: models, authentication, permissions and error handling
- board: board REST API, mutation service and realtime websocket
- activity: per-board audit trail
- client: framework-free board store for API clients
"""

__version__ = '0.1.0'
