# apps/client/__init__.py

"""
Client - framework-free mirror of a board for API clients

BoardStore applies optimistic local mutations, reverts them when the REST
call fails, and converges with peers by applying relayed websocket events.
"""

from .store import BoardStore

__all__ = ['BoardStore']
