"""Agora — discussion forum backend.

Questions, answers, and likes over a REST API, with a WebSocket channel
that pushes live updates to every connected client whenever content
changes.
"""

__version__ = "0.1.0"
