"""
Top-level package for the Exercise Tracker API.

All functionality lives in the ``app`` subpackage; import the ASGI
application as ``exercise_tracker_api.app.main:app``.
"""

__all__ = []
