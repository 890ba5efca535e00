"""
Endpoint modules for the exercise API.

Each module defines an ``APIRouter`` for one domain (users, exercises).
The routers are aggregated in ``api/router.py``.
"""
