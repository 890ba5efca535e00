"""
Application package.

``core`` holds configuration, logging, errors and the data store;
``services`` the business logic for users and exercises; ``schemas``
the pydantic request and response models; ``api`` the HTTP routes.
"""

from .main import app, create_app  # noqa: F401
