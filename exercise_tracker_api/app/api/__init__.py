"""
HTTP routes of the exercise tracker.

``router.py`` exposes a single ``router`` that includes the domain
routers from ``endpoints``; ``deps.py`` holds the dependencies they
share.
"""
