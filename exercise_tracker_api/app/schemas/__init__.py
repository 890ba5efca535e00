"""
Pydantic schema definitions for API payloads.

Schemas are kept separate from the stored documents so that the wire
representation (``_id`` keys, formatted dates) can differ from what the
data store holds.
"""
