"""
Service layer.

Each service receives the shared ``Database`` at construction and
raises the errors from ``core.errors``; handlers never touch the data
store directly.
"""
