"""Small helpers shared by test modules."""

from __future__ import annotations


def raise_error(exception: Exception):
    """Raise from inside an expression (lambdas cannot contain raise)."""
    raise exception
