"""Argument checks for programmer errors: raised immediately, never turned into Error reasons."""

from __future__ import annotations

from typing import Any, TypeVar

T = TypeVar("T")


def require(value: T | None, name: str) -> T:
    if value is None:
        raise TypeError(f"{name} must not be None")
    return value


def require_message(message: Any, name: str = "message") -> str:
    require(message, name)
    if not isinstance(message, str):
        raise TypeError(f"{name} must be a string, got {type(message).__name__}")
    if not message:
        raise ValueError(f"{name} must not be empty")
    return message
