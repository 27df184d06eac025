"""
Result types for operations that fail in expected ways.

Usage::

    result = await service.login(email, password)
    match result:
        case Success(value=session):
            ...
        case Failure(error=error):
            ...
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True)
class Failure(Generic[E]):
    error: E


Result = Union[Success[T], Failure[E]]
