"""Shared type aliases for readability and contract enforcement.

Timestamps travel through every layer as either aware datetimes or unix
seconds. The aliases here keep the two apart in signatures.
"""
from __future__ import annotations

from datetime import datetime
from typing import NewType, TypeAlias, Union

Timestamp = NewType("Timestamp", float)

TimeLike: TypeAlias = Union[datetime, float, int]
