from __future__ import annotations

from enum import Enum


class PickType(str, Enum):
    OVER = "OVER"
    UNDER = "UNDER"


class BetStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"
    COMPLETED = "COMPLETED"


class Outcome(str, Enum):
    WIN = "WIN"
    LOSS = "LOSS"
    TBD = "TBD"


def sql_in(column: str, enum_cls: type[Enum]) -> str:
    values = ", ".join(f"'{member.value}'" for member in enum_cls)
    return f"{column} IN ({values})"
