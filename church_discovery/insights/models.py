from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class InsightKind(str, Enum):
    milestone = "milestone"
    encouragement = "encouragement"


class Accent(str, Enum):
    purple = "purple"
    blue = "blue"
    cyan = "cyan"
    green = "green"
    orange = "orange"
    pink = "pink"
    indigo = "indigo"


class Insight(BaseModel):
    kind: InsightKind
    title: str
    description: str
    accent: Accent
    icon: str
