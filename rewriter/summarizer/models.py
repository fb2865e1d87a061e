"""Domain models shared across backend adapters."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict


class BackendType(str, Enum):
    OLLAMA = "ollama"
    OPENAI = "openai"


@dataclass(slots=True)
class BackendRequest:
    url: str
    payload: Dict[str, Any] = field(default_factory=dict)
