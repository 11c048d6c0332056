from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class GenerationRequest:
    prompt: str
    api_key: str = field(repr=False)   # never printed
    model: Optional[str] = None        # backend default when None
