from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RequestContext:
    """Per-request values passed explicitly into use cases for logging"""

    request_id: Optional[str] = None

    def tag(self) -> str:
        return f"[{self.request_id}] " if self.request_id else ""


EMPTY_CONTEXT = RequestContext()
