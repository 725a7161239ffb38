from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict


class ActionResult(BaseModel):
    """
    Uniform outcome of every service action.

    Failures carry a human-readable ``error`` and, for validation failures,
    per-field messages. Successful results may carry extra keys such as
    ``project_id``.
    """
    model_config = ConfigDict(extra="allow")

    success: bool
    error: Optional[str] = None
    field_errors: Optional[Dict[str, List[str]]] = None

    @classmethod
    def ok(cls, **data) -> "ActionResult":
        return cls(success=True, **data)

    @classmethod
    def fail(cls, error: str, field_errors: Optional[Dict[str, List[str]]] = None) -> "ActionResult":
        return cls(success=False, error=error, field_errors=field_errors)
