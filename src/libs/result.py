"""Result type for use case outcomes

Use cases never raise business errors to their callers; they return a
Result holding either a value or an Error with a machine-readable code.
"""

from typing import Any, Dict, Generic, Optional, TypeVar
from pydantic import BaseModel, Field

T = TypeVar("T")


class Error(BaseModel):
    """Machine-readable error returned by a use case"""

    code: str = Field(..., description="Stable error code (e.g., OVERPAYMENT)")
    message: str = Field(..., description="Human-readable message")
    reason: Optional[str] = Field(default=None, description="Underlying cause")
    details: Dict[str, Any] = Field(
        default_factory=dict,
        description="Structured context (e.g., balance_due for overpayments)"
    )


class Result(Generic[T]):
    """Either a successful value or an Error, never both"""

    __slots__ = ("value", "error")

    def __init__(self, value: Optional[T] = None, error: Optional[Error] = None):
        self.value = value
        self.error = error

    def is_ok(self) -> bool:
        return self.error is None

    def is_err(self) -> bool:
        return self.error is not None

    def __repr__(self) -> str:
        if self.is_err():
            return f"Result(error={self.error.code})"
        return f"Result(value={self.value!r})"


class Return:
    """Constructors for Result values"""

    @staticmethod
    def ok(value: T) -> Result[T]:
        return Result(value=value)

    @staticmethod
    def err(error: Error) -> Result[Any]:
        return Result(error=error)
