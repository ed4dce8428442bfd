from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from mcpdesk.errors import MCPDeskError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Outcome of a core operation: either a value or an :class:`MCPDeskError`.

    Example:
        result = await registry.connect_and_register(identity)
        if result.ok:
            show(result.value)
        else:
            report(result.error)
    """
    value: Optional[T] = None
    error: Optional[MCPDeskError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: MCPDeskError) -> "Result[T]":
        return cls(error=error)

    def unwrap(self) -> T:
        """Return the value, raising the carried error on failure."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]

    def __repr__(self) -> str:
        if self.ok:
            return f"Result(ok, value={self.value!r})"
        return f"Result(error={type(self.error).__name__}: {self.error})"
