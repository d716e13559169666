"""
Dungeon Loop - Error Types

Every error raised by the generator carries a code, a message, optional
details and a hint the API client can show. The HTTP layer turns them
into JSON bodies via middleware.error_handler.
"""
from typing import Dict, Any, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Machine-readable error codes."""
    UNKNOWN = "UNKNOWN"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"

    GENERATION_FAILED = "GENERATION_FAILED"
    INVALID_DIFFICULTY = "INVALID_DIFFICULTY"
    WEIGHTED_TABLE_INVALID = "WEIGHTED_TABLE_INVALID"


class DungeonLoopError(Exception):
    """
    Base class for generator errors.

    Attributes:
        code: ErrorCode for clients that branch on the failure
        message: Text for humans
        details: Extra context, JSON-safe
        recoverable: False when retrying the same request cannot help
        recovery_hint: Suggested fix, if any
        http_status: Status code used by the API layer
    """

    def __init__(
        self,
        code: ErrorCode = ErrorCode.UNKNOWN,
        message: str = "Dungeon Loop error",
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = True,
        recovery_hint: Optional[str] = None,
        http_status: int = 500
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable
        self.recovery_hint = recovery_hint
        self.http_status = http_status

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "details": self.details,
                "recoverable": self.recoverable,
                "recovery_hint": self.recovery_hint,
            }
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code.value}: {self.message!r})"


# =============================================================================
# Generation
# =============================================================================

class GenerationError(DungeonLoopError):
    """A dungeon could not be built."""

    def __init__(
        self,
        message: str = "Dungeon generation failed",
        code: ErrorCode = ErrorCode.GENERATION_FAILED,
        **kwargs
    ):
        super().__init__(code=code, message=message, **kwargs)


class InvalidDifficultyError(GenerationError):
    """Difficulty is not an integer of at least 1."""

    def __init__(self, difficulty: Any):
        super().__init__(
            f"Difficulty must be an integer >= 1, got {difficulty!r}",
            code=ErrorCode.INVALID_DIFFICULTY,
            details={"difficulty": str(difficulty)},
            http_status=400,
            recovery_hint="Request a difficulty of 1 or higher"
        )


class WeightedTableError(GenerationError):
    """
    A weighted table is empty, has a negative weight or sums to zero.

    Tables are static tuning data, so this always means a broken table and
    is never recoverable by retrying.
    """

    def __init__(self, reason: str, table: Optional[Dict[str, Any]] = None):
        super().__init__(
            reason,
            code=ErrorCode.WEIGHTED_TABLE_INVALID,
            details={"table": table} if table is not None else {},
            recoverable=False,
            recovery_hint="Fix the weights in the tuning table"
        )


# =============================================================================
# Request validation
# =============================================================================

class ValidationError(DungeonLoopError):
    """A request field is out of range or unknown."""

    def __init__(self, field: str, message: str, value: Any = None):
        details = {"field": field}
        if value is not None:
            details["value"] = str(value)
        super().__init__(
            code=ErrorCode.VALIDATION_ERROR,
            message=message,
            details=details,
            http_status=400,
            recovery_hint=f"Check the value for '{field}'"
        )
