"""Tests for structured error types."""
from dungeon_loop.core.errors import (
    DungeonLoopError,
    ErrorCode,
    GenerationError,
    InvalidDifficultyError,
    ValidationError,
    WeightedTableError,
)


class TestErrorTypes:
    """Tests for error codes, statuses and encoding."""

    def test_to_dict(self):
        """Errors encode under an "error" key."""
        data = ValidationError("difficulty", "Too high", 500).to_dict()
        assert data["error"]["code"] == "VALIDATION_ERROR"
        assert data["error"]["details"] == {"field": "difficulty", "value": "500"}
        assert data["error"]["recoverable"] is True

    def test_invalid_difficulty(self):
        """Bad difficulty is a client error."""
        error = InvalidDifficultyError(0)
        assert isinstance(error, GenerationError)
        assert error.code == ErrorCode.INVALID_DIFFICULTY
        assert error.http_status == 400
        assert error.details == {"difficulty": "0"}

    def test_weighted_table_error_not_recoverable(self):
        """Malformed tables are programming errors."""
        error = WeightedTableError("Weighted table is empty")
        assert error.code == ErrorCode.WEIGHTED_TABLE_INVALID
        assert error.recoverable is False
        assert error.http_status == 500
        assert error.details == {}

    def test_generation_error_defaults(self):
        """Generation errors default to a server error."""
        error = GenerationError()
        assert error.http_status == 500
        assert error.code == ErrorCode.GENERATION_FAILED
        assert isinstance(error, DungeonLoopError)

    def test_repr(self):
        """repr names the class and code."""
        assert repr(GenerationError("boom")) == "GenerationError(GENERATION_FAILED: 'boom')"
