"""
Unit Tests for Core Exceptions

Tests for exception hierarchy, default messages and structured details.
"""

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from kvpipe.core.exceptions import (
    CommandError,
    CommandWriteError,
    ConfigurationError,
    ConnectionPoolError,
    DialError,
    KVPipeError,
    PipelineCommittedError,
    PipelineConnectionError,
    PipelineError,
    PoolClosedError,
    PoolExhaustedError,
    ReplyDecodeError,
)


@pytest.mark.unit
class TestKVPipeError:
    """Test the base exception class."""

    def test_base_error_creation(self):
        """Test that KVPipeError can be created."""
        error = KVPipeError("Test message")
        assert str(error) == "Test message"

    def test_base_error_with_details(self):
        """Test KVPipeError with additional details."""
        details = {"key": "value", "code": 123}
        error = KVPipeError("Test message", details=details)

        assert error.details == details
        assert error.message == "Test message"

    def test_details_are_copied(self):
        """Test that mutating the caller's dict does not leak into the error."""
        details = {"index": 1}
        error = KVPipeError("Test", details=details)
        details["index"] = 99

        assert error.details == {"index": 1}

    def test_base_error_default_values(self):
        """Test default values for KVPipeError."""
        error = KVPipeError("Test")
        assert error.details == {}  # Defaults to empty dict, not None

    def test_to_dict(self):
        """Test conversion to a log-friendly dict."""
        error = CommandError("ERR boom", details={"index": 2})

        assert error.to_dict() == {
            "error_type": "CommandError",
            "message": "ERR boom",
            "details": {"index": 2},
        }

    def test_with_context_chains(self):
        """Test that with_context adds details and returns the same instance."""
        error = ReplyDecodeError("bad reply")
        result = error.with_context(index=3, command="GET")

        assert result is error
        assert error.details == {"index": 3, "command": "GET"}

    def test_repr_includes_details(self):
        """Test repr output for debugging."""
        error = CommandError("ERR unknown command", details={"index": 2})
        assert repr(error) == "CommandError(message='ERR unknown command', details={'index': 2})"

    def test_repr_without_details(self):
        """Test repr omits empty details."""
        assert repr(KVPipeError("x")) == "KVPipeError(message='x')"

    def test_from_exception_wraps_original(self):
        """Test wrapping a redis-py exception with context."""
        original = RedisConnectionError("Connection refused")
        error = DialError.from_exception(original, address="localhost:6379")

        assert isinstance(error, DialError)
        assert error.message == "Connection refused"
        assert error.details["original_error"] == "ConnectionError"
        assert error.details["original_message"] == "Connection refused"
        assert error.details["address"] == "localhost:6379"

    def test_from_exception_custom_message(self):
        """Test that a custom message overrides the original one."""
        error = PipelineConnectionError.from_exception(OSError("reset"), message="Lost connection")
        assert error.message == "Lost connection"


@pytest.mark.unit
class TestConnectionPoolErrors:
    """Test pool exception types."""

    @pytest.mark.parametrize(
        "error_class, fragment",
        [
            (DialError, "dial"),
            (PoolClosedError, "closed"),
            (PoolExhaustedError, "exhausted"),
        ],
    )
    def test_default_messages(self, error_class, fragment):
        """Test that each pool error has a meaningful default message."""
        error = error_class()
        assert fragment in str(error).lower()

    def test_base_default_message(self):
        """Test the ConnectionPoolError default message."""
        assert str(ConnectionPoolError()) == "Connection pool error"

    def test_hierarchy(self):
        """Test that pool errors share a catchable base."""
        for error in (DialError(), PoolClosedError(), PoolExhaustedError()):
            assert isinstance(error, ConnectionPoolError)
            assert isinstance(error, KVPipeError)

    def test_custom_message_and_details(self):
        """Test overriding message and details."""
        error = PoolExhaustedError("Timed out", details={"active": 3})
        assert error.message == "Timed out"
        assert error.details == {"active": 3}


@pytest.mark.unit
class TestPipelineErrors:
    """Test pipeline exception types."""

    def test_hierarchy(self):
        """Test that pipeline errors share a catchable base."""
        for error_class in (CommandWriteError, CommandError, PipelineConnectionError):
            error = error_class("x")
            assert isinstance(error, PipelineError)
            assert isinstance(error, KVPipeError)

    def test_committed_error_default_message(self):
        """Test PipelineCommittedError default message."""
        assert "already been committed" in str(PipelineCommittedError())

    def test_decode_error_is_not_a_pipeline_error(self):
        """Test that decode errors are their own family."""
        error = ReplyDecodeError("bad")
        assert isinstance(error, KVPipeError)
        assert not isinstance(error, PipelineError)

    def test_configuration_error(self):
        """Test ConfigurationError inherits from the base."""
        assert isinstance(ConfigurationError("bad config"), KVPipeError)
