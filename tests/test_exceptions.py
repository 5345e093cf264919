"""Tests for the recap exception hierarchy."""
import pytest

from recap.exceptions import (
    ConfigurationError,
    EncryptionError,
    ErrorCode,
    ItemNotFoundError,
    ItemValidationError,
    RecapError,
    StorageError,
    StorageUnavailableError,
)


class TestRecapError:
    """Tests for the base error."""

    def test_str_without_details(self):
        err = RecapError("Something broke")
        assert str(err) == "[ITEM_VALIDATION_FAILED] Something broke"

    def test_str_with_details(self):
        err = ItemNotFoundError(7)
        assert str(err) == "[ITEM_NOT_FOUND] Item with ID '7' not found (item_id=7)"

    def test_to_dict(self):
        err = ItemValidationError("Bad title", field="title", value="")
        assert err.to_dict() == {
            "error": "ItemValidationError",
            "code": 1002,
            "code_name": "ITEM_VALIDATION_FAILED",
            "message": "Bad title",
            "details": {"field": "title", "value": ""},
        }

    @pytest.mark.parametrize("error", [
        ItemNotFoundError(1),
        ItemValidationError("x"),
        StorageError("x"),
        StorageUnavailableError("x"),
        EncryptionError("x"),
        ConfigurationError("x"),
    ])
    def test_all_errors_share_base(self, error):
        assert isinstance(error, RecapError)


class TestSubclasses:
    """Tests for the details each subclass records."""

    def test_not_found_custom_message(self):
        err = ItemNotFoundError("Shopping", "Item titled 'Shopping' not found")
        assert err.message == "Item titled 'Shopping' not found"
        assert err.item_id == "Shopping"

    def test_validation_value_truncated(self):
        err = ItemValidationError("Too long", value="x" * 500)
        assert len(err.details["value"]) == 100
        assert err.value == "x" * 500

    def test_storage_error_keeps_original(self):
        cause = RuntimeError("disk I/O error")
        err = StorageError(
            "write failed", operation="write",
            code=ErrorCode.STORAGE_WRITE_FAILED, original_error=cause,
        )
        assert err.original_error is cause
        assert err.details == {"operation": "write", "original_error": "disk I/O error"}
        assert err.code == ErrorCode.STORAGE_WRITE_FAILED

    def test_storage_unavailable_hides_full_path(self):
        err = StorageUnavailableError("Cannot open", location="/home/someone/secret/recap.db")
        assert err.code == ErrorCode.STORAGE_UNAVAILABLE
        assert err.operation == "open"
        assert err.location == "/home/someone/secret/recap.db"
        assert err.details["location_hint"] == "recap.db"
        assert "/home/someone" not in str(err)

    def test_encryption_error(self):
        err = EncryptionError("No public key", key_id="ABCD")
        assert err.code == ErrorCode.ENCRYPTION_FAILED
        assert err.details == {"key_id": "ABCD"}

    def test_configuration_error(self):
        err = ConfigurationError("Bad level", config_key="log_level")
        assert err.code == ErrorCode.CONFIG_INVALID
        assert err.config_key == "log_level"
