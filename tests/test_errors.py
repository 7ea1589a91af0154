"""Tests for prowl.errors — exception hierarchy and messages."""

import pytest

from prowl.errors import (
    ConfigurationError,
    ProwlError,
    ResolutionFailure,
    ScanFailure,
    StalePersistedEntry,
)


class TestHierarchy:
    @pytest.mark.parametrize("exc", [ConfigurationError, ResolutionFailure, ScanFailure, StalePersistedEntry])
    def test_is_prowl_error(self, exc: type[Exception]) -> None:
        assert issubclass(exc, ProwlError)


class TestStalePersistedEntry:
    def test_str_with_reason(self) -> None:
        err = StalePersistedEntry("A.java", "get(Long)", "file not found")
        assert str(err) == "A.java#get(Long): file not found"

    def test_str_without_reason(self) -> None:
        assert str(StalePersistedEntry("A.java", "get()")) == "A.java#get()"

    def test_raise_and_catch(self) -> None:
        with pytest.raises(ProwlError, match="member not found"):
            raise StalePersistedEntry("A.java", "get()", "member not found")
