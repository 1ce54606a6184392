"""Tests for shiplog.core.result module."""

import pytest

from shiplog.core.result import Err, Ok, Result


class TestOk:
    def test_repr(self) -> None:
        assert repr(Ok("v1.0.0")) == "Ok('v1.0.0')"

    def test_frozen(self) -> None:
        result = Ok(42)
        with pytest.raises(AttributeError):
            result.value = 0  # type: ignore[misc]

    def test_map_err_is_identity(self) -> None:
        result = Ok(42)
        assert result.map_err(str) is result


class TestErr:
    def test_repr(self) -> None:
        assert repr(Err(404)) == "Err(404)"

    def test_map_err_converts_payload(self) -> None:
        assert Err(404).map_err(lambda code: f"HTTP {code}") == Err("HTTP 404")


class TestMatching:
    """Call sites branch with match or isinstance."""

    def test_pattern_matching(self) -> None:
        result: Result[int, str] = Err("no tag")
        match result:
            case Ok(value):
                pytest.fail(f"unexpected Ok({value})")
            case Err(error):
                assert error == "no tag"

    def test_isinstance_narrowing(self) -> None:
        result: Result[int, str] = Ok(1)
        assert isinstance(result, Ok) and result.value == 1
