"""Tests for gg.core.result module."""

import pytest

from gg.core.result import Err, Ok, Result


class TestOk:
    """Tests for Ok type."""

    def test_map(self) -> None:
        assert Ok(2).map(lambda v: v * 10) == Ok(20)

    def test_repr(self) -> None:
        assert repr(Ok("x")) == "Ok('x')"


class TestErr:
    """Tests for Err type."""

    def test_map_is_noop(self) -> None:
        err: Err[str] = Err("boom")
        assert err.map(lambda v: v) is err

    def test_pattern_matching(self) -> None:
        result: Result[int, str] = Err("boom")
        match result:
            case Ok(_):
                pytest.fail("expected Err")
            case Err(error):
                assert error == "boom"
