"""Tests for the Result type."""

from __future__ import annotations

import pytest

from toolexec import Err, Ok, Result, ToolNotFoundError
from toolexec.errors import collect_results


def test_ok_and_err_variants() -> None:
    ok: Result[int, str] = Ok(1)
    err: Result[int, str] = Err("bad")

    assert ok.is_ok() and not ok.is_err()
    assert err.is_err() and not err.is_ok()
    assert bool(ok) is True and bool(err) is False
    assert ok.ok() == 1 and ok.err() is None
    assert err.ok() is None and err.err() == "bad"


def test_map_and_flat_map_follow_the_railway() -> None:
    assert Ok(2).map(lambda x: x * 3) == Ok(6)
    assert Err("e").map(lambda x: x * 3) == Err("e")
    assert Ok(2).flat_map(lambda x: Err(f"no {x}")) == Err("no 2")
    assert Err("e").map_err(str.upper) == Err("E")


def test_unwrap_reraises_exception_values() -> None:
    error = ToolNotFoundError("ghost")

    with pytest.raises(ToolNotFoundError) as exc_info:
        Err(error).unwrap()

    assert exc_info.value is error


def test_unwrap_non_exception_error() -> None:
    with pytest.raises(RuntimeError, match="unwrap\\(\\) on Err"):
        Err("plain").unwrap()


def test_unwrap_err_on_ok_raises() -> None:
    with pytest.raises(RuntimeError):
        Ok(1).unwrap_err()


def test_unwrap_or_and_to_tuple() -> None:
    assert Err("x").unwrap_or(7) == 7
    assert Ok(3).unwrap_or_else(lambda e: 0) == 3
    assert Ok(3).to_tuple() == (3, None)
    assert Err("x").to_tuple() == (None, "x")


def test_match_is_exhaustive() -> None:
    assert Ok(1).match(ok=lambda v: f"ok:{v}", err=lambda e: f"err:{e}") == "ok:1"
    assert Err("x").match(ok=lambda v: f"ok:{v}", err=lambda e: f"err:{e}") == "err:x"


def test_inspect_side_effects_only_on_matching_variant() -> None:
    seen: list[object] = []
    Ok(1).inspect(seen.append).inspect_err(seen.append)
    Err("e").inspect(seen.append).inspect_err(seen.append)
    assert seen == [1, "e"]


def test_collect_results_accumulates_all_errors() -> None:
    assert collect_results([Ok(1), Ok(2)]) == Ok([1, 2])
    assert collect_results([Ok(1), Err("a"), Err("b")]) == Err(["a", "b"])
