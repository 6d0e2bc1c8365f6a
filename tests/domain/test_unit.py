"""Tests for the Unit marker value."""

from __future__ import annotations

import copy
import pickle

from switchyard.domain.unit import UNIT, Unit


class TestUnit:
    def test_singleton(self) -> None:
        assert Unit() is UNIT
        assert Unit() is Unit()

    def test_equality_and_hash(self) -> None:
        assert Unit() == UNIT
        assert hash(UNIT) == 0
        assert len({UNIT, Unit()}) == 1

    def test_not_equal_to_none(self) -> None:
        assert UNIT != None  # noqa: E711
        assert UNIT != ()

    def test_repr(self) -> None:
        assert repr(UNIT) == "()"

    def test_falsy(self) -> None:
        assert not UNIT

    def test_copy_and_pickle_preserve_identity(self) -> None:
        assert copy.deepcopy(UNIT) is UNIT
        assert pickle.loads(pickle.dumps(UNIT)) is UNIT
