"""Tests for sensitive values and invisible markers."""

from __future__ import annotations

import pytest

from errata import hidden


class TestSensitive:
    """Tests for the Sensitive marker."""

    def test_masked_by_default(self) -> None:
        secret = hidden.hide("hunter2")

        assert str(secret) == hidden.MASK
        assert "hunter2" not in repr(secret)
        assert f"password={secret}" == f"password={hidden.MASK}"
        assert secret.reveal() == "hunter2"

    def test_hide_is_idempotent(self) -> None:
        secret = hidden.hide("x")
        assert hidden.hide(secret) is secret

    def test_equality_by_value(self) -> None:
        assert hidden.hide(1) == hidden.hide(1)
        assert hidden.hide(1) != hidden.hide(2)
        assert len({hidden.hide("a"), hidden.hide("a")}) == 1

    def test_display_depends_on_viewer(self) -> None:
        secret = hidden.hide("hunter2")

        assert hidden.display(secret) == hidden.MASK
        with hidden.revealing():
            assert hidden.is_revealing()
            assert hidden.display(secret) == "hunter2"
        assert not hidden.is_revealing()
        assert hidden.display("plain") == "plain"


class TestMarkers:
    """Tests for marker encoding, extraction and cleaning."""

    def test_marker_is_stripped_by_clean(self) -> None:
        text = f"before{hidden.to_marker(1234)}after"

        assert text != "beforeafter"
        assert hidden.clean(text) == "beforeafter"
        assert hidden.extract(text) == [1234]

    def test_extract_in_order(self) -> None:
        text = f"{hidden.to_marker(0)} and {hidden.to_marker(2**40)}"
        assert hidden.extract(text) == [0, 2**40]

    def test_plain_text(self) -> None:
        assert hidden.extract("nothing here") == []
        assert hidden.clean("nothing here") == "nothing here"

    def test_negative_ids_rejected(self) -> None:
        with pytest.raises(ValueError):
            hidden.to_marker(-1)
