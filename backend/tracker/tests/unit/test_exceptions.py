import pytest

from tracker.logic.exceptions import (
    InvalidDiscardError,
    InvalidMeldError,
    InvalidStateError,
    InvalidTileError,
    TrackerError,
)


class TestInvalidStateError:
    def test_attributes_and_message(self):
        error = InvalidStateError(actor=2, reason="previous pon not found for kakan")

        assert error.actor == 2
        assert error.reason == "previous pon not found for kakan"
        assert str(error) == "invalid state for seat 2: previous pon not found for kakan"

    def test_requires_keyword_arguments(self):
        with pytest.raises(TypeError):
            InvalidStateError(2, "reason")


class TestHierarchy:
    @pytest.mark.parametrize("error_class", [InvalidDiscardError, InvalidMeldError, InvalidStateError])
    def test_tracking_errors_share_a_base(self, error_class):
        assert issubclass(error_class, TrackerError)

    def test_tile_errors_are_value_errors(self):
        assert issubclass(InvalidTileError, ValueError)
        assert not issubclass(InvalidTileError, TrackerError)
