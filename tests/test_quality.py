"""
Unit tests for representative selection scoring.
"""

import pytest

from burstcull.grouping import (
    average_face_area,
    calculate_image_score,
    eyes_open_ratio,
    pick_representative,
)
from burstcull.models import BoundingBox, EyeState, FaceDetection
from conftest import make_record


def face(width=10.0, height=10.0, left='open', right='open'):
    return FaceDetection(
        bbox=BoundingBox(x=0, y=0, width=width, height=height),
        confidence=0.9,
        eye_state=EyeState(left=left, right=right, confidence=0.8),
    )


class TestScoreTerms:
    """Test the individual terms of the score."""

    def test_no_signals_scores_zero(self):
        assert calculate_image_score(make_record("a.jpg")) == 0.0

    def test_focus_term(self):
        assert calculate_image_score(make_record("a.jpg", focus_score=0.5)) == pytest.approx(0.2)

    def test_exposure_term(self):
        assert calculate_image_score(make_record("a.jpg", exposure_score=0.5)) == pytest.approx(0.05)

    def test_rating_term(self):
        """Ratings are not normalized: 5 stars adds 0.5."""
        assert calculate_image_score(make_record("a.jpg", rating=5)) == pytest.approx(0.5)

    def test_face_terms(self):
        """One 50x50% face with open eyes: 0.3 * 1 + 0.2 * 0.25."""
        record = make_record("a.jpg", faces=[face(50, 50)])
        assert calculate_image_score(record) == pytest.approx(0.35)

    def test_full_formula(self):
        record = make_record(
            "a.jpg",
            focus_score=0.9,
            exposure_score=0.7,
            rating=3,
            faces=[face(20, 30), face(10, 10, left='closed')],
        )
        expected = (
            0.9 * 0.4
            + 0.5 * 0.3
            + ((600 + 100) / 2 / 10000) * 0.2
            + 0.7 * 0.1
            + 3 * 0.1
        )
        assert calculate_image_score(record) == pytest.approx(expected)

    def test_empty_face_list_omits_face_terms(self):
        record = make_record("a.jpg", focus_score=0.5, faces=[])
        assert calculate_image_score(record) == pytest.approx(0.2)


class TestFaceHelpers:
    """Test eye and face-size helpers."""

    def test_eyes_open_ratio(self):
        record = make_record("a.jpg", faces=[face(), face(right='closed'), face(left='unknown')])
        assert eyes_open_ratio(record) == pytest.approx(1 / 3)

    def test_missing_eye_state_counts_as_not_open(self):
        record = make_record("a.jpg", faces=[FaceDetection(bbox=BoundingBox(0, 0, 10, 10))])
        assert eyes_open_ratio(record) == 0.0

    def test_no_faces(self):
        record = make_record("a.jpg")
        assert eyes_open_ratio(record) is None
        assert average_face_area(record) is None

    def test_average_face_area(self):
        record = make_record("a.jpg", faces=[face(10, 10), face(30, 10)])
        assert average_face_area(record) == pytest.approx(0.02)


class TestPickRepresentative:
    """Test representative selection."""

    def test_highest_score_wins(self):
        images = [
            make_record("a.jpg", focus_score=0.5),
            make_record("b.jpg", focus_score=0.9),
            make_record("c.jpg", focus_score=0.7),
        ]
        assert pick_representative(images) is images[1]

    def test_open_eyes_beat_closed(self):
        closed = make_record("closed.jpg", focus_score=0.8, faces=[face(left='closed', right='closed')])
        open_ = make_record("open.jpg", focus_score=0.8, faces=[face()])
        assert pick_representative([closed, open_]) is open_

    def test_tie_goes_to_first(self):
        images = [make_record("a.jpg"), make_record("b.jpg"), make_record("c.jpg")]
        assert pick_representative(images) is images[0]

    def test_empty(self):
        with pytest.raises(ValueError):
            pick_representative([])
