from __future__ import annotations

import pytest

from src.school_attendance.school_attendance.core.enums import StudentStatus
from src.school_attendance.school_attendance.recognition.matcher import confidence_from_distance, find_best_match


def test_exact_probe_matches_with_full_confidence(make_student, make_descriptor):
    alice = make_student("STU001", value=0.0)
    bob = make_student("STU002", name="Bob Tran", value=0.5)

    result = find_best_match(make_descriptor(0.5), [alice, bob], 0.6)

    assert result is not None
    assert result.student.student_id == "STU002"
    assert result.distance == 0.0
    assert result.confidence == 100


def test_far_probe_is_not_recognized(make_student, make_descriptor):
    alice = make_student("STU001", value=0.0)
    assert find_best_match(make_descriptor(1.0), [alice], 0.6) is None


def test_no_candidates_is_a_normal_no_match(make_descriptor):
    assert find_best_match(make_descriptor(0.0), [], 0.6) is None


def test_threshold_is_strict_and_monotonic(make_student, make_descriptor):
    alice = make_student("STU001", value=0.0)
    probe = make_descriptor(0.0, bump_first=0.55)

    assert find_best_match(probe, [alice], 0.5) is None
    assert find_best_match(probe, [alice], 0.6) is not None
    assert find_best_match(probe, [alice], 0.9) is not None


def test_inactive_students_and_empty_descriptors_are_skipped(make_student, make_descriptor):
    inactive = make_student("STU001", value=0.0, status=StudentStatus.INACTIVE)
    no_faces = make_student("STU002", descriptors=[])

    assert find_best_match(make_descriptor(0.0), [inactive, no_faces], 0.6) is None


def test_closest_of_several_reference_descriptors_wins(make_student, make_descriptor):
    alice = make_student("STU001", descriptors=[make_descriptor(0.4), make_descriptor(0.0, bump_first=0.2)])
    bob = make_student("STU002", name="Bob Tran", descriptors=[make_descriptor(0.0, bump_first=0.3)])

    result = find_best_match(make_descriptor(0.0), [bob, alice], 0.6)

    assert result.student.student_id == "STU001"
    assert result.distance == pytest.approx(0.2)
    assert result.confidence == 80


def test_tie_keeps_first_candidate(make_student, make_descriptor):
    first = make_student("STU001", value=0.0)
    second = make_student("STU002", name="Bob Tran", value=0.0)

    result = find_best_match(make_descriptor(0.0), [first, second], 0.6)
    assert result.student.student_id == "STU001"


def test_confidence_is_clamped_and_rounded_half_up():
    assert confidence_from_distance(0.0) == 100
    assert confidence_from_distance(0.125) == 88
    assert confidence_from_distance(1.5) == 0
