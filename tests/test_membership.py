"""Tests for session membership."""
import pytest

from core.errors import AlreadyJoinedError, DuplicateNameError, NotFoundError, ParticipantNotFoundError
from core.models import Role


def test_join_appends_participant(membership, session):
    alice = membership.join(session, "c1", "Alice", Role.STUDENT)
    teacher = membership.join(session, "t1", "Ms. Frizzle", Role.TEACHER)

    assert session.participants == [alice, teacher]
    assert alice.to_dict()["connectionId"] == "c1"
    assert teacher.to_dict()["role"] == "teacher"


def test_duplicate_name_differs_only_in_case(membership, session):
    membership.join(session, "c1", "Alice", Role.STUDENT)

    with pytest.raises(DuplicateNameError):
        membership.join(session, "c2", "alice", Role.STUDENT)

    assert [p.connection_id for p in session.participants] == ["c1"]


def test_name_reusable_after_leave(membership, session):
    membership.join(session, "c1", "Alice", Role.STUDENT)
    membership.leave(session, "c1")

    participant = membership.join(session, "c2", "ALICE", Role.STUDENT)
    assert participant.connection_id == "c2"


def test_same_connection_cannot_join_twice(membership, session):
    membership.join(session, "c1", "Alice", Role.STUDENT)

    with pytest.raises(AlreadyJoinedError):
        membership.join(session, "c1", "Alicia", Role.STUDENT)


def test_multiple_teachers_allowed(membership, session):
    membership.join(session, "t1", "Teacher One", Role.TEACHER)
    membership.join(session, "t2", "Teacher Two", Role.TEACHER)

    assert [p.role for p in session.participants] == [Role.TEACHER, Role.TEACHER]


def test_leave_unknown_connection_is_noop(membership, session):
    membership.join(session, "c1", "Alice", Role.STUDENT)

    assert membership.leave(session, "nobody") is None
    assert len(session.participants) == 1


def test_kick_returns_removed_participant(membership, session):
    membership.join(session, "c1", "Alice", Role.STUDENT)
    membership.join(session, "c2", "Bob", Role.STUDENT)

    kicked = membership.kick(session, "c2")

    assert kicked.display_name == "Bob"
    assert session.find_participant("c2") is None
    assert "c2" not in [p["connectionId"] for p in session.snapshot()["participants"]]


def test_kick_unknown_connection(membership, session):
    membership.join(session, "c1", "Alice", Role.STUDENT)

    with pytest.raises(ParticipantNotFoundError) as excinfo:
        membership.kick(session, "c9")

    assert isinstance(excinfo.value, NotFoundError)
    assert excinfo.value.code == "NotFound"
    assert len(session.participants) == 1
