"""Response log and aggregate."""
import pytest

from conftest import at
from huddle.core.errors import NotFound, Unauthorized, ValidationFailed
from huddle.models import MeetingResponse
from huddle.services import meeting_service, response_service


@pytest.fixture
def standup(db_session, alice, bob, carol):
    return meeting_service.create_meeting(
        db_session,
        author_id=alice.id,
        title="Standup",
        proposed_date_time=at(9),
        duration_minutes=30,
        participant_ids=[bob.id, carol.id],
    )


def test_counter_scenario(db_session, standup, bob):
    response_service.respond(db_session, standup.id, bob.id, "counter", counter_date_time=at(10))

    result = response_service.aggregate(db_session, standup.id)

    assert result.count_counter == 1
    assert result.count_accepted == 0
    assert result.count_rejected == 0
    assert result.responded == 1
    assert result.participant_count == 3
    assert result.all_accepted is False
    assert result.summary == "0/3 accepted"


def test_responses_are_appended(db_session, standup, bob):
    response_service.respond(db_session, standup.id, bob.id, "rejected", note="Busy")
    response_service.respond(db_session, standup.id, bob.id, "accepted", note="Moved things around")

    assert db_session.query(MeetingResponse).filter_by(meeting_id=standup.id).count() == 2
    history = response_service.list_responses(db_session, standup.id)
    assert [r.response_type for r in history] == ["accepted", "rejected"]


def test_latest_response_wins(db_session, standup, bob, carol):
    response_service.respond(db_session, standup.id, bob.id, "rejected")
    response_service.respond(db_session, standup.id, carol.id, "counter", counter_location="Cafe")
    response_service.respond(db_session, standup.id, bob.id, "accepted")

    result = response_service.aggregate(db_session, standup.id)

    assert (result.count_accepted, result.count_rejected, result.count_counter) == (1, 0, 1)


def test_all_accepted_requires_every_participant(db_session, standup, alice, bob, carol):
    response_service.respond(db_session, standup.id, bob.id, "accepted")
    response_service.respond(db_session, standup.id, carol.id, "accepted")
    assert response_service.aggregate(db_session, standup.id).all_accepted is False

    response_service.respond(db_session, standup.id, alice.id, "accepted")
    assert response_service.aggregate(db_session, standup.id).all_accepted is True


def test_responses_from_non_participants_are_counted(db_session, standup):
    # Aggregate tallies every responder; only all_accepted looks at the roster
    response_service.respond(db_session, standup.id, "outsider", "accepted")
    result = response_service.aggregate(db_session, standup.id)
    assert result.count_accepted == 1
    assert result.all_accepted is False


def test_counter_fields_need_counter_type(db_session, standup, bob):
    with pytest.raises(ValidationFailed):
        response_service.respond(db_session, standup.id, bob.id, "accepted", counter_location="Cafe")
    with pytest.raises(ValidationFailed):
        response_service.respond(db_session, standup.id, bob.id, "maybe")


def test_bare_counter_is_accepted(db_session, standup, bob):
    response = response_service.respond(db_session, standup.id, bob.id, "counter", note="Not sure")
    assert response.counter_date_time is None
    assert response.counter_location is None


def test_respond_to_unknown_meeting(db_session, bob):
    with pytest.raises(NotFound):
        response_service.respond(db_session, 404, bob.id, "accepted")


def test_aggregate_after_delete_is_not_found(db_session, standup, alice, bob):
    response_service.respond(db_session, standup.id, bob.id, "counter", counter_date_time=at(10))
    meeting_service.delete_meeting(db_session, standup.id, alice.id)

    with pytest.raises(NotFound):
        response_service.aggregate(db_session, standup.id)
    assert meeting_service.list_for_user(db_session, bob.id) == []


def test_respond_never_changes_status(db_session, standup, bob):
    response_service.respond(db_session, standup.id, bob.id, "rejected")
    assert meeting_service.get_meeting(db_session, standup.id).status == "accepted"


# ===== settle_status =====


@pytest.fixture
def unanimous(db_session, alice, bob):
    return meeting_service.create_meeting(
        db_session,
        author_id=alice.id,
        title="Offsite",
        proposed_date_time=at(9, day=10),
        requires_all_accept=True,
        participant_ids=[bob.id],
    )


def test_settle_moves_unanimous_meeting(db_session, unanimous, alice, bob):
    assert response_service.settle_status(db_session, unanimous.id, alice.id).status == "pending"

    response_service.respond(db_session, unanimous.id, alice.id, "accepted")
    response_service.respond(db_session, unanimous.id, bob.id, "rejected")
    assert response_service.settle_status(db_session, unanimous.id, alice.id).status == "rejected"

    response_service.respond(db_session, unanimous.id, bob.id, "accepted")
    assert response_service.settle_status(db_session, unanimous.id, alice.id).status == "accepted"


def test_settle_ignores_rejections_from_non_participants(db_session, unanimous, alice, carol):
    response_service.respond(db_session, unanimous.id, alice.id, "accepted")
    response_service.respond(db_session, unanimous.id, carol.id, "rejected")

    assert response_service.settle_status(db_session, unanimous.id, alice.id).status == "pending"


def test_participant_who_left_no_longer_blocks(db_session, unanimous, alice, bob):
    response_service.respond(db_session, unanimous.id, alice.id, "accepted")
    response_service.respond(db_session, unanimous.id, bob.id, "rejected")
    meeting_service.leave_meeting(db_session, unanimous.id, bob.id)

    assert response_service.settle_status(db_session, unanimous.id, alice.id).status == "accepted"


def test_settle_leaves_other_meetings_alone(db_session, standup, alice, bob):
    response_service.respond(db_session, standup.id, bob.id, "rejected")
    assert response_service.settle_status(db_session, standup.id, alice.id).status == "accepted"


def test_settle_is_author_only(db_session, unanimous, bob):
    with pytest.raises(Unauthorized):
        response_service.settle_status(db_session, unanimous.id, bob.id)


def test_responses_for_user(db_session, standup, alice, bob, carol):
    response_service.respond(db_session, standup.id, bob.id, "accepted")
    response_service.respond(db_session, standup.id, carol.id, "rejected")

    responses = response_service.responses_for_user(db_session, bob.id)

    assert [r.user_id for r in responses] == [carol.id, bob.id]
    assert response_service.responses_for_user(db_session, "nobody") == []
