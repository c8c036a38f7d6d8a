import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List

from sqlalchemy.orm import Session

from huddle.core.errors import ValidationFailed
from huddle.models.meeting import MeetingParticipant, MeetingResponse, MeetingSuggestion, RESPONSE_TYPES
from huddle.services import meeting_service


@dataclass
class Aggregate:
    meeting_id: int
    count_accepted: int
    count_rejected: int
    count_counter: int
    participant_count: int
    all_accepted: bool
    requires_all_accept: bool

    @property
    def responded(self) -> int:
        return self.count_accepted + self.count_rejected + self.count_counter

    @property
    def summary(self) -> str:
        return f"{self.count_accepted}/{self.participant_count} accepted"


def respond(
    db: Session,
    meeting_id: int,
    user_id: str,
    response_type: str,
    note: str = None,
    counter_date_time: datetime = None,
    counter_location: str = None,
) -> MeetingResponse:
    if response_type not in RESPONSE_TYPES:
        raise ValidationFailed(f"Unknown response type '{response_type}'")
    if response_type != "counter" and (counter_date_time is not None or counter_location):
        raise ValidationFailed("Counter proposals require response_type 'counter'")
    meeting_service.get_meeting(db, meeting_id)

    response = MeetingResponse(
        meeting_id=meeting_id,
        user_id=user_id,
        response_type=response_type,
        note=note,
        counter_date_time=counter_date_time,
        counter_location=counter_location,
    )
    db.add(response)
    db.commit()
    db.refresh(response)
    logging.info(f"{user_id} responded '{response_type}' to meeting {meeting_id}")
    return response


def list_responses(db: Session, meeting_id: int) -> List[MeetingResponse]:
    meeting_service.get_meeting(db, meeting_id)
    return db.query(MeetingResponse).filter(
        MeetingResponse.meeting_id == meeting_id
    ).order_by(MeetingResponse.created_at.desc(), MeetingResponse.id.desc()).all()


def latest_responses(db: Session, meeting_id: int) -> Dict[str, MeetingResponse]:
    # Responses are append-only; the newest row per user wins, id breaking ties
    rows = db.query(MeetingResponse).filter(
        MeetingResponse.meeting_id == meeting_id
    ).order_by(MeetingResponse.created_at, MeetingResponse.id).all()
    latest = {}
    for row in rows:
        latest[row.user_id] = row
    return latest


def roster_ids(db: Session, meeting_id: int) -> List[str]:
    return [
        row.user_id for row in
        db.query(MeetingParticipant.user_id).filter(MeetingParticipant.meeting_id == meeting_id)
    ]


def aggregate(db: Session, meeting_id: int) -> Aggregate:
    meeting = meeting_service.get_meeting(db, meeting_id)
    latest = latest_responses(db, meeting_id)
    counts = {kind: 0 for kind in RESPONSE_TYPES}
    for response in latest.values():
        counts[response.response_type] += 1

    roster = roster_ids(db, meeting_id)
    all_accepted = bool(roster) and all(
        user_id in latest and latest[user_id].response_type == "accepted" for user_id in roster
    )
    return Aggregate(
        meeting_id=meeting_id,
        count_accepted=counts["accepted"],
        count_rejected=counts["rejected"],
        count_counter=counts["counter"],
        participant_count=len(roster),
        all_accepted=all_accepted,
        requires_all_accept=meeting.requires_all_accept,
    )


def settle_status(db: Session, meeting_id: int, caller_id: str) -> MeetingSuggestion:
    """Explicit status transition driven by the participants' latest answers.

    Only meetings that require unanimous acceptance move: all participants
    accepted -> accepted, a participant whose latest answer is a rejection ->
    rejected, otherwise pending. Answers from non-participants are ignored.
    Cancelled meetings and meetings without the unanimity rule are left as is.
    """
    meeting = meeting_service.get_authored_meeting(db, meeting_id, caller_id)
    if not meeting.requires_all_accept or meeting.status == "cancelled":
        return meeting

    latest = latest_responses(db, meeting_id)
    answers = [
        latest[user_id].response_type if user_id in latest else None
        for user_id in roster_ids(db, meeting_id)
    ]
    if answers and all(answer == "accepted" for answer in answers):
        status = "accepted"
    elif "rejected" in answers:
        status = "rejected"
    else:
        status = "pending"
    return meeting_service.set_status(db, meeting, status)


def responses_for_user(db: Session, user_id: str) -> List[MeetingResponse]:
    """All responses on the meetings visible to the user, newest first."""
    meeting_ids = [m.id for m in meeting_service.list_for_user(db, user_id)]
    if not meeting_ids:
        return []
    return db.query(MeetingResponse).filter(
        MeetingResponse.meeting_id.in_(meeting_ids)
    ).order_by(MeetingResponse.created_at.desc(), MeetingResponse.id.desc()).all()
