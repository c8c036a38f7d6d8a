from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.jobstores.base import JobLookupError
from huddle.core.config import REMINDER_LEAD_MINUTES
from huddle.core.db import SessionLocal
from huddle.email.utils import send_meeting_reminder
from huddle.models.meeting import MeetingSuggestion, MeetingParticipant
from huddle.models.user import User
import datetime
import asyncio
import logging

# Meeting times are stored as naive UTC
scheduler = BackgroundScheduler(timezone="UTC")


def _job_id(meeting_id: int) -> str:
    return f"meeting_reminder_{meeting_id}"


def schedule_reminder(meeting_id: int, start_dt: datetime.datetime):
    """
    Schedule a reminder shortly before the proposed time.
    Re-scheduling drops the previous job for the same meeting first.
    """
    cancel_reminder(meeting_id)
    reminder_time = start_dt - datetime.timedelta(minutes=REMINDER_LEAD_MINUTES)

    # ignore if time already passed
    if reminder_time < datetime.datetime.utcnow():
        return

    scheduler.add_job(
        send_reminder_job,
        'date',
        run_date=reminder_time,
        args=[meeting_id],
        id=_job_id(meeting_id),
        replace_existing=True,
        misfire_grace_time=600
    )


def cancel_reminder(meeting_id: int):
    try:
        scheduler.remove_job(_job_id(meeting_id))
    except JobLookupError:
        pass


def send_reminder_job(meeting_id: int):
    """
    Called by APScheduler in background to send reminder.
    """
    db = SessionLocal()
    try:
        meeting = db.query(MeetingSuggestion).filter(MeetingSuggestion.id == meeting_id).first()
        if meeting is None or meeting.status == "cancelled":
            return
        recipients = [
            row.email for row in db.query(User.email).join(
                MeetingParticipant, MeetingParticipant.user_id == User.id
            ).filter(MeetingParticipant.meeting_id == meeting_id)
        ]
        asyncio.run(send_meeting_reminder(
            recipients,
            meeting.author.display_name,
            meeting.id,
            meeting.title,
            meeting.proposed_date_time
        ))
    except Exception as e:
        logging.error(f"❌ Reminder for meeting {meeting_id} failed: {e}")
    finally:
        db.close()


def start_scheduler():
    """
    Starts background APScheduler when app starts.
    """
    if not scheduler.running:
        scheduler.start()


def stop_scheduler():
    if scheduler.running:
        scheduler.shutdown(wait=False)
