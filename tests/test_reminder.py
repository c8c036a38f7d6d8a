import datetime

import pytest
from apscheduler.schedulers.background import BackgroundScheduler

from huddle.scheduler import reminder


@pytest.fixture
def scheduler(monkeypatch):
    # Never started: jobs stay pending and nothing fires
    scheduler = BackgroundScheduler(timezone="UTC")
    monkeypatch.setattr(reminder, "scheduler", scheduler)
    return scheduler


def in_days(days):
    return datetime.datetime.utcnow() + datetime.timedelta(days=days)


def test_reminder_is_scheduled_for_future_meeting(scheduler):
    reminder.schedule_reminder(7, in_days(2))

    jobs = scheduler.get_jobs()
    assert [job.id for job in jobs] == ["meeting_reminder_7"]
    assert jobs[0].args == (7,)


def test_rescheduling_keeps_a_single_job(scheduler):
    reminder.schedule_reminder(7, in_days(2))
    reminder.schedule_reminder(7, in_days(3))

    assert len(scheduler.get_jobs()) == 1


def test_moving_meeting_into_the_past_drops_old_reminder(scheduler):
    reminder.schedule_reminder(7, in_days(2))
    reminder.schedule_reminder(7, datetime.datetime(2020, 1, 1, 9))

    assert scheduler.get_jobs() == []


def test_moving_meeting_inside_lead_window_drops_old_reminder(scheduler):
    reminder.schedule_reminder(7, in_days(2))
    reminder.schedule_reminder(7, datetime.datetime.utcnow() + datetime.timedelta(minutes=5))

    assert scheduler.get_job("meeting_reminder_7") is None


def test_cancel_unknown_reminder_is_a_no_op(scheduler):
    reminder.cancel_reminder(404)
    assert scheduler.get_jobs() == []
