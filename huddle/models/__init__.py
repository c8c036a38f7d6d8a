from huddle.models.user import Base, User
from huddle.models.group import Group, GroupMember
from huddle.models.meeting import MeetingSuggestion, MeetingParticipant, MeetingResponse, Tag, MeetingTag
from huddle.models.calendar import CalendarConnection, Calendar, Event, Conflict
