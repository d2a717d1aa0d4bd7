from campus_timetable.models.calendar_event import AcademicCalendarEvent, EventType  # noqa: F401
from campus_timetable.models.classroom import Classroom, RoomType  # noqa: F401
from campus_timetable.models.conflict_record import ConflictRecord, ConflictType  # noqa: F401
from campus_timetable.models.schedule_entry import WEEKDAY_ORDER, ScheduleEntry, Weekday  # noqa: F401
from campus_timetable.models.subject import Subject, SubjectStatus  # noqa: F401
from campus_timetable.models.user import User, UserRole  # noqa: F401
