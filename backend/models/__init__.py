from models.class_group import ClassGroup
from models.grading_scale import GradingScale
from models.grading_system import GradingSystem
from models.profile import Profile
from models.timetable_metadata import TimetableMetadata
from models.timetable_session import TimetableSession

__all__ = [
	"ClassGroup",
	"GradingScale",
	"GradingSystem",
	"Profile",
	"TimetableMetadata",
	"TimetableSession",
]
