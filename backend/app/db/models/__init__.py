"""ORM models exposed for metadata discovery."""
from app.db.models.daily_stats import DailyStats
from app.db.models.habit import Habit
from app.db.models.user import User
from app.db.models.weekly_report import WeeklyReport

__all__ = [
    "DailyStats",
    "Habit",
    "User",
    "WeeklyReport",
]
