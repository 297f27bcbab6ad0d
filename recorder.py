"""
Record-keeping for the learning journal.

The Recorder works on the Flask-SQLAlchemy session of the current
application context, so every call must run inside ``app.app_context()``.
"""
from contextlib import contextmanager
from datetime import datetime, timedelta
import math
import re

from sqlalchemy.exc import SQLAlchemyError

from database import db
from models.entry import LearningEntry


DEFAULT_GENRES = ["ruby", "javascript", "infra", "html/css"]
WDAY = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]

MAX_MINUTES = 1440
LJUST_DIGIT = 15
RJUST_DIGIT = 5


# -------------------------------------------------
# ERRORS
# -------------------------------------------------
class RecorderError(Exception):
    pass


class ValidationError(RecorderError):
    pass


class NoRowsError(RecorderError):
    pass


class SelectionCancelled(RecorderError):
    pass


class InvalidSelection(RecorderError):
    pass


class StorageError(RecorderError):
    pass


@contextmanager
def storage_errors():
    try:
        yield
    except SQLAlchemyError as e:
        db.session.rollback()
        raise StorageError(str(e)) from e


# -------------------------------------------------
# HELPERS
# -------------------------------------------------
def parse_learning_time(answer):
    """Turn the typed duration into minutes, or raise ValidationError."""
    if not answer or not re.fullmatch(r"[0-9]+", answer):
        raise ValidationError("Please enter in half-width numbers.")

    minutes = int(answer)
    if minutes > MAX_MINUTES:
        raise ValidationError("It's exceeding the time on a day.")
    if minutes < 1:
        raise ValidationError("Please enter at least 1 minute.")
    return minutes


def check_learning_time(minutes):
    if isinstance(minutes, bool) or not isinstance(minutes, int):
        raise ValidationError("Learning time must be a whole number of minutes.")
    if not 0 < minutes <= MAX_MINUTES:
        raise ValidationError(f"Learning time must be between 1 and {MAX_MINUTES} minutes.")
    return minutes


def convert_in_hour(minutes):
    # half-up to one decimal place
    return math.floor(minutes / 60 * 10 + 0.5) / 10


def format_hours(hours):
    return f"{hours:.1f}".rstrip("0").rstrip(".")


def date_label(value):
    return f"{value.month}/{value.day} ({WDAY[value.isoweekday() % 7]})"


def shape_row(entry):
    learning_date = f"{entry.learning_date.year}/{entry.learning_date.month}/{entry.learning_date.day}"
    return (
        learning_date.ljust(LJUST_DIGIT)
        + entry.genre.ljust(LJUST_DIGIT)
        + str(entry.learning_time).rjust(RJUST_DIGIT)
        + " minutes"
    )


# -------------------------------------------------
# RECORDER
# -------------------------------------------------
class Recorder:
    def __init__(self, genres=None, dates_range=7, display_limit=20,
                 pro_hours=10000, now=datetime.now):
        self.genres = list(genres or DEFAULT_GENRES)
        self.dates_range = dates_range
        self.display_limit = display_limit
        self.pro_hours = pro_hours
        self.now = now

    @classmethod
    def from_config(cls, config, **kwargs):
        return cls(
            genres=config.get("GENRES"),
            dates_range=config.get("DATES_RANGE", 7),
            display_limit=config.get("DISPLAY_LIMIT", 20),
            pro_hours=config.get("PRO_HOURS", 10000),
            **kwargs
        )

    def date_choices(self):
        """Today followed by the previous ``dates_range`` days."""
        today = self.now()
        return [today - timedelta(days=i) for i in range(self.dates_range + 1)]

    # ---------------- listing ----------------
    def _ordered(self):
        return LearningEntry.query.order_by(
            LearningEntry.learning_date.desc(),
            LearningEntry.id.desc()
        )

    def recent_entries(self, range_days=None, limit=None):
        if range_days is None:
            range_days = self.dates_range
        if limit is None:
            limit = self.display_limit

        since = self.now() - timedelta(days=range_days)
        with storage_errors():
            entries = (
                self._ordered()
                .filter(LearningEntry.learning_date >= since)
                .limit(limit)
                .all()
            )

        if not entries:
            raise NoRowsError(f"No entries in the last {range_days} days.")
        return entries

    def list_recent(self, range_days=None, limit=None):
        return [shape_row(e) for e in self.recent_entries(range_days, limit)]

    def entry_at(self, offset):
        """The (offset + 1)-th most recent entry by learning date."""
        if offset < 0:
            raise NoRowsError(f"No entry at offset {offset}.")
        with storage_errors():
            entry = self._ordered().offset(offset).first()
        if entry is None:
            raise NoRowsError(f"No entry at offset {offset}.")
        return entry

    # ---------------- mutations ----------------
    def create(self, learning_date, genre, learning_time):
        check_learning_time(learning_time)
        now = self.now()
        entry = LearningEntry(
            learning_date=learning_date,
            genre=genre,
            learning_time=learning_time,
            created_at=now,
            updated_at=now
        )
        with storage_errors():
            db.session.add(entry)
            db.session.commit()
        return entry

    def update(self, entry, learning_date, genre, learning_time):
        check_learning_time(learning_time)
        with storage_errors():
            entry.learning_date = learning_date
            entry.genre = genre
            entry.learning_time = learning_time
            entry.updated_at = self.now()
            db.session.commit()
        return entry

    def edit_at(self, offset, learning_date, genre, learning_time):
        return self.update(self.entry_at(offset), learning_date, genre, learning_time)

    def delete(self, entry):
        with storage_errors():
            db.session.delete(entry)
            db.session.commit()

    def delete_at(self, offset):
        entry = self.entry_at(offset)
        self.delete(entry)
        return entry

    # ---------------- reports ----------------
    def totals_by_genre(self):
        """Return ``([(genre, hours), ...], total_hours)``."""
        with storage_errors():
            rows = (
                db.session.query(
                    LearningEntry.genre,
                    db.func.sum(LearningEntry.learning_time)
                )
                .group_by(LearningEntry.genre)
                .order_by(LearningEntry.genre)
                .all()
            )

        total_minutes = sum(minutes for _, minutes in rows)
        totals = [(genre, convert_in_hour(minutes)) for genre, minutes in rows]
        return totals, convert_in_hour(total_minutes)

    def remaining_hours(self, total_hours):
        return round(self.pro_hours - total_hours, 1)

    def totals_by_day(self):
        """Return ``[(day, "genre,genre", hours), ...]``, newest day first."""
        day = db.func.strftime("%Y-%m-%d", LearningEntry.learning_date)
        with storage_errors():
            rows = (
                db.session.query(
                    day.label("day"),
                    db.func.group_concat(LearningEntry.genre.distinct()),
                    db.func.sum(LearningEntry.learning_time)
                )
                .group_by(day)
                .order_by(day.desc())
                .all()
            )

        return [(d, genres, convert_in_hour(minutes)) for d, genres, minutes in rows]
