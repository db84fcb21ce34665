from nested_students.models.base import Base, TimestampMixin
from nested_students.models.student import Student

__all__ = [
    "Base",
    "TimestampMixin",
    "Student",
]
