"""Error taxonomy for the student lifecycle.

``StudentNotFound`` maps to HTTP 404. Everything else, ``InternalFailure`` and
its subclasses included, is logged and reported as an opaque HTTP 500.
"""


class StudentNotFound(Exception):
    def __init__(self, student_id: int):
        super().__init__(f"Student {student_id} not found")
        self.student_id = student_id


class InternalFailure(Exception):
    pass


class MalformedIdentifier(InternalFailure):
    def __init__(self, raw: str):
        super().__init__(f"Malformed student id: {raw!r}")
        self.raw = raw


class BlobNotFound(InternalFailure):
    def __init__(self, name: str):
        super().__init__(f"Blob not found: {name}")
        self.name = name


class InvalidBlobName(InternalFailure):
    def __init__(self, name: str):
        super().__init__(f"Invalid blob name: {name!r}")
        self.name = name


def parse_student_id(raw: str) -> int:
    """Convert a path segment to a record id or raise MalformedIdentifier."""
    try:
        value = int(raw)
    except (TypeError, ValueError) as e:
        raise MalformedIdentifier(raw) from e
    if value < 1:
        raise MalformedIdentifier(raw)
    return value
