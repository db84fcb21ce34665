"""Student endpoints: CRUD with multipart profile upload and cascade delete."""

import logging
from contextlib import contextmanager
from typing import Annotated, Iterator, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from nested_students.api.deps import get_student_service
from nested_students.exceptions import StudentNotFound, parse_student_id
from nested_students.schemas.student import StudentCreate, StudentResponse, StudentUpdate
from nested_students.services.blob_store import BlobUpload
from nested_students.services.student_service import StudentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/students", tags=["students"])


@contextmanager
def _handle_errors(action: str) -> Iterator[None]:
    """404 for a missing student; anything else is logged and hidden behind a 500."""
    try:
        yield
    except StudentNotFound as e:
        raise HTTPException(404, "Student not found") from e
    except Exception as e:
        logger.exception("Error %s: %s", action, e)
        raise HTTPException(500, "Internal Server Error") from e


def _as_blob(profile: Optional[UploadFile]) -> Optional[BlobUpload]:
    # Browsers send an empty file part when no file was picked
    if profile is None or not profile.filename:
        return None
    return BlobUpload(filename=profile.filename, file=profile.file)


# The static mount at "/" would swallow "/students/" before any slash redirect,
# so the trailing-slash form is routed explicitly.
@router.get("", response_model=list[StudentResponse])
@router.get("/", response_model=list[StudentResponse], include_in_schema=False)
async def list_students(
    service: Annotated[StudentService, Depends(get_student_service)],
):
    with _handle_errors("fetching students"):
        return await service.list_all()


@router.get("/{student_id}", response_model=StudentResponse)
async def get_student(
    student_id: str,
    service: Annotated[StudentService, Depends(get_student_service)],
):
    with _handle_errors(f"fetching student {student_id!r}"):
        return await service.get(parse_student_id(student_id))


# Mutating routes commit inside _handle_errors so a failed commit becomes a 500
# instead of surfacing after the response has been sent.


@router.post("", response_model=StudentResponse)
async def create_student(
    service: Annotated[StudentService, Depends(get_student_service)],
    name: Annotated[Optional[str], Form()] = None,
    email: Annotated[Optional[str], Form()] = None,
    phone: Annotated[Optional[str], Form()] = None,
    parent: Annotated[Optional[str], Form()] = None,
    profile: Annotated[Optional[UploadFile], File()] = None,
):
    with _handle_errors("creating student"):
        fields = StudentCreate(name=name, email=email, phone=phone, parent=parent)
        student = await service.create(fields, _as_blob(profile))
        await service.commit()
        return student


@router.put("/{student_id}", response_model=StudentResponse)
async def update_student(
    student_id: str,
    service: Annotated[StudentService, Depends(get_student_service)],
    name: Annotated[Optional[str], Form()] = None,
    email: Annotated[Optional[str], Form()] = None,
    phone: Annotated[Optional[str], Form()] = None,
    profile: Annotated[Optional[UploadFile], File()] = None,
):
    """Replace name/email/phone. The profile image changes only if a file is sent."""
    with _handle_errors(f"updating student {student_id!r}"):
        fields = StudentUpdate(name=name, email=email, phone=phone)
        student = await service.update(
            parse_student_id(student_id), fields, _as_blob(profile)
        )
        await service.commit()
        return student


@router.delete("/{student_id}")
async def delete_student(
    student_id: str,
    service: Annotated[StudentService, Depends(get_student_service)],
):
    """Delete a student, its direct children, and their profile images."""
    with _handle_errors(f"deleting student {student_id!r}"):
        await service.delete(parse_student_id(student_id))
        await service.commit()
    return {"message": "Student deleted"}
