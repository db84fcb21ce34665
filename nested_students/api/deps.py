"""FastAPI dependencies."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from nested_students.config import get_settings
from nested_students.database import get_db
from nested_students.services.blob_store import BlobStore, LocalBlobStore
from nested_students.services.student_service import StudentService


@lru_cache
def get_blob_store() -> BlobStore:
    return LocalBlobStore(get_settings().UPLOAD_DIR)


async def get_student_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    blobs: Annotated[BlobStore, Depends(get_blob_store)],
) -> StudentService:
    return StudentService(
        db, blobs, missing_blob_ok=get_settings().BLOB_DELETE_MISSING_OK
    )
