"""Student lifecycle: records coupled to a profile blob, with one-level cascade delete."""

import logging
from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from nested_students.crud.students import crud_student
from nested_students.exceptions import BlobNotFound, StudentNotFound
from nested_students.models.student import Student
from nested_students.schemas.student import StudentCreate, StudentUpdate
from nested_students.services.blob_store import BlobStore, BlobUpload

logger = logging.getLogger(__name__)


class StudentService:
    """Create, update and delete students while keeping profile blobs in step.

    Operations only flush; the caller decides when to ``commit()``. Blob
    changes happen immediately and are never rolled back.
    """

    def __init__(
        self,
        db: AsyncSession,
        blobs: BlobStore,
        *,
        missing_blob_ok: bool = False,
    ):
        self.db = db
        self.blobs = blobs
        self.missing_blob_ok = missing_blob_ok

    async def _delete_blob(self, name: str) -> None:
        try:
            await self.blobs.delete(name)
        except BlobNotFound:
            if not self.missing_blob_ok:
                raise
            logger.warning("Profile blob %s already missing, skipping", name)

    async def commit(self) -> None:
        """Make record changes durable before the caller reports success."""
        await self.db.commit()

    async def list_all(self) -> Sequence[Student]:
        return await crud_student.get_multi(self.db)

    async def get(self, student_id: int) -> Student:
        student = await crud_student.get(self.db, student_id)
        if student is None:
            raise StudentNotFound(student_id)
        return student

    async def create(
        self, fields: StudentCreate, blob: Optional[BlobUpload] = None
    ) -> Student:
        profile = await self.blobs.save(blob) if blob is not None else ""
        student = await crud_student.create(self.db, obj_in=fields, profile=profile)
        logger.info("Created student %d (parent=%s)", student.id, student.parent_id)
        return student

    async def update(
        self,
        student_id: int,
        fields: StudentUpdate,
        blob: Optional[BlobUpload] = None,
    ) -> Student:
        """Overwrite name/email/phone; swap the profile blob only if one is given."""
        student = await self.get(student_id)

        if blob is not None:
            new_profile = await self.blobs.save(blob)
            # Same name means the save above already replaced the old file.
            if student.profile and student.profile != new_profile:
                await self._delete_blob(student.profile)
            student.profile = new_profile

        student = await crud_student.update(self.db, db_obj=student, obj_in=fields)
        logger.info("Updated student %d", student.id)
        return student

    async def delete(self, student_id: int) -> Student:
        """Delete a student, its direct children, and every profile blob involved.

        Grandchildren are left in place with a dangling parent. Nothing is
        touched when the student does not exist.
        """
        await self.get(student_id)

        children = await crud_student.get_by_parent(self.db, student_id)
        for child in children:
            if child.profile:
                await self._delete_blob(child.profile)
        removed = await crud_student.remove_by_parent(self.db, student_id)

        student = await crud_student.remove(self.db, id=student_id)
        if student is None:
            raise StudentNotFound(student_id)

        if student.profile:
            await self._delete_blob(student.profile)

        logger.info("Deleted student %d and %d direct children", student_id, removed)
        return student
