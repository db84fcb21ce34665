from typing import Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from nested_students.crud.base import CRUDBase
from nested_students.models.student import Student
from nested_students.schemas.student import StudentCreate, StudentUpdate


class CRUDStudent(CRUDBase[Student, StudentCreate, StudentUpdate]):
    async def get_by_parent(self, db: AsyncSession, parent_id: int) -> Sequence[Student]:
        """Direct children only; a self-parented record is not its own child."""
        result = await db.execute(
            select(Student)
            .where(Student.parent_id == parent_id, Student.id != parent_id)
            .order_by(Student.id)
        )
        return result.scalars().all()

    async def remove_by_parent(self, db: AsyncSession, parent_id: int) -> int:
        """Bulk-delete the direct children of parent_id. Returns the row count."""
        result = await db.execute(
            delete(Student).where(Student.parent_id == parent_id, Student.id != parent_id)
        )
        await db.flush()
        return result.rowcount

    async def create(
        self, db: AsyncSession, *, obj_in: StudentCreate, profile: Optional[str] = None
    ) -> Student:
        data = obj_in.model_dump(exclude={"parent"})
        db_obj = Student(**data, parent_id=obj_in.parent, profile=profile or "")
        db.add(db_obj)
        await db.flush()
        await db.refresh(db_obj)
        return db_obj


crud_student = CRUDStudent(Student)
