from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import ColumnElement, func, or_, select

from franchise_api.db.models import LearningGroup, Student, Teacher
from .base import BaseRepository, apply_sort

STUDENT_SORT_FIELDS = ("created_at", "updated_at", "first_name", "last_name", "enrollment_date", "status")
TEACHER_SORT_FIELDS = ("created_at", "updated_at", "first_name", "last_name", "experience", "status")


class StudentRepository(BaseRepository):
    """Repository for students."""

    async def get_student(self, student_id: int) -> Optional[Student]:
        return await self.scalar_one_or_none(select(Student).where(Student.id == student_id))

    async def list_students(
        self,
        *,
        scope: Optional[ColumnElement[bool]],
        status: Optional[str],
        search: Optional[str],
        sort_by: Optional[str],
        sort_order: str,
        page: int,
        limit: int,
    ) -> Tuple[List[Student], int]:
        stmt = select(Student)
        if scope is not None:
            stmt = stmt.where(scope)
        if status:
            stmt = stmt.where(Student.status == status)
        if search:
            like = f"%{search}%"
            stmt = stmt.where(
                or_(
                    Student.first_name.ilike(like),
                    Student.last_name.ilike(like),
                    Student.parent_first_name.ilike(like),
                    Student.parent_last_name.ilike(like),
                    Student.parent_email.ilike(like),
                )
            )
        stmt = apply_sort(stmt, Student, sort_by, sort_order, STUDENT_SORT_FIELDS)
        return await self.paginate(stmt, page=page, limit=limit)

    async def all_in_scope(self, scope: Optional[ColumnElement[bool]]) -> List[Student]:
        stmt = select(Student)
        if scope is not None:
            stmt = stmt.where(scope)
        res = await self.scalars(stmt.order_by(Student.last_name, Student.first_name, Student.id))
        return list(res)

    async def ids_in_lc(self, lc_id: int, student_ids: List[int]) -> set[int]:
        if not student_ids:
            return set()
        stmt = select(Student.id).where(Student.lc_id == lc_id, Student.id.in_(student_ids))
        return set(await self.scalars(stmt))


class TeacherRepository(BaseRepository):
    """Repository for teachers."""

    async def get_teacher(self, teacher_id: int) -> Optional[Teacher]:
        return await self.scalar_one_or_none(select(Teacher).where(Teacher.id == teacher_id))

    async def email_taken(self, email: str, exclude_id: Optional[int] = None) -> bool:
        stmt = select(Teacher.id).where(func.lower(Teacher.email) == email.lower())
        if exclude_id is not None:
            stmt = stmt.where(Teacher.id != exclude_id)
        return (await self.scalar_one_or_none(stmt)) is not None

    async def list_teachers(
        self,
        *,
        scope: Optional[ColumnElement[bool]],
        status: Optional[str],
        search: Optional[str],
        sort_by: Optional[str],
        sort_order: str,
        page: int,
        limit: int,
    ) -> Tuple[List[Teacher], int]:
        stmt = select(Teacher)
        if scope is not None:
            stmt = stmt.where(scope)
        if status:
            stmt = stmt.where(Teacher.status == status)
        if search:
            like = f"%{search}%"
            stmt = stmt.where(
                or_(Teacher.first_name.ilike(like), Teacher.last_name.ilike(like), Teacher.email.ilike(like))
            )
        stmt = apply_sort(stmt, Teacher, sort_by, sort_order, TEACHER_SORT_FIELDS)
        return await self.paginate(stmt, page=page, limit=limit)

    async def assigned_to_groups(self, teacher_id: int) -> bool:
        stmt = select(LearningGroup.id).where(LearningGroup.teacher_id == teacher_id).limit(1)
        return (await self.scalar_one_or_none(stmt)) is not None
