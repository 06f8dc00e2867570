from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from franchise_api.core.errors import BadRequestError, ConflictError, NotFoundError, PermissionDeniedError
from franchise_api.core.rbac import Principal, Tier
from franchise_api.db.models import Student, Teacher
from franchise_api.db.models.enums import TeacherStatus
from franchise_api.repositories.people import StudentRepository, TeacherRepository
from franchise_api.schemas.common import Page
from franchise_api.schemas.people import StudentRead, StudentWrite, TeacherContract, TeacherRead, TeacherWrite
from franchise_api.services.base import BaseService
from franchise_api.services.scoping import active_lc_chain, ensure_in_scope, ensure_lc_owner, org_scope_clause

logger = logging.getLogger(__name__)


def _enum_values(data: dict, *keys: str) -> dict:
    for key in keys:
        value = data.get(key)
        if hasattr(value, "value"):
            data[key] = value.value
    return data


class StudentService(BaseService):
    """Students are owned by one Learning Center; MF and HQ read them across their scope."""

    def __init__(self, session: AsyncSession, principal: Principal) -> None:
        super().__init__(session, principal)
        self.students = StudentRepository(session)

    async def _get(self, student_id: int) -> Student:
        student = await self.students.get_student(student_id)
        if student is None:
            raise NotFoundError("Student not found")
        return student

    # PUBLIC_INTERFACE
    async def list_students(
        self,
        *,
        status: Optional[str],
        search: Optional[str],
        lc_id: Optional[int],
        mf_id: Optional[int],
        sort_by: Optional[str],
        sort_order: str,
        page: int,
        limit: int,
    ) -> Page[StudentRead]:
        scope = await org_scope_clause(self.session, self.principal, Student, lc_id=lc_id, mf_id=mf_id)
        students, total = await self.students.list_students(
            scope=scope,
            status=status,
            search=search,
            sort_by=sort_by,
            sort_order=sort_order,
            page=page,
            limit=limit,
        )
        items = [StudentRead.model_validate(s) for s in students]
        return Page[StudentRead].build(items, page=page, limit=limit, total=total)

    # PUBLIC_INTERFACE
    async def get_student(self, student_id: int) -> StudentRead:
        student = await self._get(student_id)
        ensure_in_scope(self.principal, student)
        return StudentRead.model_validate(student)

    # PUBLIC_INTERFACE
    async def create_student(self, payload: StudentWrite) -> StudentRead:
        """Create a student at the caller's Learning Center."""
        if self.principal.tier != Tier.LC:
            raise PermissionDeniedError("Only LC users can create students")
        chain = await active_lc_chain(self.session, self.principal)

        data = _enum_values(payload.model_dump(), "gender", "status")
        if data.get("enrollment_date") is None:
            data["enrollment_date"] = date.today()
        student = Student(**data, **chain)
        await self.students.add(student)
        await self.students.commit()
        logger.info("Created student %s at LC %s", student.id, chain["lc_id"])
        return StudentRead.model_validate(await self.students.refetch(Student, student.id))

    # PUBLIC_INTERFACE
    async def update_student(self, student_id: int, payload: StudentWrite) -> StudentRead:
        student = await self._get(student_id)
        ensure_lc_owner(self.principal, student, "update students")

        data = _enum_values(payload.model_dump(), "gender", "status")
        if data.get("enrollment_date") is None:
            data.pop("enrollment_date")
        for field, value in data.items():
            setattr(student, field, value)
        await self.students.commit()
        logger.info("Updated student %s", student.id)
        return StudentRead.model_validate(await self.students.refetch(Student, student.id))

    # PUBLIC_INTERFACE
    async def delete_student(self, student_id: int) -> None:
        student = await self._get(student_id)
        ensure_lc_owner(self.principal, student, "delete students")
        await self.students.delete(student)
        await self.students.commit()
        logger.info("Deleted student %s", student_id)


class TeacherService(BaseService):
    """
    Teachers are created by their Learning Center in PROCESS status.

    The Master Franchisee uploads the contract, then HQ approves the teacher,
    which is the only way to reach ACTIVE.
    """

    def __init__(self, session: AsyncSession, principal: Principal) -> None:
        super().__init__(session, principal)
        self.teachers = TeacherRepository(session)

    async def _get(self, teacher_id: int) -> Teacher:
        teacher = await self.teachers.get_teacher(teacher_id)
        if teacher is None:
            raise NotFoundError("Teacher not found")
        return teacher

    # PUBLIC_INTERFACE
    async def list_teachers(
        self,
        *,
        status: Optional[str],
        search: Optional[str],
        lc_id: Optional[int],
        mf_id: Optional[int],
        sort_by: Optional[str],
        sort_order: str,
        page: int,
        limit: int,
    ) -> Page[TeacherRead]:
        scope = await org_scope_clause(self.session, self.principal, Teacher, lc_id=lc_id, mf_id=mf_id)
        teachers, total = await self.teachers.list_teachers(
            scope=scope,
            status=status,
            search=search,
            sort_by=sort_by,
            sort_order=sort_order,
            page=page,
            limit=limit,
        )
        items = [TeacherRead.model_validate(t) for t in teachers]
        return Page[TeacherRead].build(items, page=page, limit=limit, total=total)

    # PUBLIC_INTERFACE
    async def get_teacher(self, teacher_id: int) -> TeacherRead:
        teacher = await self._get(teacher_id)
        ensure_in_scope(self.principal, teacher)
        return TeacherRead.model_validate(teacher)

    # PUBLIC_INTERFACE
    async def create_teacher(self, payload: TeacherWrite) -> TeacherRead:
        if self.principal.tier != Tier.LC:
            raise PermissionDeniedError("Only LC users can create teachers")
        chain = await active_lc_chain(self.session, self.principal)
        if await self.teachers.email_taken(payload.email):
            raise ConflictError("Teacher with this email already exists")

        data = _enum_values(payload.model_dump(exclude={"status"}), "gender")
        data["email"] = data["email"].lower()
        teacher = Teacher(**data, **chain, status=TeacherStatus.PROCESS.value)
        await self.teachers.add(teacher)
        await self.teachers.commit()
        logger.info("Created teacher %s at LC %s (PROCESS)", teacher.id, chain["lc_id"])
        return TeacherRead.model_validate(await self.teachers.refetch(Teacher, teacher.id))

    # PUBLIC_INTERFACE
    async def update_teacher(self, teacher_id: int, payload: TeacherWrite) -> TeacherRead:
        teacher = await self._get(teacher_id)
        ensure_lc_owner(self.principal, teacher, "update teachers")

        data = _enum_values(payload.model_dump(), "gender", "status")
        data["email"] = data["email"].lower()
        if await self.teachers.email_taken(data["email"], exclude_id=teacher.id):
            raise ConflictError("Teacher with this email already exists")

        status = data.pop("status")
        if status is not None and status != teacher.status:
            if status == TeacherStatus.ACTIVE.value and teacher.approved_at is None:
                raise BadRequestError("Teacher must be approved by HQ before becoming ACTIVE")
            if status == TeacherStatus.PROCESS.value:
                raise BadRequestError("Teacher cannot be moved back to PROCESS")
            teacher.status = status

        for field, value in data.items():
            setattr(teacher, field, value)
        await self.teachers.commit()
        logger.info("Updated teacher %s", teacher.id)
        return TeacherRead.model_validate(await self.teachers.refetch(Teacher, teacher.id))

    # PUBLIC_INTERFACE
    async def delete_teacher(self, teacher_id: int) -> None:
        teacher = await self._get(teacher_id)
        ensure_lc_owner(self.principal, teacher, "delete teachers")
        if await self.teachers.assigned_to_groups(teacher.id):
            raise ConflictError("Cannot delete teacher assigned to learning groups")
        await self.teachers.delete(teacher)
        await self.teachers.commit()
        logger.info("Deleted teacher %s", teacher_id)

    # PUBLIC_INTERFACE
    async def upload_contract(self, teacher_id: int, payload: TeacherContract) -> TeacherRead:
        """Attach the signed contract. Only the teacher's Master Franchisee may do this."""
        if self.principal.tier != Tier.MF:
            raise PermissionDeniedError("Only MF users can upload contracts")
        teacher = await self._get(teacher_id)
        if self.principal.mf_id is None or teacher.mf_id != self.principal.mf_id:
            raise PermissionDeniedError("Access denied")
        if teacher.status != TeacherStatus.PROCESS.value:
            raise BadRequestError("Contract can only be uploaded for teachers in PROCESS status")

        teacher.contract_file = payload.contract_file
        teacher.contract_date = payload.contract_date
        teacher.contract_uploaded_by = self.principal.user_id
        teacher.contract_uploaded_at = datetime.now(timezone.utc)
        await self.teachers.commit()
        logger.info("Contract uploaded for teacher %s", teacher.id)
        return TeacherRead.model_validate(await self.teachers.refetch(Teacher, teacher.id))

    # PUBLIC_INTERFACE
    async def approve_teacher(self, teacher_id: int) -> TeacherRead:
        """HQ approval moves a contracted PROCESS teacher to ACTIVE."""
        if self.principal.tier != Tier.HQ:
            raise PermissionDeniedError("Only HQ users can approve teachers")
        teacher = await self._get(teacher_id)
        if teacher.status != TeacherStatus.PROCESS.value:
            raise BadRequestError("Only teachers in PROCESS status can be approved")
        if not teacher.contract_file or teacher.contract_date is None:
            raise BadRequestError("Teacher must have a contract uploaded before approval")

        teacher.status = TeacherStatus.ACTIVE.value
        teacher.approved_by = self.principal.user_id
        teacher.approved_at = datetime.now(timezone.utc)
        await self.teachers.commit()
        logger.info("Approved teacher %s", teacher.id)
        return TeacherRead.model_validate(await self.teachers.refetch(Teacher, teacher.id))
