"""
Teacher trainings.

HQ owns the catalog of training types. Trainings are run by a Teacher Trainer
account: a TT user manages the trainings of its own account, HQ manages all
of them, and MF and LC users may browse active trainings without changing them.
"""
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import ColumnElement
from sqlalchemy.ext.asyncio import AsyncSession

from franchise_api.core.errors import BadRequestError, ConflictError, NotFoundError, PermissionDeniedError
from franchise_api.core.rbac import Principal, Tier
from franchise_api.db.models import Training, TrainingType
from franchise_api.db.models.enums import AccountStatus
from franchise_api.repositories.organization import OrganizationRepository
from franchise_api.repositories.training import TrainingRepository, TrainingTypeRepository
from franchise_api.schemas.common import Page
from franchise_api.schemas.training import (
    TrainingCreate,
    TrainingRead,
    TrainingTypeCreate,
    TrainingTypeRead,
    TrainingTypeUpdate,
    TrainingUpdate,
)
from franchise_api.services.base import BaseService

logger = logging.getLogger(__name__)


class TrainingService(BaseService):
    """Training types (HQ) and trainings scoped to their Teacher Trainer account."""

    def __init__(self, session: AsyncSession, principal: Principal) -> None:
        super().__init__(session, principal)
        self.types = TrainingTypeRepository(session)
        self.trainings = TrainingRepository(session)
        self.orgs = OrganizationRepository(session)

    def _require_hq(self) -> None:
        if self.principal.tier != Tier.HQ:
            raise PermissionDeniedError("Only HQ users can manage training types")

    def _tt_id(self) -> int:
        if self.principal.tt_id is None:
            raise BadRequestError("TT user missing organizational information")
        return self.principal.tt_id

    def _read_scope(self) -> Optional[ColumnElement[bool]]:
        tier = self.principal.tier
        if tier == Tier.HQ:
            return None
        if tier == Tier.TT:
            return Training.tt_id == self._tt_id()
        return Training.is_active.is_(True)

    def _ensure_can_view(self, training: Training) -> None:
        tier = self.principal.tier
        if tier == Tier.HQ:
            return
        if tier == Tier.TT and training.tt_id == self._tt_id():
            return
        if tier in (Tier.MF, Tier.LC) and training.is_active:
            return
        raise PermissionDeniedError("Access denied")

    def _ensure_can_manage(self, training: Training) -> None:
        tier = self.principal.tier
        if tier == Tier.HQ:
            return
        if tier == Tier.TT and training.tt_id == self._tt_id():
            return
        raise PermissionDeniedError("Only HQ or the running Teacher Trainer can change this training")

    async def _get_type(self, type_id: int) -> TrainingType:
        training_type = await self.types.get_type(type_id)
        if training_type is None:
            raise NotFoundError("Training type not found")
        return training_type

    async def _get_training(self, training_id: int) -> Training:
        training = await self.trainings.get_training(training_id)
        if training is None:
            raise NotFoundError("Training not found")
        return training

    async def _active_type(self, type_id: int) -> TrainingType:
        training_type = await self.types.get_type(type_id)
        if training_type is None or not training_type.is_active:
            raise BadRequestError("Invalid or inactive training type")
        return training_type

    # Training types
    # PUBLIC_INTERFACE
    async def list_types(
        self, *, search: Optional[str], is_active: Optional[bool], page: int, limit: int
    ) -> Page[TrainingTypeRead]:
        rows, total = await self.types.list_types(search=search, is_active=is_active, page=page, limit=limit)
        return Page[TrainingTypeRead].build(
            [TrainingTypeRead.model_validate(t) for t in rows], page=page, limit=limit, total=total
        )

    # PUBLIC_INTERFACE
    async def get_type(self, type_id: int) -> TrainingTypeRead:
        return TrainingTypeRead.model_validate(await self._get_type(type_id))

    # PUBLIC_INTERFACE
    async def create_type(self, payload: TrainingTypeCreate) -> TrainingTypeRead:
        self._require_hq()
        if await self.types.name_taken(payload.name):
            raise ConflictError("Training type with this name already exists")
        training_type = TrainingType(**payload.model_dump())
        await self.types.add(training_type)
        await self.types.commit()
        logger.info("Created training type %s (%s)", training_type.id, training_type.name)
        return TrainingTypeRead.model_validate(await self.types.refetch(TrainingType, training_type.id))

    # PUBLIC_INTERFACE
    async def update_type(self, type_id: int, payload: TrainingTypeUpdate) -> TrainingTypeRead:
        self._require_hq()
        training_type = await self._get_type(type_id)
        data = payload.model_dump(exclude_unset=True)
        if "name" in data and await self.types.name_taken(data["name"], exclude_id=type_id):
            raise ConflictError("Training type with this name already exists")
        for field, value in data.items():
            setattr(training_type, field, value)
        await self.types.commit()
        logger.info("Updated training type %s", type_id)
        return TrainingTypeRead.model_validate(await self.types.refetch(TrainingType, type_id))

    # PUBLIC_INTERFACE
    async def delete_type(self, type_id: int) -> None:
        """Delete an unused training type; types with trainings should be deactivated instead."""
        self._require_hq()
        training_type = await self._get_type(type_id)
        if await self.trainings.type_in_use(type_id):
            raise ConflictError("Training type is used by existing trainings")
        await self.types.delete(training_type)
        await self.types.commit()
        logger.info("Deleted training type %s", type_id)

    # Trainings
    # PUBLIC_INTERFACE
    async def list_trainings(
        self,
        *,
        search: Optional[str],
        type_id: Optional[int],
        tt_id: Optional[int],
        is_active: Optional[bool],
        page: int,
        limit: int,
    ) -> Page[TrainingRead]:
        rows, total = await self.trainings.list_trainings(
            scope=self._read_scope(),
            search=search,
            type_id=type_id,
            tt_id=tt_id,
            is_active=is_active,
            page=page,
            limit=limit,
        )
        return Page[TrainingRead].build(
            [TrainingRead.model_validate(t) for t in rows], page=page, limit=limit, total=total
        )

    # PUBLIC_INTERFACE
    async def get_training(self, training_id: int) -> TrainingRead:
        training = await self._get_training(training_id)
        self._ensure_can_view(training)
        return TrainingRead.model_validate(training)

    # PUBLIC_INTERFACE
    async def create_training(self, payload: TrainingCreate) -> TrainingRead:
        """
        Schedule a training under a Teacher Trainer account.

        Raises:
            PermissionDeniedError: caller is not HQ or TT, or a TT names another account.
            BadRequestError: missing/inactive TT account or inactive training type.
        """
        tier = self.principal.tier
        if tier == Tier.TT:
            own = self._tt_id()
            if payload.tt_id is not None and payload.tt_id != own:
                raise PermissionDeniedError("Teacher Trainers can only create trainings for their own account")
            tt_id = own
        elif tier == Tier.HQ:
            if payload.tt_id is None:
                raise BadRequestError("tt_id is required")
            tt_id = payload.tt_id
        else:
            raise PermissionDeniedError("Only HQ and TT users can create trainings")

        tt = await self.orgs.get_tt(tt_id)
        if tt is None or tt.status != AccountStatus.ACTIVE.value:
            raise BadRequestError("Invalid or inactive Teacher Trainer account")
        await self._active_type(payload.training_type_id)

        training = Training(
            **payload.model_dump(exclude={"tt_id"}),
            tt_id=tt.id,
            hq_id=tt.hq_id,
            created_by=self.principal.user_id,
        )
        await self.trainings.add(training)
        await self.trainings.commit()
        logger.info("Created training %s for TT %s", training.id, tt.id)
        return TrainingRead.model_validate(await self.trainings.refetch(Training, training.id))

    # PUBLIC_INTERFACE
    async def update_training(self, training_id: int, payload: TrainingUpdate) -> TrainingRead:
        training = await self._get_training(training_id)
        self._ensure_can_manage(training)
        data = payload.model_dump(exclude_unset=True)
        if "training_type_id" in data and data["training_type_id"] != training.training_type_id:
            await self._active_type(data["training_type_id"])

        start = data.get("start_date", training.start_date)
        end = data.get("end_date", training.end_date)
        if end < start:
            raise BadRequestError("end_date must not be before start_date")
        current = data.get("current_participants", training.current_participants)
        if current > data.get("max_participants", training.max_participants):
            raise BadRequestError("current_participants cannot exceed max_participants")

        for field, value in data.items():
            setattr(training, field, value)
        await self.trainings.commit()
        logger.info("Updated training %s", training_id)
        return TrainingRead.model_validate(await self.trainings.refetch(Training, training_id))

    # PUBLIC_INTERFACE
    async def delete_training(self, training_id: int) -> None:
        training = await self._get_training(training_id)
        self._ensure_can_manage(training)
        await self.trainings.delete(training)
        await self.trainings.commit()
        logger.info("Deleted training %s", training_id)
