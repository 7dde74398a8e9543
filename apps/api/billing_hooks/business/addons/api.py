from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from billing_hooks.business.addons.cancellation import addon_cancellation_service
from billing_hooks.business.addons.schemas import ActivityLogRead, AddonRead, CancellationOutcome
from billing_hooks.business.addons.service import addon_service
from billing_hooks.core.auth import AuthUser
from billing_hooks.core.database import get_db
from billing_hooks.core.rbac import ACTIVITY_READ, ADDONS_CANCEL, ADDONS_READ, require_permissions
from billing_hooks.services.activity import list_activity


router = APIRouter(prefix="/addons", tags=["addons"])
activity_router = APIRouter(prefix="/activity-log", tags=["activity"])


@router.get("", response_model=list[AddonRead], dependencies=[Depends(require_permissions(ADDONS_READ))])
def list_addons(user_id: int | None = Query(default=None), db: Session = Depends(get_db)) -> list[AddonRead]:
    return addon_service.list_addons(db, user_id=user_id)


@router.get("/{addon_id}", response_model=AddonRead, dependencies=[Depends(require_permissions(ADDONS_READ))])
def get_addon(addon_id: int, db: Session = Depends(get_db)) -> AddonRead:
    return addon_service.get_addon(db, addon_id)


@router.post("/{addon_id}/cancel", response_model=AddonRead)
def cancel_addon(
    addon_id: int,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(require_permissions(ADDONS_CANCEL)),
) -> AddonRead:
    return addon_service.cancel_addon(db, user.sub, addon_id)


@router.post("/{addon_id}/cancellation/run", response_model=CancellationOutcome)
def run_cancellation_hook(
    addon_id: int,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(require_permissions(ADDONS_CANCEL)),
) -> CancellationOutcome:
    return addon_cancellation_service.handle_addon_cancelled(db, user.sub, addon_id)


@activity_router.get("", response_model=list[ActivityLogRead], dependencies=[Depends(require_permissions(ACTIVITY_READ))])
def get_activity_log(limit: int = Query(default=100, ge=1, le=1000), db: Session = Depends(get_db)) -> list[ActivityLogRead]:
    return [ActivityLogRead.model_validate(entry) for entry in list_activity(db, limit=limit)]
