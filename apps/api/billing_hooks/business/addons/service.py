from __future__ import annotations

from dataclasses import dataclass

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from billing_hooks import events
from billing_hooks.business.addons.models import Addon
from billing_hooks.business.addons.schemas import AddonRead


@dataclass(slots=True)
class AddonService:
    def get_addon(self, session: Session, addon_id: int) -> AddonRead:
        return AddonRead.model_validate(self._get_addon(session, addon_id))

    def list_addons(self, session: Session, *, user_id: int | None = None) -> list[AddonRead]:
        stmt = select(Addon)
        if user_id is not None:
            stmt = stmt.where(Addon.user_id == user_id)
        rows = session.scalars(stmt.order_by(Addon.id)).all()
        return [AddonRead.model_validate(row) for row in rows]

    def cancel_addon(self, session: Session, actor: str, addon_id: int) -> AddonRead:
        """Mark the addon Cancelled and announce it.

        Subscribers of ``addon.cancelled`` run synchronously, so the returned
        record already reflects whatever they persisted.
        """
        addon = self._get_addon(session, addon_id)
        if addon.status == "Cancelled":
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="addon already cancelled")

        addon.status = "Cancelled"
        session.add(addon)
        session.commit()

        events.publish(
            {
                "event_type": "addon.cancelled",
                "addon_id": addon_id,
                "user_id": addon.user_id,
                "actor": actor,
            }
        )
        # The hook may have committed through a different session.
        session.expire(addon)
        return self.get_addon(session, addon_id)

    @staticmethod
    def _get_addon(session: Session, addon_id: int) -> Addon:
        addon = session.get(Addon, addon_id)
        if addon is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="addon not found")
        return addon


addon_service = AddonService()
