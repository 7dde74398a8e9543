from collections.abc import Callable

from fastapi import Depends, HTTPException, status

from billing_hooks.core.auth import AuthUser, get_current_user


ADDONS_READ = "billing.addons.read"
ADDONS_CANCEL = "billing.addons.cancel"
INVOICES_READ = "billing.invoices.read"
INVOICES_WRITE = "billing.invoices.write"
ACTIVITY_READ = "billing.activity.read"


def require_permissions(*permissions: str) -> Callable[[AuthUser], AuthUser]:
    required = frozenset(permissions)

    async def checker(user: AuthUser = Depends(get_current_user)) -> AuthUser:
        missing = sorted(required.difference(user.roles))
        if missing:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Missing permissions: {', '.join(missing)}",
            )
        return user

    return checker
