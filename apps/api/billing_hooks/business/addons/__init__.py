from billing_hooks.business.addons.api import activity_router, router
from billing_hooks.business.addons.cancellation import (
    AddonCancellationService,
    addon_cancellation_service,
    build_cancellation_note,
    partition_items,
)
from billing_hooks.business.addons.models import Addon, CustomField, CustomFieldValue
from billing_hooks.business.addons.schemas import AddonRead, CancellationOutcome, InvoiceSplitRead
from billing_hooks.business.addons.service import AddonService, addon_service

__all__ = [
    "router",
    "activity_router",
    "Addon",
    "CustomField",
    "CustomFieldValue",
    "AddonRead",
    "CancellationOutcome",
    "InvoiceSplitRead",
    "AddonCancellationService",
    "addon_cancellation_service",
    "build_cancellation_note",
    "partition_items",
    "AddonService",
    "addon_service",
]
