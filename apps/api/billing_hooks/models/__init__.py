from billing_hooks.models.activity import ActivityLog

__all__ = ["ActivityLog"]
