from billing_hooks.business.billing.api import router
from billing_hooks.business.billing.models import BillingInvoice, BillingInvoiceItem
from billing_hooks.business.billing.schemas import InvoiceCreate, InvoiceItemCreate, InvoiceItemRead, InvoiceRead
from billing_hooks.business.billing.service import BillingService, billing_service
from billing_hooks.business.billing.totals import InvoiceTotals, compute_invoice_totals

__all__ = [
    "router",
    "BillingInvoice",
    "BillingInvoiceItem",
    "InvoiceCreate",
    "InvoiceItemCreate",
    "InvoiceItemRead",
    "InvoiceRead",
    "InvoiceTotals",
    "BillingService",
    "billing_service",
    "compute_invoice_totals",
]
