# invoicing/choices.py
"""
Status vocabularies shared by the models and the pure calculators.
Kept free of model imports so the ledger can be used without the ORM.
"""

# Payment progress, derived from amount_paid vs amount_due.
PAYMENT_PENDING = "Pending"
PAYMENT_PARTIAL = "Partial"
PAYMENT_PAID = "Paid"

PAYMENT_STATUS_CHOICES = [
    (PAYMENT_PENDING, "Pending"),
    (PAYMENT_PARTIAL, "Partial"),
    (PAYMENT_PAID, "Paid"),
]

# Invoice lifecycle, independent of payment progress.
INVOICE_DRAFT = "Draft"
INVOICE_REGISTERED = "Registered"

INVOICE_STATUS_CHOICES = [
    (INVOICE_DRAFT, "Draft"),
    (INVOICE_REGISTERED, "Registered"),
]

CLIENT_ACTIVE = "Active"
CLIENT_INACTIVE = "Inactive"

CLIENT_STATUS_CHOICES = [
    (CLIENT_ACTIVE, "Active"),
    (CLIENT_INACTIVE, "Inactive"),
]

PROJECT_ACTIVE = "Active"
PROJECT_COMPLETED = "Completed"
PROJECT_ON_HOLD = "On Hold"

PROJECT_STATUS_CHOICES = [
    (PROJECT_ACTIVE, "Active"),
    (PROJECT_COMPLETED, "Completed"),
    (PROJECT_ON_HOLD, "On Hold"),
]

ACTIVITY_INVOICE_PAID = "invoice_paid"
ACTIVITY_INVOICE_SENT = "invoice_sent"
