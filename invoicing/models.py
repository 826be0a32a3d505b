from decimal import Decimal

from django.core.serializers.json import DjangoJSONEncoder
from django.core.validators import MinValueValidator
from django.db import models, transaction
from django.db.models import Q
from django.utils import timezone

from project.common.models import OwnedModelMixin, TimestampedModel

from .choices import (
    CLIENT_ACTIVE,
    CLIENT_STATUS_CHOICES,
    INVOICE_DRAFT,
    INVOICE_REGISTERED,
    INVOICE_STATUS_CHOICES,
    PAYMENT_PAID,
    PAYMENT_PENDING,
    PAYMENT_STATUS_CHOICES,
    PROJECT_ACTIVE,
    PROJECT_STATUS_CHOICES,
)
from .exceptions import ValidationError
from .services.ledger import classify_status
from .services.snapshots import InvoiceSnapshot, Payment
from .services.totals import compute_totals, default_due_date
from .utils.finance import EPSILON


class Client(OwnedModelMixin, TimestampedModel):
    name    = models.CharField(max_length=255)
    contact = models.CharField(max_length=255, blank=True)
    address = models.TextField(blank=True)
    email   = models.EmailField(max_length=254)
    phone   = models.CharField(max_length=50, blank=True)
    status  = models.CharField(max_length=10, choices=CLIENT_STATUS_CHOICES, default=CLIENT_ACTIVE)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["user", "name"], name="inv_client_user_name_idx"),
        ]

    def __str__(self):
        return self.name


class Project(OwnedModelMixin, TimestampedModel):
    name        = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    client      = models.ForeignKey(
        "Client",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="projects",
    )
    # Legacy free-text link, kept for rows created before the FK existed.
    client_name = models.CharField(max_length=255, blank=True)
    status      = models.CharField(max_length=20, choices=PROJECT_STATUS_CHOICES, default=PROJECT_ACTIVE)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name

    def clean(self):
        super().clean()
        self._assert_owned_fk("client", self.client)

    def save(self, *args, **kwargs):
        if self.client_id and not self.client_name:
            self.client_name = self.client.name
        super().save(*args, **kwargs)

    @property
    def client_display(self) -> str:
        return self.client.name if self.client_id else self.client_name


class CompanyProfile(OwnedModelMixin, TimestampedModel):
    """
    The issuing company printed in an invoice's "From" block.
    At most one profile per user is the default.
    """
    company_name   = models.CharField(max_length=255)
    address        = models.CharField(max_length=255, blank=True)
    city_state_zip = models.CharField(max_length=255, blank=True)
    phone          = models.CharField(max_length=50, blank=True)
    email          = models.EmailField(blank=True)
    website        = models.URLField(blank=True)
    is_default     = models.BooleanField(default=False)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["user"],
                condition=Q(is_default=True),
                name="unique_default_company_profile_per_user",
            ),
        ]
        ordering = ["-is_default", "company_name"]

    def __str__(self):
        return self.company_name

    @classmethod
    def get_default(cls, user):
        return cls.objects.filter(user=user).order_by("-is_default", "pk").first()

    def set_default(self):
        """
        Make this the user's only default profile: clear the others and set
        this one in a single transaction.
        """
        with transaction.atomic():
            (
                CompanyProfile.objects
                .select_for_update()
                .filter(user_id=self.user_id, is_default=True)
                .exclude(pk=self.pk)
                .update(is_default=False, updated_at=timezone.now())
            )
            self.is_default = True
            self.save(update_fields=["is_default", "updated_at"])

    def address_lines(self) -> list[str]:
        return [ln for ln in (self.address, self.city_state_zip) if ln and ln.strip()]


class Invoice(OwnedModelMixin, TimestampedModel):
    """
    A billing document with line items and its own payment ledger.

    subtotal / tax / amount_due are a cache of compute_totals(items);
    payment_status is always classify_status(amount_paid, amount_due).
    Client and issuer details are copied in at save time and not kept in sync.
    """

    # ---------- Identity & relationships ----------
    invoice_number = models.CharField(
        max_length=25,
        help_text="Human-visible invoice ID (INV-#YYYY-NNNN).",
    )
    project = models.ForeignKey(
        "Project",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="invoices",
    )
    project_name = models.CharField(max_length=255, blank=True)
    client = models.ForeignKey(
        "Client",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="invoices",
    )

    # ---------- Client snapshot ----------
    client_detail  = models.CharField(max_length=255, blank=True, help_text="Client name at time of invoicing.")
    client_contact = models.CharField(max_length=255, blank=True)
    client_address = models.TextField(blank=True)

    # ---------- Dates ----------
    issue_date = models.DateField()
    due_date   = models.DateField(blank=True)

    # ---------- Money ----------
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"), editable=False)
    tax = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"), editable=False)
    amount_due = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"), editable=False)
    amount_paid = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        editable=False,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    payments = models.JSONField(
        default=list,
        blank=True,
        encoder=DjangoJSONEncoder,
        editable=False,
        help_text="Ordered payment ledger: [{date, amount, note}, ...].",
    )
    payment_status = models.CharField(
        max_length=10,
        choices=PAYMENT_STATUS_CHOICES,
        default=PAYMENT_PENDING,
        editable=False,
    )

    # ---------- Lifecycle ----------
    status = models.CharField(max_length=12, choices=INVOICE_STATUS_CHOICES, default=INVOICE_DRAFT)
    version = models.PositiveIntegerField(
        default=1,
        editable=False,
        help_text="Bumped on every payment ledger write; used for compare-and-swap.",
    )

    # ---------- Immutable "From" snapshot ----------
    company = models.ForeignKey(
        "CompanyProfile",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="invoices",
    )
    from_company_name   = models.CharField(max_length=255, blank=True)
    from_address        = models.CharField(max_length=255, blank=True)
    from_city_state_zip = models.CharField(max_length=255, blank=True)
    from_phone          = models.CharField(max_length=50, blank=True)
    from_email          = models.EmailField(blank=True)
    from_website        = models.URLField(blank=True)

    class Meta:
        ordering = ["-issue_date", "-pk"]
        constraints = [
            models.UniqueConstraint(
                fields=["user", "invoice_number"],
                name="uniq_invoice_number_per_user",
            ),
        ]
        indexes = [
            models.Index(fields=["user", "issue_date"], name="inv_invoice_user_issue_idx"),
            models.Index(fields=["user", "updated_at"], name="inv_invoice_user_updated_idx"),
            models.Index(fields=["payment_status"], name="inv_invoice_paystatus_idx"),
            models.Index(fields=["status"], name="inv_invoice_status_idx"),
        ]

    def __str__(self):
        return self.invoice_number or f"Invoice #{self.pk}"

    def clean(self):
        super().clean()
        self._assert_owned_fk("client", self.client)
        self._assert_owned_fk("project", self.project)
        self._assert_owned_fk("company", self.company)
        if self.amount_paid > self.amount_due + EPSILON:
            raise ValidationError(
                f"Invoice total {self.amount_due:.2f} cannot be less than the "
                f"{self.amount_paid:.2f} already paid.",
                code="total_below_paid",
            )

    def save(self, *args, **kwargs):
        """
        Fill in invoice_number and due_date when missing, and keep
        payment_status in step with the amounts.
        """
        if not self.invoice_number and self.user_id:
            from .services.numbering import generate_invoice_number

            year = self.issue_date.year if self.issue_date else None
            self.invoice_number = generate_invoice_number(self.user, year=year)
        if self.issue_date and not self.due_date:
            self.due_date = default_due_date(self.issue_date)
        self.payment_status = classify_status(self.amount_paid, self.amount_due)
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "payment_status" not in update_fields:
            kwargs["update_fields"] = [*update_fields, "payment_status"]
        super().save(*args, **kwargs)

    # ---------- Totals ----------
    def recalculate_totals(self, save: bool = True):
        """
        Recompute subtotal, tax and amount_due from the line items, together,
        and reclassify the payment status against the new amount_due.
        """
        totals = compute_totals(self.items.all())
        self.subtotal = totals.subtotal
        self.tax = totals.tax
        self.amount_due = totals.amount_due
        self.payment_status = classify_status(self.amount_paid, self.amount_due)
        if save:
            self.save(update_fields=["subtotal", "tax", "amount_due", "payment_status", "updated_at"])
        return totals

    # ---------- Convenience ----------
    @property
    def balance_due(self) -> Decimal:
        return self.amount_due - self.amount_paid

    @property
    def is_draft(self) -> bool:
        return self.status == INVOICE_DRAFT

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PAYMENT_PAID

    @property
    def is_overdue(self) -> bool:
        return (
            self.status == INVOICE_REGISTERED
            and not self.is_paid
            and self.due_date is not None
            and self.due_date < timezone.localdate()
        )

    @property
    def payment_terms_days(self):
        if self.issue_date and self.due_date:
            return (self.due_date - self.issue_date).days
        return None

    def ledger_entries(self) -> list[Payment]:
        return [Payment.from_dict(p) for p in (self.payments or [])]

    def to_snapshot(self) -> InvoiceSnapshot:
        return InvoiceSnapshot(
            pk=self.pk,
            invoice_number=self.invoice_number or "",
            project_id=self.project_id,
            project_name=self.project_name or "",
            client_id=self.client_id,
            client_detail=self.client_detail or "",
            issue_date=self.issue_date,
            due_date=self.due_date,
            status=self.status,
            amount_due=self.amount_due,
            amount_paid=self.amount_paid,
            payment_status=self.payment_status,
            payments=tuple(self.ledger_entries()),
            updated_at=self.updated_at,
            version=self.version,
        )

    # ---------- Snapshot helpers ----------
    def snapshot_from_client(self, client):
        """
        Copy the client's name, contact and address onto the invoice.
        Later edits to the client do not reach this invoice.
        """
        if not client:
            return
        self.client = client
        self.client_detail = client.name or ""
        self.client_contact = client.contact or ""
        self.client_address = client.address or ""

    def snapshot_from_project(self, project):
        if not project:
            return
        self.project = project
        self.project_name = project.name or ""

    def has_from_snapshot(self) -> bool:
        return bool(self.from_company_name or self.from_address)

    def snapshot_from_profile(self, profile, overwrite: bool = False):
        """
        Freeze the issuing company's details onto this invoice.
        Set overwrite=True ONLY when you explicitly want to replace an existing snapshot.
        """
        if not profile:
            return
        if self.has_from_snapshot() and not overwrite and self.company_id == profile.pk:
            return

        self.company = profile
        self.from_company_name = profile.company_name or ""
        self.from_address = profile.address or ""
        self.from_city_state_zip = profile.city_state_zip or ""
        self.from_phone = profile.phone or ""
        self.from_email = profile.email or ""
        self.from_website = profile.website or ""

    def issuer_snapshot(self) -> dict:
        return {
            "company_name": self.from_company_name,
            "address": self.from_address,
            "city_state_zip": self.from_city_state_zip,
            "phone": self.from_phone,
            "email": self.from_email,
            "website": self.from_website,
        }


class InvoiceItem(models.Model):
    invoice     = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name="items")
    description = models.CharField(max_length=500)
    qty         = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("1.00"),
        validators=[MinValueValidator(Decimal("0"))],
        help_text="Quantity (hours, days, units, etc.).",
    )
    rate        = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0"))],
        help_text="Unit price.",
    )
    position    = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["position", "pk"]

    def __str__(self):
        return f"{self.description} ({self.qty} @ {self.rate})"

    @property
    def line_total(self) -> Decimal:
        return (self.qty or Decimal("0")) * (self.rate or Decimal("0"))
