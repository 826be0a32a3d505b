from django.contrib import admin, messages

from .models import Client, CompanyProfile, Invoice, InvoiceItem, Project


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ("name", "contact", "email", "status", "user")
    list_filter = ("status",)
    search_fields = ("name", "contact", "email")


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ("name", "client_display", "status", "user")
    list_filter = ("status",)
    search_fields = ("name", "client_name", "client__name")
    autocomplete_fields = ("client",)


@admin.register(CompanyProfile)
class CompanyProfileAdmin(admin.ModelAdmin):
    list_display = ("company_name", "email", "is_default", "user", "updated_at")
    list_filter = ("is_default",)
    search_fields = ("company_name", "email")
    readonly_fields = ("is_default", "created_at", "updated_at")
    actions = ["make_default"]

    @admin.action(description="Make selected the owner's default company")
    def make_default(self, request, queryset):
        if queryset.count() != 1:
            self.message_user(request, "Select exactly one company profile.", level=messages.ERROR)
            return
        profile = queryset.first()
        profile.set_default()
        self.message_user(request, f"Default company: {profile}", level=messages.SUCCESS)


# -----------------------------
# Invoice + InvoiceItem admin
# -----------------------------


class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 1
    fields = ("description", "qty", "rate", "position", "line_total_display")
    readonly_fields = ("line_total_display",)

    def line_total_display(self, obj):
        if not obj.pk:
            return ""
        return obj.line_total

    line_total_display.short_description = "Line total"


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    """
    Payments are read-only here; they go through the ledger so the version
    counter and status stay consistent.
    """

    inlines = [InvoiceItemInline]

    list_display = (
        "invoice_number",
        "client_detail",
        "project_name",
        "issue_date",
        "due_date",
        "status",
        "amount_due",
        "amount_paid",
        "payment_status",
    )
    list_filter = ("status", "payment_status", "issue_date")
    search_fields = ("invoice_number", "client_detail", "project_name")
    date_hierarchy = "issue_date"
    readonly_fields = (
        "subtotal",
        "tax",
        "amount_due",
        "amount_paid",
        "payment_status",
        "payments",
        "version",
        "created_at",
        "updated_at",
    )

    def save_related(self, request, form, formsets, change):
        super().save_related(request, form, formsets, change)
        form.instance.recalculate_totals(save=True)
