from django.urls import path

from .views.dashboard import Dashboard

from .views.invoices import (
    InvoiceListView,
    InvoiceDetailView,
    InvoiceDeleteView,
    invoice_create,
    invoice_update,
    invoice_pdf_view,
)

from .views.payments import (
    payment_add,
    payment_edit,
    payment_delete,
)

from .views.clients import (
    ClientListView,
    ClientCreateView,
    ClientUpdateView,
    ClientDeleteView,
)

from .views.projects import (
    ProjectListView,
    ProjectCreateView,
    ProjectUpdateView,
    ProjectDeleteView,
)

from .views.company_profiles import (
    CompanyProfileListView,
    CompanyProfileCreateView,
    CompanyProfileUpdateView,
    CompanyProfileDeleteView,
    companyprofile_set_default,
)


app_name = "invoicing"

urlpatterns = [
    # Dashboard
    path("dashboard/", Dashboard.as_view(), name="dashboard"),

    # Invoices
    path("invoices/", InvoiceListView.as_view(), name="invoice_list"),
    path("invoices/new/", invoice_create, name="invoice_create"),
    path("invoices/<int:pk>/", InvoiceDetailView.as_view(), name="invoice_detail"),
    path("invoices/<int:pk>/edit/", invoice_update, name="invoice_update"),
    path("invoices/<int:pk>/delete/", InvoiceDeleteView.as_view(), name="invoice_delete"),
    path("invoices/<int:pk>/pdf/", invoice_pdf_view, name="invoice_pdf"),

    # Payments
    path("invoices/<int:pk>/payments/add/", payment_add, name="payment_add"),
    path("invoices/<int:pk>/payments/<int:index>/edit/", payment_edit, name="payment_edit"),
    path("invoices/<int:pk>/payments/<int:index>/delete/", payment_delete, name="payment_delete"),

    # Clients
    path("clients/", ClientListView.as_view(), name="client_list"),
    path("clients/add/", ClientCreateView.as_view(), name="client_create"),
    path("clients/<int:pk>/edit/", ClientUpdateView.as_view(), name="client_update"),
    path("clients/<int:pk>/delete/", ClientDeleteView.as_view(), name="client_delete"),

    # Projects
    path("projects/", ProjectListView.as_view(), name="project_list"),
    path("projects/add/", ProjectCreateView.as_view(), name="project_create"),
    path("projects/<int:pk>/edit/", ProjectUpdateView.as_view(), name="project_update"),
    path("projects/<int:pk>/delete/", ProjectDeleteView.as_view(), name="project_delete"),

    # Company profiles
    path("company/", CompanyProfileListView.as_view(), name="companyprofile_list"),
    path("company/add/", CompanyProfileCreateView.as_view(), name="companyprofile_create"),
    path("company/<int:pk>/edit/", CompanyProfileUpdateView.as_view(), name="companyprofile_update"),
    path("company/<int:pk>/delete/", CompanyProfileDeleteView.as_view(), name="companyprofile_delete"),
    path("company/<int:pk>/set-default/", companyprofile_set_default, name="companyprofile_set_default"),
]
