import logging

logger = logging.getLogger(__name__)

from django.contrib import messages
from django.contrib.auth.mixins import LoginRequiredMixin
from django.urls import reverse_lazy
from django.views.generic import CreateView, DeleteView, ListView, UpdateView

from ..forms.clients.clients import ClientForm
from ..models import Client
from ..services.aggregation import client_rollup
from ..services.dashboard import user_invoice_snapshots
from ..services.scoping import user_clients
from .mixins import CurrentPageMixin, OwnedFormMixin


class ClientListView(LoginRequiredMixin, CurrentPageMixin, ListView):
    model = Client
    template_name = "invoicing/clients/client_list.html"
    context_object_name = "clients"
    current_page = 'clients'

    def get_queryset(self):
        return user_clients(self.request.user).prefetch_related('projects').order_by('name')

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        snapshots = user_invoice_snapshots(self.request.user)
        context['rows'] = [
            {'client': client, 'rollup': client_rollup(client, snapshots)}
            for client in context['clients']
        ]
        return context


class ClientCreateView(LoginRequiredMixin, CurrentPageMixin, OwnedFormMixin, CreateView):
    model = Client
    form_class = ClientForm
    template_name = "invoicing/clients/client_form.html"
    success_url = reverse_lazy('invoicing:client_list')
    current_page = 'clients'

    def form_valid(self, form):
        messages.success(self.request, "Client added successfully!")
        return super().form_valid(form)


class ClientUpdateView(LoginRequiredMixin, CurrentPageMixin, UpdateView):
    model = Client
    form_class = ClientForm
    template_name = "invoicing/clients/client_form.html"
    success_url = reverse_lazy('invoicing:client_list')
    current_page = 'clients'

    def get_queryset(self):
        return user_clients(self.request.user)

    def form_valid(self, form):
        messages.success(self.request, "Client updated successfully!")
        return super().form_valid(form)


class ClientDeleteView(LoginRequiredMixin, CurrentPageMixin, DeleteView):
    model = Client
    template_name = "invoicing/clients/client_confirm_delete.html"
    success_url = reverse_lazy('invoicing:client_list')
    current_page = 'clients'

    def get_queryset(self):
        return user_clients(self.request.user)

    def form_valid(self, form):
        # Invoices keep their client snapshot; the FK is nulled.
        logger.info("Deleting client %s for user %s", self.object.pk, self.request.user.pk)
        messages.success(self.request, "Client deleted successfully!")
        return super().form_valid(form)
