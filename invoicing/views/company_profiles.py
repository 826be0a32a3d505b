# invoicing/views/company_profiles.py
from __future__ import annotations

import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.contrib.auth.mixins import LoginRequiredMixin
from django.shortcuts import get_object_or_404, redirect
from django.urls import reverse_lazy
from django.views.decorators.http import require_POST
from django.views.generic import CreateView, DeleteView, ListView, UpdateView

from ..forms.company_profile.company_profile import CompanyProfileForm
from ..models import CompanyProfile
from ..services.scoping import user_companies
from .mixins import CurrentPageMixin, OwnedFormMixin

logger = logging.getLogger(__name__)


class CompanyProfileListView(LoginRequiredMixin, CurrentPageMixin, ListView):
    model = CompanyProfile
    template_name = "invoicing/company_profiles/companyprofile_list.html"
    context_object_name = "profiles"
    current_page = "companies"

    def get_queryset(self):
        return user_companies(self.request.user).order_by("-is_default", "company_name")


class CompanyProfileCreateView(LoginRequiredMixin, CurrentPageMixin, OwnedFormMixin, CreateView):
    model = CompanyProfile
    form_class = CompanyProfileForm
    template_name = "invoicing/company_profiles/companyprofile_form.html"
    current_page = "companies"

    def form_valid(self, form):
        response = super().form_valid(form)
        # The first profile a user creates becomes their default.
        if not user_companies(self.request.user).filter(is_default=True).exists():
            self.object.set_default()
        return response

    def get_success_url(self):
        messages.success(self.request, "Company profile created.")
        return reverse_lazy("invoicing:companyprofile_list")


class CompanyProfileUpdateView(LoginRequiredMixin, CurrentPageMixin, UpdateView):
    model = CompanyProfile
    form_class = CompanyProfileForm
    template_name = "invoicing/company_profiles/companyprofile_form.html"
    current_page = "companies"

    def get_queryset(self):
        return user_companies(self.request.user)

    def get_success_url(self):
        messages.success(self.request, "Company profile updated.")
        return reverse_lazy("invoicing:companyprofile_list")


class CompanyProfileDeleteView(LoginRequiredMixin, CurrentPageMixin, DeleteView):
    model = CompanyProfile
    template_name = "invoicing/company_profiles/companyprofile_confirm_delete.html"
    success_url = reverse_lazy("invoicing:companyprofile_list")
    context_object_name = "profile"
    current_page = "companies"

    def get_queryset(self):
        return user_companies(self.request.user)

    def form_valid(self, form):
        messages.success(self.request, "Company profile deleted.")
        return super().form_valid(form)


@login_required
@require_POST
def companyprofile_set_default(request, pk: int):
    profile = get_object_or_404(CompanyProfile, pk=pk, user=request.user)
    profile.set_default()
    logger.info("User %s switched default company to %s", request.user.pk, profile.pk)
    messages.success(request, f"Default company: {profile.company_name}")
    return redirect("invoicing:companyprofile_list")
