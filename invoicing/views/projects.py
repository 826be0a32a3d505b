import logging

logger = logging.getLogger(__name__)

from django.contrib import messages
from django.contrib.auth.mixins import LoginRequiredMixin
from django.urls import reverse_lazy
from django.views.generic import CreateView, DeleteView, ListView, UpdateView

from ..choices import PROJECT_STATUS_CHOICES
from ..forms.projects.projects import ProjectForm
from ..models import Project
from ..services.aggregation import project_rollup
from ..services.dashboard import user_invoice_snapshots
from ..services.scoping import user_projects
from .mixins import CurrentPageMixin, OwnedFormMixin


class ProjectListView(LoginRequiredMixin, CurrentPageMixin, ListView):
    model = Project
    template_name = "invoicing/projects/project_list.html"
    context_object_name = "projects"
    current_page = 'projects'

    def get_queryset(self):
        qs = user_projects(self.request.user).order_by('name')
        status = (self.request.GET.get('status') or '').strip()
        if status:
            qs = qs.filter(status=status)
        return qs

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        snapshots = user_invoice_snapshots(self.request.user)
        context['rows'] = [
            {'project': project, 'rollup': project_rollup(project, snapshots)}
            for project in context['projects']
        ]
        context['status_choices'] = PROJECT_STATUS_CHOICES
        context['selected_status'] = (self.request.GET.get('status') or '').strip()
        return context


class ProjectCreateView(LoginRequiredMixin, CurrentPageMixin, OwnedFormMixin, CreateView):
    model = Project
    form_class = ProjectForm
    template_name = "invoicing/projects/project_form.html"
    success_url = reverse_lazy('invoicing:project_list')
    current_page = 'projects'
    pass_user_to_form = True

    def form_valid(self, form):
        messages.success(self.request, "Project added successfully!")
        return super().form_valid(form)


class ProjectUpdateView(LoginRequiredMixin, CurrentPageMixin, OwnedFormMixin, UpdateView):
    model = Project
    form_class = ProjectForm
    template_name = "invoicing/projects/project_form.html"
    success_url = reverse_lazy('invoicing:project_list')
    current_page = 'projects'
    pass_user_to_form = True

    def get_queryset(self):
        return user_projects(self.request.user)

    def form_valid(self, form):
        messages.success(self.request, "Project updated successfully!")
        return super().form_valid(form)


class ProjectDeleteView(LoginRequiredMixin, CurrentPageMixin, DeleteView):
    model = Project
    template_name = "invoicing/projects/project_confirm_delete.html"
    success_url = reverse_lazy('invoicing:project_list')
    current_page = 'projects'

    def get_queryset(self):
        return user_projects(self.request.user)

    def form_valid(self, form):
        logger.info("Deleting project %s for user %s", self.object.pk, self.request.user.pk)
        messages.success(self.request, "Project deleted successfully!")
        return super().form_valid(form)
