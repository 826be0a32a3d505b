import logging

logger = logging.getLogger(__name__)

from django.contrib.auth.mixins import LoginRequiredMixin
from django.views.generic import TemplateView

from ..services.aggregation import DEFAULT_TIMEFRAME, TIMEFRAME_MONTHS
from ..services.dashboard import build_dashboard


TIMEFRAME_LABELS = [
    ("1m", "1 month"),
    ("3m", "3 months"),
    ("6m", "6 months"),
    ("1y", "1 year"),
    ("all", "All"),
]


class Dashboard(LoginRequiredMixin, TemplateView):
    template_name = "invoicing/dashboard.html"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)

        timeframe = (self.request.GET.get("timeframe") or DEFAULT_TIMEFRAME).strip()
        if timeframe not in TIMEFRAME_MONTHS:
            timeframe = DEFAULT_TIMEFRAME

        summary = build_dashboard(self.request.user, timeframe)

        context['current_page'] = 'dashboard'
        context['summary'] = summary
        context['timeframe'] = timeframe
        context['timeframes'] = TIMEFRAME_LABELS
        context['chart_max'] = max((b.revenue for b in summary.monthly), default=0)
        return context
