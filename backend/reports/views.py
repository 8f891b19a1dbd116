from rest_framework.decorators import action

from core_backend.base import POSViewSet
from core_backend.responses import success_response

from .serializers import (
    CancellationLogSerializer,
    CancellationQuerySerializer,
    CancellationSummarySerializer,
    TodayAnalyticsSerializer,
)
from .services import AnalyticsService


class AnalyticsViewSet(POSViewSet):
    """Owner dashboards: today's numbers and the cancellation review queue."""

    filter_backends = []
    capability_map = {
        "today": "analytics.read",
        "cancellations": "analytics.read",
        "review_cancellation": "analytics.review",
    }

    @action(detail=False, methods=["get"], url_path="today")
    def today(self, request):
        return success_response(TodayAnalyticsSerializer(AnalyticsService.today_summary()).data)

    @action(detail=False, methods=["get"], url_path="cancellations")
    def cancellations(self, request):
        query = self.validated(CancellationQuerySerializer, data=request.query_params)
        result = AnalyticsService.list_cancellations(
            requires_review=query.get("requires_review"),
            start=query.get("start_date"),
            end=query.get("end_date"),
            phase=query.get("phase"),
        )
        return success_response(
            CancellationLogSerializer(result["cancellations"], many=True).data,
            summary=CancellationSummarySerializer(result["summary"]).data,
        )

    @action(
        detail=False,
        methods=["patch"],
        url_path=r"cancellations/(?P<log_id>\d+)/review",
    )
    def review_cancellation(self, request, log_id=None):
        log = AnalyticsService.review_cancellation(int(log_id), request.user)
        return success_response(
            CancellationLogSerializer(log).data,
            message="Cancellation reviewed",
        )
