from datetime import datetime, time

import django_filters
from django.utils import timezone

from .models import CancellationLog, Order


def _day_bounds(value, bound):
    return timezone.make_aware(datetime.combine(value, bound))


class OrderFilter(django_filters.FilterSet):
    """
    Owner order list filters. ``start_date``/``end_date`` are calendar days
    in the restaurant's time zone and include the whole day.
    """

    start_date = django_filters.DateFilter(method="filter_start_date")
    end_date = django_filters.DateFilter(method="filter_end_date")
    waitress = django_filters.NumberFilter(field_name="waitress_id")

    def filter_start_date(self, queryset, name, value):
        return queryset.filter(created_at__gte=_day_bounds(value, time.min))

    def filter_end_date(self, queryset, name, value):
        return queryset.filter(created_at__lte=_day_bounds(value, time.max))

    class Meta:
        model = Order
        fields = {
            "status": ["exact"],
            "payment_status": ["exact"],
            "order_type": ["exact"],
        }


class CancellationLogFilter(django_filters.FilterSet):
    start_date = django_filters.DateFilter(method="filter_start_date")
    end_date = django_filters.DateFilter(method="filter_end_date")

    def filter_start_date(self, queryset, name, value):
        return queryset.filter(created_at__gte=_day_bounds(value, time.min))

    def filter_end_date(self, queryset, name, value):
        return queryset.filter(created_at__lte=_day_bounds(value, time.max))

    class Meta:
        model = CancellationLog
        fields = {
            "requires_review": ["exact"],
            "phase": ["exact"],
        }
