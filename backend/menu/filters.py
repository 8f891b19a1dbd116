import django_filters

from .models import MenuItem


class MenuItemFilter(django_filters.FilterSet):
    category = django_filters.NumberFilter(field_name="category_id")

    class Meta:
        model = MenuItem
        fields = {
            "prep_station": ["exact"],
            "available": ["exact"],
            "stock_enabled": ["exact"],
        }
