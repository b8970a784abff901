import django_filters

from modules.orders.constants import OrderStatus
from modules.orders.models import Order


class OrderFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(field_name="status", choices=OrderStatus.choices)
    created_by = django_filters.NumberFilter(field_name="created_by_id")
    pickup_from = django_filters.DateFilter(field_name="pickup_date", lookup_expr="gte")
    pickup_to = django_filters.DateFilter(field_name="pickup_date", lookup_expr="lte")

    class Meta:
        model = Order
        fields = ["status", "created_by", "pickup_from", "pickup_to"]
