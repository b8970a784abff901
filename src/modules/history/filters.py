import django_filters

from modules.history.constants import HistoryEventType
from modules.history.models import OrderHistory


class OrderHistoryFilter(django_filters.FilterSet):
    order_id = django_filters.UUIDFilter(field_name="order_id")
    date = django_filters.DateFilter(field_name="created_at", lookup_expr="date")
    event_type = django_filters.ChoiceFilter(
        field_name="event_type", choices=HistoryEventType.choices
    )

    class Meta:
        model = OrderHistory
        fields = ["order_id", "date", "event_type"]
