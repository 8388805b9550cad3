# backend/ops_core/visits/filters.py
import django_filters

from ops_core.visits.models import Visit, VisitStatus


class VisitFilter(django_filters.FilterSet):
    """
    Query params for the visit list:
      - start_date / end_date: inclusive planned_date range (YYYY-MM-DD)
      - status
      - customer_id
      - sales_rep_id
    """
    start_date = django_filters.DateFilter(field_name="planned_date", lookup_expr="gte")
    end_date = django_filters.DateFilter(field_name="planned_date", lookup_expr="lte")
    status = django_filters.ChoiceFilter(choices=VisitStatus.choices)
    customer_id = django_filters.UUIDFilter(field_name="customer_id")
    sales_rep_id = django_filters.NumberFilter(field_name="sales_rep_id")

    class Meta:
        model = Visit
        fields = ["start_date", "end_date", "status", "customer_id", "sales_rep_id"]
