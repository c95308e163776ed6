"""FilterSet definitions for spa listing."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Spa


class SpaFilterSet(django_filters.FilterSet):
    name = django_filters.CharFilter(field_name="name", lookup_expr="icontains")
    address = django_filters.CharFilter(field_name="address", lookup_expr="icontains")
    owner = django_filters.NumberFilter(field_name="owner_id", lookup_expr="exact")
    requires_manual_acceptance = django_filters.BooleanFilter(field_name="requires_manual_acceptance")

    class Meta:
        model = Spa
        fields = ["name", "address", "owner", "requires_manual_acceptance"]
