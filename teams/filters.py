import django_filters

from .models import Team


class AvailableTeamFilter(django_filters.FilterSet):
    # Exact match on the trimmed value; blank means no filter
    domain = django_filters.CharFilter(field_name='domain', lookup_expr='exact')

    class Meta:
        model = Team
        fields = ['domain']
