import django_filters
from django.db.models import Q
from .models import Product


class ProductFilter(django_filters.FilterSet):
    """Storefront product filter using django-filter"""

    # Searches name and description; every word must match
    search = django_filters.CharFilter(method='filter_search', label='Search')
    category = django_filters.CharFilter(field_name='category', lookup_expr='iexact')
    min_price = django_filters.NumberFilter(field_name='base_price', lookup_expr='gte')
    max_price = django_filters.NumberFilter(field_name='base_price', lookup_expr='lte')

    class Meta:
        model = Product
        fields = ['search', 'category', 'min_price', 'max_price']

    def filter_search(self, queryset, name, value):
        """
        Multi-word search: "heavy hoodie" matches products whose name or
        description contains both words, in any order.
        """
        search_words = [w.strip() for w in (value or '').split() if w.strip()]
        if not search_words:
            return queryset

        combined_query = Q()
        for word in search_words:
            combined_query &= Q(name__icontains=word) | Q(description__icontains=word)
        return queryset.filter(combined_query).distinct()


class InventoryFilter(django_filters.FilterSet):
    """Admin inventory filter; inactive products are hidden unless asked for"""

    search = django_filters.CharFilter(method='filter_search', label='Search')
    category = django_filters.CharFilter(field_name='category', lookup_expr='iexact')
    include_inactive = django_filters.CharFilter(method='filter_include_inactive', label='Include inactive')

    class Meta:
        model = Product
        fields = ['search', 'category', 'include_inactive']

    def filter_queryset(self, queryset):
        queryset = super().filter_queryset(queryset)
        include_inactive = str(self.data.get('include_inactive', '')).lower() in ('true', '1', 'yes')
        if not include_inactive:
            queryset = queryset.filter(active=True)
        return queryset

    def filter_search(self, queryset, name, value):
        value = (value or '').strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value) |
            Q(category__icontains=value) |
            Q(variants__color_name__icontains=value)
        ).distinct()

    def filter_include_inactive(self, queryset, name, value):
        # Applied in filter_queryset so the default also covers a missing parameter
        return queryset
