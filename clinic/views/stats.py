"""Finance statistics (cached; any bill or payment write invalidates)."""
from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from clinic.serializers.finance import RevenueQuerySerializer
from clinic.services import stats_cache
from clinic.services.billing import overdue_summary, pending_summary
from clinic.services.revenue import get_revenue_stats


@api_view(['GET'])
@permission_classes([AllowAny])
def revenue_stats(request):
    q = RevenueQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    start, end = q.validated_data.get('startDate'), q.validated_data.get('endDate')
    ck = stats_cache.key('revenue', start.isoformat() if start else '', end.isoformat() if end else '')
    cached = stats_cache.fetch(ck)
    if cached:
        return Response(cached)
    payload = get_revenue_stats(start, end)
    stats_cache.store(ck, payload)
    return Response(payload)


@api_view(['GET'])
@permission_classes([AllowAny])
def pending_stats(request):
    ck = stats_cache.key('pending')
    cached = stats_cache.fetch(ck)
    if cached:
        return Response(cached)
    payload = pending_summary()
    stats_cache.store(ck, payload)
    return Response(payload)


@api_view(['GET'])
@permission_classes([AllowAny])
def overdue_stats(request):
    # Keyed by day since the result depends on today's date
    today = timezone.localdate()
    ck = stats_cache.key('overdue', today.isoformat())
    cached = stats_cache.fetch(ck)
    if cached:
        return Response(cached)
    payload = overdue_summary(today)
    stats_cache.store(ck, payload)
    return Response(payload)
