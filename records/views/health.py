from django.conf import settings
from django.db import DatabaseError, connections
from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from records.startup import get_store


@api_view(['GET'])
@permission_classes([AllowAny])
def healthz(request):
    store = get_store()
    payload = {
        'message': 'Emergency Medical QR API is running',
        'timestamp': timezone.now().isoformat(),
        'environment': settings.ENV,
    }
    if not store.available:
        return Response({'ok': False, **payload, 'db': False, 'error': store.unavailable_reason}, status=503)
    try:
        with connections[store.using].cursor() as c:
            c.execute('SELECT 1')
            row = c.fetchone()
    except DatabaseError as e:
        return Response({'ok': False, **payload, 'db': False, 'error': str(e)}, status=503)
    return Response({'ok': True, **payload, 'db': bool(row and row[0] == 1)})
