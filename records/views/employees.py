"""
Employee record views.

``GET /api/employees/<id>`` is the public endpoint behind every QR code
and returns the emergency subset of a record.  Everything else (listing,
create, update, delete and QR image retrieval) requires an
authenticated administrator and works on the full record.
"""
from __future__ import annotations

import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from records.exceptions import ValidationError
from records.permissions import PublicReadAuthenticatedWrite
from records.services.qr import QRGenerationError, generate_qr_data_url
from records.services.visibility import full_view, public_view
from records.startup import get_store

logger = logging.getLogger(__name__)


def _payload(request) -> dict:
    if not isinstance(request.data, dict):
        raise ValidationError([{'field': 'non_field_errors', 'message': 'Expected a JSON object'}])
    return request.data


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def employees(request):
    """List all records (newest first) or create a new one."""
    store = get_store()
    if request.method == 'GET':
        return Response({'ok': True, 'data': [full_view(r) for r in store.list()]})

    record = store.create(_payload(request), user=request.user)
    data = full_view(record)
    try:
        data['qrCodeDataUrl'] = generate_qr_data_url(record.lookup_url)
    except QRGenerationError as e:
        # the record is saved; the image can be fetched again from /qr
        logger.warning('QR generation failed for employee %s: %s', record.id, e.message)
        data['qrCodeDataUrl'] = None
    return Response({'ok': True, 'message': 'Employee created successfully', 'data': data},
                    status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([PublicReadAuthenticatedWrite])
def employee_detail(request, pk):
    """Public emergency view on GET; administrator update/delete otherwise."""
    store = get_store()
    if request.method == 'GET':
        return Response({'ok': True, 'data': public_view(store.get(pk))})

    if request.method == 'DELETE':
        store.delete(pk, user=request.user)
        return Response({'ok': True, 'message': 'Employee deleted successfully'})

    record = store.update(pk, _payload(request), user=request.user)
    return Response({'ok': True, 'message': 'Employee updated successfully', 'data': full_view(record)})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def employee_qr(request, pk):
    """Encode the record's stored lookup URL as a PNG data URL."""
    record = get_store().get(pk)
    return Response({
        'ok': True,
        'data': {
            'qrCodeDataUrl': generate_qr_data_url(record.lookup_url),
            'lookupUrl': record.lookup_url,
        },
    })
