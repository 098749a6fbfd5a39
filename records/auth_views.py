"""
Authentication views for administrators.

The admin UI logs in with a username (or email) and password and then
sends either the legacy DRF token or the JWT access token on every
record-management request.  The scan page never authenticates.
"""
from __future__ import annotations

from django.contrib.auth import authenticate
from django.db import IntegrityError, transaction
from django.conf import settings
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenRefreshView
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from records.exceptions import AuthorizationError, ConflictError
from records.serializers.auth import LoginSerializer, RegisterSerializer
from records.services.audit import log_action

from .models import User


def _user_payload(user: User) -> dict:
    return {
        'id': user.id,
        'username': user.username,
        'email': user.email,
        'name': user.get_full_name() or user.username,
        'role': user.role,
    }


def _token_payload(user: User) -> dict:
    # legacy DRF token alongside the JWT pair
    token_obj, _ = Token.objects.get_or_create(user=user)
    refresh = RefreshToken.for_user(user)
    return {
        'ok': True,
        'token': token_obj.key,
        'jwt_access': str(refresh.access_token),
        'jwt_refresh': str(refresh),
        'user': _user_payload(user),
    }


# ---------------------------------------------------------------------
# Username/email + password login
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
def login_view(request):
    """
    Accepts fields:
      - username or email
      - password
    """
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data

    username = vd.get('username')
    if not username:
        match = User.objects.filter(email__iexact=vd['email']).only('username').first()
        username = match.username if match else vd['email']

    user = authenticate(request, username=username, password=vd['password'])
    ip = request.META.get('REMOTE_ADDR')
    if not user:
        log_action(user=None, action='login', object_type='user',
                   detail={'result': 'fail', 'username': username, 'ip': ip})
        return Response({'ok': False, 'error': {'code': 'invalid_credentials',
                                                'message': 'Invalid username or password'}}, status=400)

    log_action(user=user, action='login', object_type='user', object_id=user.id,
               detail={'result': 'ok', 'ip': ip})
    return Response(_token_payload(user), status=200)

# DRF ScopedRateThrottle uses throttle_scope on the view function
login_view.throttle_scope = 'login'


# ---------------------------------------------------------------------
# Account registration
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
def register_view(request):
    """Create an administrator account.

    Open to anonymous callers only while ``AUTH_OPEN_REGISTRATION`` is
    on; otherwise an existing administrator must be logged in.
    """
    if not settings.AUTH_OPEN_REGISTRATION and not getattr(request.user, 'is_authenticated', False):
        raise AuthorizationError('Registration is closed; log in as an administrator to add accounts')

    s = RegisterSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data

    if User.objects.filter(username__iexact=vd['username']).exists() or \
            User.objects.filter(email__iexact=vd['email']).exists():
        raise ConflictError('User already exists with this username or email')
    try:
        with transaction.atomic():
            user = User.objects.create_user(username=vd['username'], email=vd['email'],
                                            password=vd['password'], role='admin')
    except IntegrityError as e:
        raise ConflictError('User already exists with this username or email') from e

    creator = request.user if getattr(request.user, 'is_authenticated', False) else user
    log_action(user=creator, action='register', object_type='user', object_id=user.id,
               detail={'username': user.username})
    return Response(_token_payload(user), status=201)

register_view.throttle_scope = 'register'


# ---------------------------------------------------------------------
# Current identity
# ---------------------------------------------------------------------
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def me_view(request):
    return Response({'ok': True, 'user': _user_payload(request.user)})


# ---------------------------------------------------------------------
# JWT: refresh & logout
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
def jwt_refresh_view(request):
    """Return a new access token from refresh token."""
    view = TokenRefreshView.as_view()
    resp = view(request._request)
    if isinstance(resp, Response):
        data = dict(resp.data)
        if 'access' in data and 'jwt_access' not in data:
            data['jwt_access'] = data.pop('access')
        return Response(data, status=resp.status_code)
    return resp


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def jwt_logout_view(request):
    """Blacklist current user's refresh tokens (all or a given one)."""
    refresh = request.data.get('refresh')
    count = 0
    if refresh:
        try:
            RefreshToken(refresh).blacklist()
            count = 1
        except TokenError:
            count = 0
    else:
        for token in OutstandingToken.objects.filter(user=request.user):
            _, created = BlacklistedToken.objects.get_or_create(token=token)
            count += int(created)
    # the legacy token is revoked as well
    Token.objects.filter(user=request.user).delete()
    log_action(user=request.user, action='logout', object_type='user', object_id=request.user.id,
               detail={'blacklisted': count})
    return Response({'ok': True, 'blacklisted': count})
