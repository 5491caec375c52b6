"""
Authentication views.

Login exchanges a username and password for a signed access token.
Logout is a no-op: tokens are stateless and end only when they expire.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from core.serializers.auth import LoginSerializer, UserSerializer
from core.services import auth as auth_service


# ---------------------------------------------------------------------
# Username/password login
# ---------------------------------------------------------------------
@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def login_view(request):
    """
    Accepts ``{"username", "password"}``.
    Returns ``{"user": {...}, "token": "<jwt>"}``.
    """
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    result = auth_service.login(s.validated_data['username'], s.validated_data['password'])
    return Response({'user': UserSerializer(result.user).data, 'token': result.token}, status=200)


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def logout_view(request):
    """Stateless: nothing to revoke on the server."""
    return Response({'success': True, 'message': 'Logged out successfully'})


@api_view(['GET'])
def me_view(request):
    """Return the identity carried by the presented token."""
    identity = request.user
    return Response({
        'userId': identity.user_id,
        'username': identity.username,
        'role': identity.role,
    })
