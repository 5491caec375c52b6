"""Staff account management (administrators only)."""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from core.models import User
from core.permissions import IsAdminRole, IsAuthenticatedIdentity
from core.serializers.auth import UserCreateSerializer, UserSerializer
from core.services.auth import create_user


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticatedIdentity, IsAdminRole])
def users(request):
    if request.method == 'GET':
        return Response(UserSerializer(User.objects.order_by('username'), many=True).data)
    s = UserCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user = create_user(**s.validated_data)
    return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)
