import logging

from django.utils import timezone
from drf_yasg.utils import swagger_auto_schema
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes, authentication_classes, throttle_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle

from .serializers import UserLoginSerializer, AuthSuccessResponseSerializer, UserSerializer

security_logger = logging.getLogger('security')


class LoginRateThrottle(AnonRateThrottle):
    scope = 'login'


@swagger_auto_schema(method='post', request_body=UserLoginSerializer, responses={200: AuthSuccessResponseSerializer}, tags=['Authentication'])
@api_view(['POST'])
@permission_classes([AllowAny])
@authentication_classes([])
@throttle_classes([LoginRateThrottle])
def login_view(request):
    """Exchange email and password for a DRF token."""
    serializer = UserLoginSerializer(data=request.data, context={'request': request})
    serializer.is_valid(raise_exception=True)
    user = serializer.validated_data['user']

    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])
    token, _ = Token.objects.get_or_create(user=user)
    security_logger.info(f"Login successful for user {user.id} with role: {user.role}")
    return Response(AuthSuccessResponseSerializer({'token': token.key, 'user': user}).data, status=status.HTTP_200_OK)


@swagger_auto_schema(method='post', tags=['Authentication'])
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout_view(request):
    """Logout user by deleting their authentication token."""
    if request.auth:
        Token.objects.filter(key=request.auth.key).delete()
    return Response({'message': 'Successfully logged out'}, status=status.HTTP_200_OK)


@swagger_auto_schema(method='get', responses={200: UserSerializer}, tags=['Authentication'])
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def me_view(request):
    return Response(UserSerializer(request.user).data)
