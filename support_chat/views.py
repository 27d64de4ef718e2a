from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from mirart.permissions import IsSupportOperator

from .config import get_support_chat_config, save_support_chat_config
from .hours import greeting, is_online
from .models import SupportMessage
from .serializers import SupportMessageCreateSerializer, SupportMessageSerializer, SupportThreadSerializer
from .store import get_support_store


class SupportChatConfigView(APIView):
    def get_permissions(self):
        if self.request.method == 'PUT':
            return [IsSupportOperator()]
        return []

    def get(self, request):
        return Response(get_support_chat_config().to_dict())

    def put(self, request):
        config = save_support_chat_config(request.data)
        return Response(config.to_dict())


class SupportChatStatusView(APIView):
    """Whether the desk is staffed right now, evaluated per request"""

    def get(self, request):
        config = get_support_chat_config()
        return Response({
            'enabled': config.enabled,
            'online': is_online(config),
            'greeting': greeting(config),
        })


class SupportMessagesView(APIView):
    """The caller's own support thread"""

    def get(self, request):
        store = get_support_store()
        messages = store.fetch_thread(request.user_id)
        return Response({
            'user_id': request.user_id,
            'messages': SupportMessageSerializer(messages, many=True).data,
            'unread_count': store.unread_for_user(request.user_id),
        })

    def post(self, request):
        serializer = SupportMessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        message = get_support_store().post_message(
            request.user_id,
            SupportMessage.SENDER_USER,
            serializer.validated_data['body'],
            user_email=request.user_email,
            user_name=request.user_name,
        )
        return Response(SupportMessageSerializer(message).data, status=status.HTTP_201_CREATED)


class SupportMarkReadView(APIView):
    def post(self, request):
        updated = get_support_store().mark_read(request.user_id, SupportMessage.SENDER_ADMIN)
        return Response({'updated': updated})


class SupportInboxView(APIView):
    permission_classes = [IsSupportOperator]

    def get(self, request):
        threads = get_support_store().list_threads()
        return Response({
            'results': SupportThreadSerializer(threads, many=True).data,
            'total_count': len(threads),
        })


class SupportThreadAdminView(APIView):
    """Operator view of one user's thread"""
    permission_classes = [IsSupportOperator]

    def get(self, request, user_id):
        messages = get_support_store().fetch_thread(user_id)
        return Response({
            'user_id': user_id,
            'messages': SupportMessageSerializer(messages, many=True).data,
        })

    def post(self, request, user_id):
        serializer = SupportMessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        message = get_support_store().post_message(
            user_id,
            SupportMessage.SENDER_ADMIN,
            serializer.validated_data['body'],
            admin_id=request.user_id,
        )
        return Response(SupportMessageSerializer(message).data, status=status.HTTP_201_CREATED)


class SupportThreadAdminReadView(APIView):
    permission_classes = [IsSupportOperator]

    def post(self, request, user_id):
        updated = get_support_store().mark_read(user_id, SupportMessage.SENDER_USER)
        return Response({'user_id': user_id, 'updated': updated})
