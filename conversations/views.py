from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from mirart.permissions import IsSupportOperator
from support_chat.config import get_user_chat_enabled, set_user_chat_enabled

from .serializers import (
    ChatEnabledSerializer,
    ConversationCreateSerializer,
    ConversationMessageSerializer,
    ConversationSummarySerializer,
    MessageCreateSerializer,
)
from .store import get_conversation_store


class ConversationListCreateView(APIView):
    """List the caller's conversations or start one"""

    def get(self, request):
        conversations = get_conversation_store().list_conversations(request.user_id)
        serializer = ConversationSummarySerializer(conversations, many=True)

        return Response({
            'user_id': request.user_id,
            'results': serializer.data,
            'total_count': len(conversations),
        })

    def post(self, request):
        """Create or reuse the conversation for (caller, recipient, listing) and post the first message"""
        serializer = ConversationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        conversation, message, created = get_conversation_store().create_conversation(
            initiator_id=request.user_id,
            recipient_id=data['recipient_id'],
            body=data['message'],
            listing_id=data.get('listing_id'),
        )

        return Response({
            'conversation_id': conversation.conversation_id,
            'is_new': created,
            'message': ConversationMessageSerializer(message).data,
        }, status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)


class ConversationMessagesView(APIView):
    """Read the message log of a conversation or append to it"""

    def get(self, request, conversation_id):
        messages = get_conversation_store().fetch_messages(conversation_id, request.user_id)
        return Response({
            'conversation_id': conversation_id,
            'messages': ConversationMessageSerializer(messages, many=True).data,
        })

    def post(self, request, conversation_id):
        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        message = get_conversation_store().send_message(
            conversation_id, request.user_id, serializer.validated_data['body']
        )
        return Response(ConversationMessageSerializer(message).data, status=status.HTTP_201_CREATED)


class ConversationMarkReadView(APIView):
    def post(self, request, conversation_id):
        updated = get_conversation_store().mark_read(conversation_id, request.user_id)
        return Response({'conversation_id': conversation_id, 'updated': updated})


class UnreadCountView(APIView):
    def get(self, request):
        return Response({'unread_count': get_conversation_store().unread_total(request.user_id)})


class UserChatEnabledView(APIView):
    """Site-wide switch for peer-to-peer chat"""

    def get_permissions(self):
        if self.request.method == 'PUT':
            return [IsSupportOperator()]
        return []

    def get(self, request):
        return Response({'enabled': get_user_chat_enabled()})

    def put(self, request):
        serializer = ChatEnabledSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        enabled = set_user_chat_enabled(serializer.validated_data['enabled'])
        return Response({'enabled': enabled})
