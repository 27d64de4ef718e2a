from django.urls import path

from . import views

app_name = 'conversations'

urlpatterns = [
    path('conversations/', views.ConversationListCreateView.as_view(), name='conversation-list'),
    path('conversations/<str:conversation_id>/messages/', views.ConversationMessagesView.as_view(), name='conversation-messages'),
    path('conversations/<str:conversation_id>/read/', views.ConversationMarkReadView.as_view(), name='conversation-read'),
    path('unread-count/', views.UnreadCountView.as_view(), name='unread-count'),
    path('enabled/', views.UserChatEnabledView.as_view(), name='chat-enabled'),
]
