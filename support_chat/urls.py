from django.urls import path

from . import views

app_name = 'support_chat'

urlpatterns = [
    path('config/', views.SupportChatConfigView.as_view(), name='support-config'),
    path('status/', views.SupportChatStatusView.as_view(), name='support-status'),
    path('messages/', views.SupportMessagesView.as_view(), name='support-messages'),
    path('messages/read/', views.SupportMarkReadView.as_view(), name='support-messages-read'),
    path('admin/conversations/', views.SupportInboxView.as_view(), name='support-inbox'),
    path('admin/messages/<str:user_id>/', views.SupportThreadAdminView.as_view(), name='support-thread'),
    path('admin/messages/<str:user_id>/read/', views.SupportThreadAdminReadView.as_view(),
         name='support-thread-read'),
]
