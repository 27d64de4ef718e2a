"""
URL configuration for the mirart chat backend.
"""
from django.contrib import admin
from django.urls import path, include
from . import views

urlpatterns = [
    path('admin/', admin.site.urls),
    path('ping/', views.PingView.as_view(), name='ping'),
    path('chat/', include('conversations.urls')),
    path('support-chat/', include('support_chat.urls')),
    path('users/', include('users.urls')),
]
