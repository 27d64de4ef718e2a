from django.urls import path

from .views import UserIdentityView, UserSearchView

app_name = 'users'

urlpatterns = [
    path('search/', UserSearchView.as_view(), name='user-search'),
    path('<str:user_id>/', UserIdentityView.as_view(), name='user-identity'),
]
