"""
URL configuration for bandplanner project.

The setlists app owns every page; Django's auth views handle login/logout.
"""
from django.contrib import admin
from django.contrib.auth import views as auth_views
from django.urls import path, include


urlpatterns = [
    path('admin/', admin.site.urls),
    path('login/', auth_views.LoginView.as_view(template_name='setlists/login.html'), name='login'),
    path('logout/', auth_views.LogoutView.as_view(), name='logout'),
    path('', include('setlists.urls')),
]
