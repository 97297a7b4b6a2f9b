from functools import wraps
from django.shortcuts import redirect
from django.contrib import messages

SUPERUSER = 'superuser'
BAND_ADMIN = 'band_admin'
BAND_MEMBER = 'band_member'


def get_user_role(user):
    """superuser, band_admin or band_member, from Django's own auth flags and groups"""
    if not user.is_authenticated:
        return None
    if user.is_superuser:
        return SUPERUSER
    if user.is_staff or user.groups.filter(name=BAND_ADMIN).exists():
        return BAND_ADMIN
    return BAND_MEMBER


def band_admin_required(view_func):
    """Allow only band_admin and superuser roles"""
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return redirect('login')
        if get_user_role(request.user) not in (BAND_ADMIN, SUPERUSER):
            messages.error(request, "You don't have permission to change this.")
            return redirect('setlists:events_list')
        return view_func(request, *args, **kwargs)
    return wrapper


def superuser_required(view_func):
    """Allow only superuser role"""
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return redirect('login')
        if get_user_role(request.user) != SUPERUSER:
            messages.error(request, "You don't have permission to access this page.")
            return redirect('setlists:events_list')
        return view_func(request, *args, **kwargs)
    return wrapper
