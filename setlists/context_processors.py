from .decorators import BAND_ADMIN, SUPERUSER, get_user_role


def user_context(request):
    """Inject user role flags into all templates"""
    role = get_user_role(request.user) if hasattr(request, 'user') else None
    return {
        'user_role': role,
        'is_band_admin': role in (BAND_ADMIN, SUPERUSER),
        'is_superuser': role == SUPERUSER,
    }
