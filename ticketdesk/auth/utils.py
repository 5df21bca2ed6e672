from flask_login import login_required, current_user


def current_staff_name():
    """Display name of the signed-in staff member, used as the seller."""
    if current_user.is_authenticated:
        return current_user.name
    return None


__all__ = ['login_required', 'current_user', 'current_staff_name']
