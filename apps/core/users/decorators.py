from functools import wraps

from apps.core.utils.actions import action_failure

from .models import User


def _normalize_roles(allowed_roles):
    if isinstance(allowed_roles, str):
        return {allowed_roles}
    return set(allowed_roles)


def role_required(allowed_roles):
    normalized_roles = _normalize_roles(allowed_roles)

    def decorator(view_func):
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            if not request.user.is_authenticated:
                return action_failure('Authentication required.', status=401)

            if request.user.role not in normalized_roles:
                return action_failure('You do not have permission to perform this action.', status=403)

            return view_func(request, *args, **kwargs)

        return wrapper

    return decorator


authenticated_required = role_required(User.ALL_ROLES)
