from .models import User


def get_initials_for_actor(actor):
    """
    Returns the register initials for the given actor identifier.

    The actor is the username handed in by the authentication layer. Unknown
    or inactive users get an empty string, so system actors such as the
    grace-period sweep can still write register entries.
    """
    if not actor:
        return ''
    user = User.objects.filter(username=actor, is_active=True).first()
    if user:
        return user.get_initials()
    return ''
