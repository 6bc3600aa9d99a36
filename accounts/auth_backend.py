import logging

from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend

logger = logging.getLogger(__name__)

User = get_user_model()


class FlexibleAuthBackend(ModelBackend):
    """
    Evaluators sign in with their email; older clients still send a username.
    A `username` containing "@" is looked up as an email. When both are given
    they must belong to the same account.
    """

    def _lookup(self, username, email):
        if username and "@" in username and not email:
            username, email = None, username

        qs = User.objects.all()
        if username:
            qs = qs.filter(username=username)
        if email:
            qs = qs.filter(email__iexact=email.strip())
        return qs.get()

    def authenticate(self, request, username=None, password=None, **kwargs):
        email = kwargs.get("email")
        if not password or not (username or email):
            return None

        try:
            user = self._lookup(username, email)
        except (User.DoesNotExist, User.MultipleObjectsReturned):
            logger.info("Login failed: no unique account for %s", email or username)
            # run the hasher once, as ModelBackend does
            User().set_password(password)
            return None

        if user.check_password(password) and self.user_can_authenticate(user):
            return user
        logger.info("Login failed for %s", user.pk)
        return None
