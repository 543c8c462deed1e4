# apps/core/auth_service.py

"""
Authentication service - account creation, credential checks and token issuance

Password hashing is delegated to Django's hashers and tokens to simplejwt;
this class only keeps the rules of the board application in one place.
"""

import logging
from typing import Dict, Tuple

from django.db import IntegrityError, transaction
from django.db.models import Q
from rest_framework_simplejwt.tokens import AccessToken

from .exceptions import AuthenticationError, ConflictError
from .models import User

logger = logging.getLogger(__name__)


class AuthenticationService:
    """
    Encapsulated authentication operations

    Views call the public methods; the private ones hide lookups and
    token details.
    """

    def signup(self, data: Dict) -> Tuple[User, str]:
        """
        Creates an account and returns (user, access token)

        Args:
            data: validated SignupSerializer data

        Raises:
            ConflictError: username or email already taken
        """
        if self._user_exists(data['username'], data['email']):
            raise ConflictError('User already exists')

        try:
            with transaction.atomic():
                user = User.objects.create_user(
                    username=data['username'],
                    email=data['email'],
                    password=data['password'],
                    first_name=data.get('first_name') or '',
                    last_name=data.get('last_name') or '',
                )
        except IntegrityError:
            # Lost a race against a concurrent signup with the same identity
            raise ConflictError('User already exists')

        logger.info(f"✅ User created: {user.username}")
        return user, self.issue_token(user)

    def login(self, email: str, password: str) -> Tuple[User, str]:
        """
        Checks credentials and returns (user, access token)

        Raises:
            AuthenticationError: unknown email, wrong password or inactive account
        """
        user = self._get_user_by_email(email)
        if user is None or not user.is_active or not user.check_password(password):
            logger.warning(f"❌ Failed login for {email}")
            raise AuthenticationError('Invalid credentials')

        logger.info(f"🔑 Login: {user.username}")
        return user, self.issue_token(user)

    def issue_token(self, user: User) -> str:
        """Signed simplejwt access token for the user"""
        return str(AccessToken.for_user(user))

    def list_users(self):
        """Every active user, ordered by username (assignee picker)"""
        return User.objects.filter(is_active=True).order_by('username')

    # === Private methods ===

    def _user_exists(self, username: str, email: str) -> bool:
        return User.objects.filter(Q(username=username) | Q(email__iexact=email)).exists()

    def _get_user_by_email(self, email: str):
        return User.objects.filter(email__iexact=email).first()


# Singleton used by the views
auth_service = AuthenticationService()
