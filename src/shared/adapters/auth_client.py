"""Auth service client - adapter for the hosted authentication API."""

import abc
import logging
from typing import Dict, Any, Optional

import requests
from jose import jwt, JWTError

import config

logger = logging.getLogger(__name__)


def decode_access_token(token: str, secret: Optional[str] = None,
                        audience: Optional[str] = None) -> Dict[str, Any]:
    """
    Verify an access token issued by the auth service and return its claims.

    Raises:
        AuthClientError: If the token is malformed, expired or not signed with our secret
    """
    auth_config = config.get_auth_config()
    try:
        claims = jwt.decode(
            token,
            secret or auth_config["jwt_secret"],
            algorithms=["HS256"],
            audience=audience or auth_config["audience"],
        )
    except JWTError as e:
        logger.warning(f"Rejected access token: {e}")
        raise AuthClientError("Invalid or expired session") from e

    if not claims.get("sub"):
        raise AuthClientError("Session token has no subject")
    return claims


class AbstractAuthClient(abc.ABC):
    """Abstract base class for auth service clients."""

    @abc.abstractmethod
    def sign_up(self, email: str, password: str, metadata: Optional[Dict[str, Any]] = None) -> str:
        """Create an auth account and return its auth id."""
        raise NotImplementedError

    @abc.abstractmethod
    def send_password_reset(self, email: str, redirect_to: Optional[str] = None) -> None:
        """Ask the auth service to email a password-reset link."""
        raise NotImplementedError


class HTTPAuthClient(AbstractAuthClient):
    """HTTP-based client for the hosted auth REST API."""

    def __init__(self, base_url: Optional[str] = None, anon_key: Optional[str] = None, timeout: int = 30):
        auth_config = config.get_auth_config()
        self.base_url = (base_url or auth_config["base_url"]).rstrip("/")
        self.anon_key = anon_key if anon_key is not None else auth_config["anon_key"]
        self.redirect_url = auth_config["password_redirect_url"]
        self.timeout = timeout

    def _post(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        headers = {"apikey": self.anon_key, "Content-Type": "application/json"}
        try:
            response = requests.post(url, json=body, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            return response.json() if response.content else {}

        except requests.exceptions.HTTPError as e:
            message = _error_message(e.response)
            logger.error(f"Auth service error on {path}: {message}")
            raise AuthClientError(message) from e

        except requests.exceptions.RequestException as e:
            logger.error(f"Network error calling auth service {path}: {e}")
            raise AuthClientError(f"Network error: {e}") from e

    def sign_up(self, email: str, password: str, metadata: Optional[Dict[str, Any]] = None) -> str:
        data = self._post("/signup", {"email": email, "password": password, "data": metadata or {}})
        user = data.get("user") or data
        auth_id = user.get("id")
        if not auth_id:
            raise AuthClientError(f"Auth service did not return an id for {email}")
        logger.info(f"Created auth account for {email}")
        return auth_id

    def send_password_reset(self, email: str, redirect_to: Optional[str] = None) -> None:
        self._post("/recover", {"email": email, "redirect_to": redirect_to or self.redirect_url})
        logger.info(f"Password reset email requested for {email}")


def _error_message(response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"Auth service returned {response.status_code}"
    return body.get("msg") or body.get("error_description") or body.get("message") or str(body)


class AuthClientError(Exception):
    """Exception raised for errors in the auth client."""
    pass
