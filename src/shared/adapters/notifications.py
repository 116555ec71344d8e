"""Notification function client - adapter for the hosted notification-dispatch functions."""

import abc
import logging
from typing import Dict, Any, Optional
import requests

import config

logger = logging.getLogger(__name__)


class AbstractNotifier(abc.ABC):
    """Abstract base class for notification function clients."""

    @abc.abstractmethod
    def invoke(self, function_name: str, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Invoke a notification function with a structured payload.

        Args:
            function_name: Name of the deployed function (e.g. "send-order-notification")
            payload: JSON-serializable body passed to the function

        Returns:
            The function's JSON response, if any

        Raises:
            NotificationError: If the invocation fails
        """
        raise NotImplementedError


class HTTPFunctionNotifier(AbstractNotifier):
    """HTTP-based client invoking functions at ``{base_url}/{function_name}``."""

    def __init__(self, base_url: Optional[str] = None, api_key: Optional[str] = None,
                 timeout: Optional[int] = None):
        functions_config = config.get_functions_config()
        self.base_url = (base_url or functions_config["base_url"]).rstrip("/")
        self.api_key = api_key if api_key is not None else functions_config["api_key"]
        self.timeout = timeout or functions_config["timeout"]

    def invoke(self, function_name: str, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        url = f"{self.base_url}/{function_name}"
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        logger.info(f"Invoking notification function {function_name}")

        try:
            response = requests.post(url, json=payload, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            if not response.content:
                return None
            return response.json()

        except requests.exceptions.HTTPError as e:
            logger.error(f"Function {function_name} returned an error: {e}")
            raise NotificationError(f"Function {function_name} failed: {e}") from e

        except requests.exceptions.RequestException as e:
            logger.error(f"Network error invoking {function_name}: {e}")
            raise NotificationError(f"Network error: {e}") from e

        except ValueError as e:
            logger.error(f"Function {function_name} returned invalid JSON: {e}")
            raise NotificationError(f"Invalid response from {function_name}") from e


class NotificationError(Exception):
    """Exception raised when a notification function cannot be invoked."""
    pass
