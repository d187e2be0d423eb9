"""
Remote acceptance rule.

Delegates the decision to an HTTP endpoint, e.g. a uniqueness check for a
username or email address. The endpoint receives

    {"property": "username", "value": "alice"}

and must answer 2xx with

    {"valid": true}

Anything else (non-2xx, timeout, connection error, malformed body) is a
failed validation, never an exception.
"""

import asyncio
import logging
from typing import Any, Optional

import requests

from ..config_loader import ConfigLoader, get_active_config
from .base import Rule

logger = logging.getLogger(__name__)


class RemoteRule(Rule):
    """Rule that POSTs the value to a remote endpoint and reads its verdict."""

    def __init__(self, url: str, timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None, config: Optional[ConfigLoader] = None):
        """
        Initialize remote rule.

        Args:
            url: Endpoint to POST to
            timeout: Request timeout in seconds. When omitted, remote_timeout_seconds
                is read from config, or else from the config of the engine running
                the validation (bundled defaults outside one)
            session: Optional requests.Session to reuse connections
            config: Optional ConfigLoader pinning the timeout source
        """
        self.url = url
        self.timeout = timeout
        self.config = config
        self._session = session

    def resolve_timeout(self) -> float:
        """Timeout used for a request made in the current context."""
        if self.timeout is not None:
            return self.timeout
        return (self.config or get_active_config()).get_remote_timeout()

    async def is_valid(self, target: Any, property: str, value: Any) -> bool:
        # requests is blocking; keep the event loop free
        return await asyncio.to_thread(self._check, property, value, self.resolve_timeout())

    def _check(self, property: str, value: Any, timeout: float) -> bool:
        payload = {"property": property, "value": value}
        post = self._session.post if self._session is not None else requests.post

        try:
            response = post(self.url, json=payload, timeout=timeout)
            response.raise_for_status()
            body = response.json()
        except requests.exceptions.Timeout:
            logger.warning(
                "Remote rule timeout",
                extra={'url': self.url, 'property': property, 'timeout': timeout}
            )
            return False
        except requests.exceptions.RequestException as e:
            # JSON decode errors are RequestException subclasses in requests >= 2.27
            logger.warning(
                "Remote rule error",
                extra={'url': self.url, 'property': property, 'error': str(e)}
            )
            return False
        except (TypeError, ValueError) as e:
            # value not JSON serializable
            logger.warning(
                "Remote rule could not encode value",
                extra={'url': self.url, 'property': property, 'error': str(e)}
            )
            return False

        if not isinstance(body, dict):
            logger.warning(
                "Remote rule returned malformed body",
                extra={'url': self.url, 'property': property}
            )
            return False

        return body.get("valid") is True

    def __repr__(self) -> str:
        return f"RemoteRule({self.url})"


def is_accepted_by_remote(url: str, timeout: Optional[float] = None,
                          session: Optional[requests.Session] = None,
                          config: Optional[ConfigLoader] = None) -> Rule:
    """Value must be accepted by a remote endpoint (see module docstring)."""
    return RemoteRule(url, timeout=timeout, session=session, config=config)
