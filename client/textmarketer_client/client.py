"""
Textmarketer Client Module

Wires config resolution, request construction and the sender together so
that sending an SMS is a single call.
"""

from typing import Any, Dict, Mapping, Optional

import requests

from .api_request import DEFAULT_TIMEOUT, SendSmsRequest
from .config import ConfigRetrievalStrategy
from .logging_config import get_logger, log_sms_event
from .sender import SmsSender

logger = get_logger(__name__)


class Client:
    """Client for the Textmarketer SMS API"""

    def __init__(self, config_method: Optional[str] = None, config: Optional[Mapping[str, str]] = None,
                 *, timeout: float = DEFAULT_TIMEOUT, session: Optional[requests.Session] = None,
                 environ: Optional[Mapping[str, str]] = None, cwd: Optional[str] = None):
        self.strategy = ConfigRetrievalStrategy(config_method, config, environ=environ, cwd=cwd)
        request = SendSmsRequest(self.strategy(), timeout=timeout, session=session)
        self.sender = SmsSender(request)

        if self.strategy.method is not None:
            logger.debug(f"Client configured from '{self.strategy.method.value}' config")

    @property
    def request(self) -> SendSmsRequest:
        return self.sender.request

    def send_sms(self, message: str, mobile_number: str, originator: Optional[str] = None,
                 **extra: Any) -> Dict:
        """Send an SMS message

        Args:
            message: The message text
            mobile_number: Recipient number in international format
            originator: Sender name or number shown on the handset
            **extra: Additional API fields, e.g. ``schedule`` or ``validity``

        Returns:
            Dict: Decoded response from the gateway
        """
        payload = {"message": message, "mobile_number": mobile_number}
        if originator:
            payload["originator"] = originator
        payload.update(extra)

        try:
            result = self.request.dispatch("post", payload)
        except Exception as e:
            log_sms_event("sms_failed", to_number=mobile_number, from_number=originator,
                          success=False, error=str(e))
            raise

        message_id = result.get("message_id") if isinstance(result, dict) else None
        log_sms_event("sms_sent", message_id=message_id, to_number=mobile_number,
                      from_number=originator)
        return result


def send_sms(message: str, mobile_number: str, originator: Optional[str] = None,
             config_method: Optional[str] = None, config: Optional[Mapping[str, str]] = None,
             **extra: Any) -> Dict:
    """
    Send an SMS message using the resolved Textmarketer config

    Args:
        message: The message to send
        mobile_number: Recipient phone number
        originator: Optional sender name
        config_method: Optional config source, "file" or "env"
        config: Optional explicit config mapping

    Returns:
        Dict: Response from the gateway
    """
    client = Client(config_method, config)
    return client.send_sms(message, mobile_number, originator, **extra)
