"""
Textmarketer Client

A Python client library for the Textmarketer SMS gateway.
"""

from .api_request import AbstractRequest, GatewayRequest, RequestDescriptor, SendSmsRequest, UrlStyle
from .client import Client, send_sms
from .config import ConfigRetrievalStrategy, ResolutionMethod
from .exceptions import (
    ApiError,
    ConfigValidationFailure,
    MalformedResponse,
    MissingConfig,
    MissingHttpMethod,
    TextmarketerError,
    TransportError,
    UnsupportedMethod,
    UnsupportedResponseType,
)
from .sender import SmsSender

__all__ = [
    'AbstractRequest',
    'SendSmsRequest',
    'GatewayRequest',
    'RequestDescriptor',
    'UrlStyle',
    'Client',
    'send_sms',
    'ConfigRetrievalStrategy',
    'ResolutionMethod',
    'SmsSender',
    'TextmarketerError',
    'MissingConfig',
    'ConfigValidationFailure',
    'MissingHttpMethod',
    'UnsupportedMethod',
    'UnsupportedResponseType',
    'TransportError',
    'MalformedResponse',
    'ApiError',
]

__version__ = "0.1.0"
