"""
Textmarketer API Request Module

Builds the URL for a Textmarketer API operation from a validated config
mapping and dispatches it over HTTP, decoding the JSON or XML answer into
plain dictionaries.
"""

import xml.etree.ElementTree as ET
from abc import ABC
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Sequence, Tuple, Union
from urllib.parse import urlencode

import requests

from .exceptions import (
    ApiError,
    ConfigValidationFailure,
    MalformedResponse,
    MissingConfig,
    MissingHttpMethod,
    TransportError,
    UnsupportedMethod,
    UnsupportedResponseType,
)
from .logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_PROTOCOL = "https"
DEFAULT_BASE_URL = "api.textmarketer.co.uk"
DEFAULT_RESPONSE_TYPE = "json"
DEFAULT_TIMEOUT = 30
RESPONSE_TYPES = ("json", "xml")

Params = Union[Mapping[str, Any], Sequence[Tuple[str, Any]]]


class UrlStyle(str, Enum):
    """How a request lays out its URL"""

    # credentials travel in the POST body, extra params in the query string
    QUERY_PARAMS = "query_params"
    # credentials and response option travel in the query string
    CREDENTIALS = "credentials"


class ValidationResult(NamedTuple):
    is_valid: bool
    missing_keys: List[str]
    invalid_keys: List[str]


@dataclass(frozen=True)
class RequestDescriptor:
    """The resolved parts of one outbound call"""

    protocol: str
    base_url: str
    endpoint: str
    username: str
    password: str
    response_type: str = DEFAULT_RESPONSE_TYPE
    params: Tuple[Tuple[str, str], ...] = ()


def validate_keys(config: Mapping[str, Any], required_keys: Sequence[str]) -> ValidationResult:
    """Check that every required key is present and neither empty nor None"""
    missing_keys = []
    invalid_keys = []

    for key in required_keys:
        if key not in config:
            missing_keys.append(key)
        elif config[key] is None or str(config[key]) == "":
            invalid_keys.append(key)

    return ValidationResult(not (missing_keys or invalid_keys), missing_keys, invalid_keys)


def _element_to_dict(element: ET.Element) -> Any:
    children = list(element)
    text = (element.text or "").strip()

    if not children and not element.attrib:
        return text

    result: Dict[str, Any] = {f"@{k}": v for k, v in element.attrib.items()}
    for child in children:
        value = _element_to_dict(child)
        if child.tag in result:
            existing = result[child.tag]
            if not isinstance(existing, list):
                result[child.tag] = existing = [existing]
            existing.append(value)
        else:
            result[child.tag] = value

    if text:
        result["#text"] = text
    return result


def decode_response(response: requests.Response, response_type: str) -> Any:
    """Decode a response body as JSON or XML into plain Python structures.

    XML documents are returned without their root element, so a
    ``<response><message_id>1</message_id></response>`` body decodes to the
    same ``{"message_id": "1"}`` a JSON body would.
    """
    if response_type == "xml":
        try:
            root = ET.fromstring(response.content)
        except ET.ParseError as e:
            raise MalformedResponse(f"Response is not valid XML: {e}", response.text) from e
        decoded = _element_to_dict(root)
        return decoded if isinstance(decoded, dict) else {"#text": decoded}

    try:
        return response.json()
    except ValueError as e:
        raise MalformedResponse(f"Response is not valid JSON: {e}", response.text) from e


class AbstractRequest(ABC):
    """Base class for a Textmarketer API request.

    The config mapping is validated and the URL assembled as soon as the
    request is constructed, so a bad config never reaches the network.
    Subclasses choose their URL layout with ``url_style`` and their
    required keys with ``required_keys``.
    """

    url_style: UrlStyle = UrlStyle.QUERY_PARAMS
    required_keys: Tuple[str, ...] = ("username", "password")
    default_base_url: str = DEFAULT_BASE_URL
    default_endpoint: str = ""

    def __init__(self, config: Optional[Mapping[str, Any]] = None, params: Optional[Params] = None,
                 *, protocol: str = DEFAULT_PROTOCOL, base_url: Optional[str] = None,
                 endpoint: Optional[str] = None, timeout: float = DEFAULT_TIMEOUT,
                 session: Optional[requests.Session] = None):
        if config is None:
            raise MissingConfig("A config array must be provided when instantiating a request class")

        validated = validate_keys(config, self.required_keys)
        if not validated.is_valid:
            raise ConfigValidationFailure(validated.missing_keys, validated.invalid_keys)

        response_type = config.get("response_type", DEFAULT_RESPONSE_TYPE)
        if str(response_type).lower() not in RESPONSE_TYPES:
            raise UnsupportedResponseType(response_type)

        if params is None:
            params = ()
        elif isinstance(params, Mapping):
            params = params.items()

        self._descriptor = RequestDescriptor(
            protocol=protocol,
            base_url=base_url if base_url is not None else self.default_base_url,
            endpoint=self._resolve_endpoint(config, endpoint),
            username=config["username"],
            password=config["password"],
            response_type=response_type,
            params=tuple((str(k), str(v)) for k, v in params),
        )
        self._timeout = timeout
        self._session = session
        self._url = None

        self.construct_url()

    def _resolve_endpoint(self, config: Mapping[str, Any], endpoint: Optional[str]) -> str:
        return endpoint if endpoint is not None else self.default_endpoint

    @property
    def descriptor(self) -> RequestDescriptor:
        return self._descriptor

    @property
    def protocol(self) -> str:
        return self._descriptor.protocol

    @property
    def base_url(self) -> str:
        return self._descriptor.base_url

    @property
    def endpoint(self) -> str:
        return self._descriptor.endpoint

    @property
    def username(self) -> str:
        return self._descriptor.username

    @property
    def password(self) -> str:
        return self._descriptor.password

    @property
    def response_type(self) -> str:
        return self._descriptor.response_type

    @property
    def params(self) -> Tuple[Tuple[str, str], ...]:
        return self._descriptor.params

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def url(self) -> str:
        return self._url

    def _join_path(self) -> str:
        base = self.base_url.rstrip("/")
        endpoint = self.endpoint.strip("/")
        path = f"{base}/{endpoint}" if endpoint else base
        return f"{self.protocol}://{path}/"

    def construct_url(self) -> str:
        """Assemble protocol, base URL, endpoint and query string into the request URL"""
        url = self._join_path()

        if self.url_style is UrlStyle.CREDENTIALS:
            query = [
                ("username", self.username),
                ("password", self.password),
                ("option", self.response_type),
            ]
            query.extend(self.params)
        else:
            query = list(self.params)

        if query:
            url += "?" + urlencode(query)

        self._url = url
        return url

    def prepare_post_fields(self, data: Optional[Params] = None) -> str:
        """Form-encode the credentials followed by the payload, in order"""
        fields = [("username", self.username), ("password", self.password)]
        if data:
            items = data.items() if isinstance(data, Mapping) else data
            fields.extend((str(k), str(v)) for k, v in items)
        return urlencode(fields)

    def dispatch(self, method: Optional[str], payload: Optional[Params] = None,
                 *, timeout: Optional[float] = None) -> Any:
        """Send the request using HTTP GET or POST and decode the answer

        Args:
            method: "get" or "post", case-insensitive
            payload: fields sent in the POST body, or as query parameters for GET
            timeout: seconds to wait for the gateway, defaults to the request timeout

        Returns:
            The decoded response body
        """
        if not method:
            raise MissingHttpMethod()

        verb = method.lower()
        if verb == "get":
            return self._send_get_request(payload, timeout)
        if verb == "post":
            return self._send_post_request(payload, timeout)

        raise UnsupportedMethod(method)

    def _http(self):
        return self._session if self._session is not None else requests

    def _send_get_request(self, payload: Optional[Params], timeout: Optional[float]) -> Any:
        logger.debug(f"GET {self._redacted_url()}")
        try:
            response = self._http().get(
                self.url,
                params=payload or None,
                timeout=timeout if timeout is not None else self.timeout,
            )
        except requests.exceptions.RequestException as e:
            error = self._redact(str(e))
            logger.error(f"GET request to {self._redacted_url()} failed: {error}")
            raise TransportError(f"Failed to send GET request: {error}") from e

        return self._handle_response(response)

    def _send_post_request(self, payload: Optional[Params], timeout: Optional[float]) -> Any:
        logger.debug(f"POST {self._redacted_url()}")
        try:
            response = self._http().post(
                self.url,
                data=self.prepare_post_fields(payload),
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                timeout=timeout if timeout is not None else self.timeout,
            )
        except requests.exceptions.RequestException as e:
            error = self._redact(str(e))
            logger.error(f"POST request to {self._redacted_url()} failed: {error}")
            raise TransportError(f"Failed to send POST request: {error}") from e

        return self._handle_response(response)

    def _handle_response(self, response: requests.Response) -> Any:
        response_type = self.response_type.lower()

        if not 200 <= response.status_code < 300:
            try:
                body = decode_response(response, response_type)
            except MalformedResponse:
                body = response.text
            logger.warning(f"Textmarketer API returned HTTP {response.status_code}")
            raise ApiError(response.status_code, body)

        return decode_response(response, response_type)

    def _redact(self, text: str) -> str:
        """Mask the password query pair wherever it appears in text"""
        for pair in (urlencode({"password": self.password}), f"password={self.password}"):
            text = text.replace(pair, "password=***")
        return text

    def _redacted_url(self) -> str:
        return self._redact(self.url)


class SendSmsRequest(AbstractRequest):
    """Send an SMS through the REST API

    Credentials are posted in the form body; the endpoint is fixed and not
    read from config.
    """

    url_style = UrlStyle.QUERY_PARAMS
    required_keys = ("username", "password")
    default_endpoint = "/services/rest/sms"


class GatewayRequest(AbstractRequest):
    """Call the HTTP gateway, which takes credentials in the query string

    The endpoint is a required config key.
    """

    url_style = UrlStyle.CREDENTIALS
    required_keys = ("username", "password", "endpoint")
    default_base_url = DEFAULT_BASE_URL + "/gateway"

    def _resolve_endpoint(self, config, endpoint):
        return endpoint if endpoint is not None else config["endpoint"]
