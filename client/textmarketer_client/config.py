"""
Configuration Module

Resolves the Textmarketer credentials from one of a small set of sources:
an environment variable holding a query string, a JSON file under the
working directory's ``config/`` folder, or a mapping handed in by the caller.
"""

import os
import json
from enum import Enum
from typing import Callable, Dict, Mapping, Optional
from urllib.parse import parse_qsl

from .exceptions import MissingConfig
from .logging_config import get_logger

logger = get_logger(__name__)

ENV_VAR = "TRUE9_TEXTMARKETER_CLIENT_CONFIG"
CONFIG_DIR = "config"
CONFIG_FILENAME = "textmarketer.config.json"


class ResolutionMethod(str, Enum):
    """Which config source produced the mapping"""

    FILE = "file"
    ENV = "env"


def get_config_path(cwd: Optional[str] = None) -> str:
    """Path of the config file relative to the given (or current) working directory"""
    return os.path.join(cwd or os.getcwd(), CONFIG_DIR, CONFIG_FILENAME)


class EnvironmentSource:
    """Reads the config from an environment variable encoded as a query string

    e.g. ``username=foo&password=bar&response_type=xml``
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self.environ = os.environ if environ is None else environ

    def __call__(self) -> Dict[str, str]:
        raw = self.environ.get(ENV_VAR, "")
        return dict(parse_qsl(raw, keep_blank_values=True))


class FileSource:
    """Reads the config from ``<cwd>/config/textmarketer.config.json``"""

    def __init__(self, cwd: Optional[str] = None):
        self.config_path = get_config_path(cwd)

    def __call__(self) -> Dict[str, str]:
        if not os.path.exists(self.config_path):
            raise MissingConfig(f"Config file not found: {self.config_path}")

        with open(self.config_path, 'r') as f:
            try:
                config_data = json.load(f)
            except json.JSONDecodeError as e:
                raise MissingConfig(f"Config file is not valid JSON: {self.config_path}") from e

        if not isinstance(config_data, dict):
            raise MissingConfig(f"Config file must contain a JSON object: {self.config_path}")

        return config_data


class ExplicitSource:
    """Hands back a mapping supplied by the caller"""

    def __init__(self, config: Mapping[str, str]):
        self.config = config

    def __call__(self) -> Dict[str, str]:
        return dict(self.config)


READERS: Dict[ResolutionMethod, Callable[..., Callable[[], Dict[str, str]]]] = {
    ResolutionMethod.FILE: FileSource,
    ResolutionMethod.ENV: EnvironmentSource,
}


def select_method(requested: Optional[str], env_present: bool,
                  file_present: bool) -> Optional[ResolutionMethod]:
    """Pick the config source by precedence.

    An explicitly requested method is used first, then overridden by the
    environment variable when set, then by the config file when it exists.
    The file therefore wins when both signals are present.
    """
    method = None

    if requested:
        try:
            method = ResolutionMethod(requested)
        except ValueError:
            logger.warning(f"Ignoring unknown config retrieval method '{requested}'")

    if env_present:
        method = ResolutionMethod.ENV

    if file_present:
        method = ResolutionMethod.FILE

    return method


class ConfigRetrievalStrategy:
    """Decides which config source to read and caches the result

    Not safe to resolve concurrently from several threads; create one
    strategy per thread instead.
    """

    def __init__(self, method: Optional[str] = None, config: Optional[Mapping[str, str]] = None,
                 *, environ: Optional[Mapping[str, str]] = None, cwd: Optional[str] = None):
        self._requested = method
        self._method: Optional[ResolutionMethod] = None
        self._config = ExplicitSource(config)() if config is not None else None
        self.environ = os.environ if environ is None else environ
        self.cwd = cwd

    @property
    def method(self) -> Optional[ResolutionMethod]:
        return self._method

    @property
    def config(self) -> Optional[Dict[str, str]]:
        return dict(self._config) if self._config is not None else None

    def __call__(self) -> Dict[str, str]:
        return self.resolve()

    def resolve(self) -> Dict[str, str]:
        """Return the config, reading it from a source on first use"""
        if not self._config:
            self._execute()
        return dict(self._config)

    def _execute(self):
        env_present = bool(self.environ.get(ENV_VAR))
        file_present = os.path.exists(get_config_path(self.cwd))

        method = select_method(self._requested, env_present, file_present)
        if method is None:
            raise MissingConfig(
                "Unable to resolve a config source: set "
                f"{ENV_VAR} or create {get_config_path(self.cwd)}"
            )

        if method is ResolutionMethod.FILE:
            reader = READERS[method](cwd=self.cwd)
        else:
            reader = READERS[method](environ=self.environ)

        logger.debug(f"Loading Textmarketer config using '{method.value}' method")
        self._method = method
        self._config = reader()
