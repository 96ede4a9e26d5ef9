"""Library configuration for pykokudo."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any

from pykokudo._constants import (
    GSI_SEARCH_URL,
    NOMINATIM_SEARCH_URL,
    USER_AGENT,
    WIKI_API_URL,
)
from pykokudo.exceptions import KokudoConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_float(env_key: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise KokudoConfigError(f"{env_key} must be a number, got {value!r}") from exc


def _default_data_dir() -> Path:
    return Path.home() / ".local" / "share" / "pykokudo"


@dataclasses.dataclass(frozen=True)
class KokudoConfig:
    """Library configuration.

    Parameters
    ----------
    data_dir : Path
        Directory holding the persistent JSON slots.
    catalog_path : Path or None
        Route catalog JSON file. ``None`` uses the bundled catalog.
    language : str
        Locale hint sent to the geocoder (``Accept-Language``).
    user_agent : str
        User agent sent with every collaborator request. Nominatim
        rejects requests without an identifying agent.
    request_timeout : float
        Total timeout in seconds for a single HTTP request.
    nominatim_delay : float
        Seconds to wait between consecutive Nominatim requests.
        The public instance allows one request per second.
    gsi_enabled : bool
        Query the GSI address search before Nominatim.
    gsi_url : str
        GSI address search endpoint.
    nominatim_url : str
        Nominatim search endpoint.
    wiki_api_url : str
        MediaWiki API endpoint used for route descriptions.
    """

    data_dir: Path = dataclasses.field(default_factory=_default_data_dir)
    catalog_path: Path | None = None
    language: str = "ja"
    user_agent: str = USER_AGENT
    request_timeout: float = 15.0
    nominatim_delay: float = 1.0
    gsi_enabled: bool = True
    gsi_url: str = GSI_SEARCH_URL
    nominatim_url: str = NOMINATIM_SEARCH_URL
    wiki_api_url: str = WIKI_API_URL

    def __post_init__(self) -> None:
        if self.request_timeout <= 0:
            raise KokudoConfigError("request_timeout must be positive")
        if self.nominatim_delay < 0:
            raise KokudoConfigError("nominatim_delay must not be negative")

    @classmethod
    def from_env(cls, **overrides: Any) -> KokudoConfig:
        """Create configuration from environment variables.

        Reads optional ``KOKUDO_*`` variables. Explicit keyword arguments
        override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        KokudoConfig
            Populated configuration.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        data_dir = env.get("KOKUDO_DATA_DIR")
        if data_dir:
            config_kwargs["data_dir"] = Path(data_dir).expanduser()

        catalog_path = env.get("KOKUDO_CATALOG_PATH")
        if catalog_path:
            config_kwargs["catalog_path"] = Path(catalog_path).expanduser()

        _ENV_STR_MAP = {
            "KOKUDO_LANGUAGE": "language",
            "KOKUDO_USER_AGENT": "user_agent",
            "KOKUDO_GSI_URL": "gsi_url",
            "KOKUDO_NOMINATIM_URL": "nominatim_url",
            "KOKUDO_WIKI_API_URL": "wiki_api_url",
        }
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        timeout_env = env.get("KOKUDO_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            config_kwargs["request_timeout"] = _env_float("KOKUDO_REQUEST_TIMEOUT", timeout_env)

        delay_env = env.get("KOKUDO_NOMINATIM_DELAY")
        if delay_env is not None and "nominatim_delay" not in overrides:
            config_kwargs["nominatim_delay"] = _env_float("KOKUDO_NOMINATIM_DELAY", delay_env)

        if "gsi_enabled" not in overrides:
            config_kwargs["gsi_enabled"] = _env_bool(env.get("KOKUDO_GSI_ENABLED"), True)

        config_kwargs.update(overrides)
        if "data_dir" in config_kwargs:
            config_kwargs["data_dir"] = Path(config_kwargs["data_dir"])

        return cls(**config_kwargs)
