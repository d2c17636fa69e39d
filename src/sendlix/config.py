# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Configuration loader for client settings.

Settings come from an INI-style configuration file, from environment
variables, or from defaults. None of them is required: a client built with
only an API key talks to the public Sendlix endpoint.

Example:
    Configuration file format (config.ini)::

        [sendlix]
        base_url = https://api.sendlix.com
        user_agent = my-app/2.1
        timeout = 30
        wire_version = v2

    Loading client configuration::

        config = load_client_config("/etc/sendlix/config.ini")
        # Returns ClientConfig dataclass
"""

from __future__ import annotations

import configparser
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from sendlix.logger import get_logger

DEFAULT_BASE_URL = "https://api.sendlix.com"
DEFAULT_USER_AGENT = "sendlix-python-sdk/1.0.0"
API_KEY_ENV = "SENDLIX_API_KEY"


class WireVersion(str, Enum):
    """Request schema spoken by the email and group clients.

    Attributes:
        V1: Single content body typed by an enum; responses include credits left.
        V2: Separate html/text bodies with inline images.
    """

    V1 = "v1"
    V2 = "v2"


@dataclass
class ClientConfig:
    """Connection settings shared by every client.

    Attributes:
        base_url: Root URL of the Sendlix RPC endpoint.
        user_agent: Value of the User-Agent header.
        timeout: Total timeout per call in seconds. None leaves timeouts to the server.
        wire_version: Request schema used by the email and group clients.
    """

    base_url: str = DEFAULT_BASE_URL
    user_agent: str = DEFAULT_USER_AGENT
    timeout: float | None = None
    wire_version: WireVersion = WireVersion.V1


logger = get_logger("sendlix.config")


def _parse_timeout(value: str) -> float | None:
    value = value.strip()
    if not value or value.lower() == "none":
        return None
    return float(value)


def load_client_config(config_path: str | None = None) -> ClientConfig:
    """Load client configuration from config file or environment.

    Priority: config file > environment variables > defaults.

    Environment variables:
        SENDLIX_BASE_URL: Root URL of the RPC endpoint
        SENDLIX_USER_AGENT: User-Agent header value
        SENDLIX_TIMEOUT: Per-call timeout in seconds ("none" disables)
        SENDLIX_WIRE_VERSION: "v1" or "v2"

    Args:
        config_path: Optional path to config.ini file

    Returns:
        ClientConfig with parsed settings, using defaults for missing values.
    """
    defaults = ClientConfig()
    config_values: dict = {
        "base_url": defaults.base_url,
        "user_agent": defaults.user_agent,
        "timeout": defaults.timeout,
        "wire_version": defaults.wire_version,
    }

    env_mapping = {
        "base_url": ("SENDLIX_BASE_URL", str),
        "user_agent": ("SENDLIX_USER_AGENT", str),
        "timeout": ("SENDLIX_TIMEOUT", _parse_timeout),
        "wire_version": ("SENDLIX_WIRE_VERSION", WireVersion),
    }

    for key, (env_var, type_fn) in env_mapping.items():
        env_value = os.environ.get(env_var)
        if env_value is None:
            continue
        try:
            config_values[key] = type_fn(env_value)
        except (ValueError, TypeError):
            logger.warning(f"Invalid value for {env_var}, using default")

    if config_path and Path(config_path).exists():
        config = configparser.ConfigParser()
        config.read(config_path)

        if config.has_section("sendlix"):
            for key, (_, type_fn) in env_mapping.items():
                value = config.get("sendlix", key, fallback=None)
                if value is None:
                    continue
                try:
                    config_values[key] = type_fn(value.strip())
                except (ValueError, TypeError):
                    logger.warning(f"Invalid value for [sendlix] {key}, keeping {config_values[key]!r}")
    elif config_path:
        logger.warning(f"Config file not found: {config_path}")

    config_values["base_url"] = config_values["base_url"].rstrip("/")
    return ClientConfig(**config_values)


def api_key_from_env() -> str | None:
    """Return the API key from ``SENDLIX_API_KEY``, or None when unset or blank."""
    value = os.environ.get(API_KEY_ENV, "").strip()
    return value or None
