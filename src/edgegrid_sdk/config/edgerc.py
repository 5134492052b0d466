"""
EdgeGrid credential configuration

Provides the immutable credential set consumed by the signer, plus
loaders for ``.edgerc`` files and ``AKAMAI_*`` environment variables.
"""

import os
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, List, Optional, Union, Mapping

from ..exceptions import (
    ConfigError,
    EnvironmentConfigError,
    InvalidSectionError,
    MissingCredentialError,
)

logger = logging.getLogger(__name__)

# Maximum body size covered by the content hash (128KB)
MAX_BODY = 131072

DEFAULT_EDGERC_PATH = "~/.edgerc"
DEFAULT_SECTION = "default"

REQUIRED_FIELDS = ('client_token', 'client_secret', 'access_token', 'host')


@dataclass(frozen=True)
class EdgeGridConfig:
    """
    EdgeGrid credential set

    Attributes:
        client_token: Client token for authentication
        client_secret: Client secret used to derive signing keys
        access_token: Access token for API access
        host: API base URL (``https://`` is assumed when no scheme is given)
        max_body: Maximum number of body bytes covered by the content hash
        account_switch_key: Optional account switch key
    """
    client_token: str
    client_secret: str
    access_token: str
    host: str
    max_body: int = MAX_BODY
    account_switch_key: Optional[str] = None

    def __post_init__(self):
        """Trim fields and normalize the host URL"""
        for name in REQUIRED_FIELDS:
            value = getattr(self, name)
            object.__setattr__(self, name, (value or "").strip())

        if self.host:
            object.__setattr__(self, 'host', normalize_host(self.host))

        if self.account_switch_key is not None:
            key = self.account_switch_key.strip()
            object.__setattr__(self, 'account_switch_key', key or None)

        if not isinstance(self.max_body, int) or isinstance(self.max_body, bool) or self.max_body <= 0:
            raise ConfigError(
                f"max_body must be a positive integer, got {self.max_body!r}",
                {"max_body": self.max_body}
            )

    @classmethod
    def from_edgerc(
        cls,
        path: Union[str, Path] = DEFAULT_EDGERC_PATH,
        section: str = DEFAULT_SECTION
    ) -> 'EdgeGridConfig':
        """
        Load configuration for a section.

        Environment variables for the section take precedence when all of
        them are set; otherwise the ``.edgerc`` file is read.

        Raises:
            ConfigError: If the file cannot be read or holds no valid section
            InvalidSectionError: If the section is not in the file
        """
        try:
            config = cls.from_env(section)
            logger.info(f"Using configuration from environment variables for section '{section}'")
            return config
        except EnvironmentConfigError:
            pass

        resolved = resolve_home_path(path)
        try:
            content = resolved.read_text(encoding='utf-8')
        except OSError as e:
            raise ConfigError(f"Cannot read .edgerc file: {e}", {"path": str(resolved)})

        sections = parse_edgerc(content)
        if section not in sections:
            raise InvalidSectionError(section, sorted(sections))

        logger.info(f"Using configuration from {resolved} section '{section}'")
        return sections[section]

    @classmethod
    def from_env(
        cls,
        section: str = DEFAULT_SECTION,
        environ: Optional[Mapping[str, str]] = None
    ) -> 'EdgeGridConfig':
        """
        Load configuration from environment variables.

        Variables are ``{PREFIX}HOST``, ``{PREFIX}CLIENT_TOKEN``,
        ``{PREFIX}CLIENT_SECRET`` and ``{PREFIX}ACCESS_TOKEN`` where the
        prefix is ``AKAMAI_`` for the default section and
        ``AKAMAI_{SECTION}_`` otherwise. ``{PREFIX}MAX_BODY`` and
        ``{PREFIX}ACCOUNT_SWITCH_KEY`` are optional.

        Raises:
            EnvironmentConfigError: If a required variable is not set
        """
        environ = os.environ if environ is None else environ
        prefix = env_prefix(section)

        values = {}
        for name in ('HOST', 'CLIENT_TOKEN', 'CLIENT_SECRET', 'ACCESS_TOKEN'):
            variable = f"{prefix}{name}"
            value = environ.get(variable)
            if not value:
                raise EnvironmentConfigError(variable)
            values[name.lower()] = value

        max_body = environ.get(f"{prefix}MAX_BODY")
        config = cls(
            client_token=values['client_token'],
            client_secret=values['client_secret'],
            access_token=values['access_token'],
            host=values['host'],
            max_body=parse_max_body(max_body) if max_body else MAX_BODY,
            account_switch_key=environ.get(f"{prefix}ACCOUNT_SWITCH_KEY"),
        )
        return validate_config(config)

    def with_account_switch_key(self, account_switch_key: Optional[str]) -> 'EdgeGridConfig':
        """Return a copy bound to another account switch key."""
        return replace(self, account_switch_key=account_switch_key)

    def to_edgerc(self, section: str = DEFAULT_SECTION) -> str:
        """Render this configuration as an ``.edgerc`` section."""
        lines = [
            f"[{section}]",
            f"client_secret = {self.client_secret}",
            f"host = {self.host_name}",
            f"access_token = {self.access_token}",
            f"client_token = {self.client_token}",
        ]
        if self.max_body != MAX_BODY:
            lines.append(f"max-body = {self.max_body}")
        if self.account_switch_key:
            lines.append(f"account_switch_key = {self.account_switch_key}")
        return '\n'.join(lines) + '\n'

    @property
    def host_name(self) -> str:
        """Host without the https:// scheme, as written in .edgerc files"""
        if self.host.startswith('https://'):
            return self.host[len('https://'):]
        return self.host

    def masked(self) -> Dict[str, Optional[Union[str, int]]]:
        """Configuration as a dict with the client secret masked."""
        secret = self.client_secret
        masked_secret = f"{secret[:4]}...{secret[-2:]}" if len(secret) > 8 else "****"
        return {
            'client_token': self.client_token,
            'client_secret': masked_secret,
            'access_token': self.access_token,
            'host': self.host,
            'max_body': self.max_body,
            'account_switch_key': self.account_switch_key,
        }


def normalize_host(host: str) -> str:
    """Prepend https:// when the host has no scheme and drop a trailing slash."""
    host = host.strip()
    if '://' not in host:
        host = f"https://{host}"
    return host.rstrip('/')


def validate_config(config: EdgeGridConfig) -> EdgeGridConfig:
    """
    Check that all required credential fields are present.

    Raises:
        MissingCredentialError: Naming the first empty field
    """
    for name in REQUIRED_FIELDS:
        if not getattr(config, name).strip():
            raise MissingCredentialError(name)
    return config


def env_prefix(section: str) -> str:
    """Environment variable prefix for a section."""
    if section == DEFAULT_SECTION:
        return "AKAMAI_"
    return f"AKAMAI_{section.upper()}_"


def parse_max_body(value: str) -> int:
    """
    Parse a max_body setting.

    Raises:
        ConfigError: If the value is not a positive integer
    """
    try:
        max_body = int(str(value).strip())
    except ValueError:
        raise ConfigError(f"Invalid max_body value: {value!r}", {"max_body": value})

    if max_body <= 0:
        raise ConfigError(f"max_body must be positive, got {max_body}", {"max_body": value})
    return max_body


def parse_value(value: str) -> str:
    """
    Parse a value from an ``.edgerc`` line.

    Surrounding single or double quotes are removed; anything after a
    ``;`` is treated as an inline comment.
    """
    value = value.strip()

    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        value = value[1:-1]

    if ';' in value:
        value = value[:value.index(';')]

    return value.strip()


def parse_edgerc(content: str) -> Dict[str, EdgeGridConfig]:
    """
    Parse ``.edgerc`` file content.

    Args:
        content: File content

    Returns:
        dict: Valid sections keyed by section name

    Raises:
        ConfigError: If no valid section is found
    """
    raw_sections: Dict[str, Dict[str, str]] = {}
    current: Optional[Dict[str, str]] = None

    for line in content.splitlines():
        line = line.strip()

        if not line or line.startswith(';') or line.startswith('#'):
            continue

        if line.startswith('[') and line.endswith(']'):
            # A repeated header replaces the earlier block
            current = raw_sections[line[1:-1].strip()] = {}
            continue

        if current is None or '=' not in line:
            continue

        key, _, value = line.partition('=')
        key = key.strip()
        if key == 'max-body':
            key = 'max_body'
        current[key] = parse_value(value)

    sections = {}
    for name, values in raw_sections.items():
        try:
            sections[name] = _section_to_config(name, values)
        except (ConfigError, MissingCredentialError) as e:
            logger.debug(f"Skipping invalid .edgerc section '{name}': {e}")

    if not sections:
        raise ConfigError("No valid sections found in .edgerc")

    return sections


def _section_to_config(name: str, values: Dict[str, str]) -> EdgeGridConfig:
    max_body = MAX_BODY
    if values.get('max_body'):
        try:
            max_body = parse_max_body(values['max_body'])
        except ConfigError as e:
            logger.warning(f"{e} in .edgerc section '{name}', using default {MAX_BODY}")

    config = EdgeGridConfig(
        client_token=values.get('client_token', ''),
        client_secret=values.get('client_secret', ''),
        access_token=values.get('access_token', ''),
        host=values.get('host', ''),
        max_body=max_body,
        account_switch_key=values.get('account_switch_key') or None,
    )
    return validate_config(config)


def resolve_home_path(path: Union[str, Path]) -> Path:
    """
    Resolve ``~`` in file paths.

    Raises:
        ConfigError: If the home directory cannot be determined
    """
    try:
        return Path(path).expanduser()
    except RuntimeError as e:
        raise ConfigError(f"Cannot determine home directory: {e}")


def list_sections(path: Union[str, Path] = DEFAULT_EDGERC_PATH) -> List[str]:
    """List the valid section names of an ``.edgerc`` file."""
    resolved = resolve_home_path(path)
    try:
        content = resolved.read_text(encoding='utf-8')
    except OSError as e:
        raise ConfigError(f"Cannot read .edgerc file: {e}", {"path": str(resolved)})
    return sorted(parse_edgerc(content))
