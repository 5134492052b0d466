"""
Credential configuration for EdgeGrid Python SDK

This module provides the EdgeGrid credential set and its loaders for
``.edgerc`` files and environment variables.
"""

from .edgerc import (
    EdgeGridConfig,
    MAX_BODY,
    DEFAULT_EDGERC_PATH,
    DEFAULT_SECTION,
    validate_config,
    normalize_host,
    env_prefix,
    parse_edgerc,
    parse_value,
    parse_max_body,
    list_sections,
)

__all__ = [
    'EdgeGridConfig',
    'MAX_BODY',
    'DEFAULT_EDGERC_PATH',
    'DEFAULT_SECTION',
    'validate_config',
    'normalize_host',
    'env_prefix',
    'parse_edgerc',
    'parse_value',
    'parse_max_body',
    'list_sections',
]
