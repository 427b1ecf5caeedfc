"""
Mail text lookup and token replacement.

Mail text for a key is resolved in this order:
1. Variable override "signatures_queue_<key>" (edited by site admins at runtime)
2. S3 template override (optional, for updates without redeploy)
3. Packaged template (mail_templates/<language>/<key>.txt)

Steps 2-3 fall back to DEFAULT_LANGUAGE when the requested language has no
template. Templates are cached in memory for warm Lambda invocations with TTL.

Tokens have the form [type:name], e.g. [signature:first-name].
"""

import logging
import os
import re
import time
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from services import variables

logger = logging.getLogger(__name__)

# Cache TTL in seconds (default: 5 minutes)
CACHE_TTL_SECONDS = int(os.environ.get('MAIL_TEMPLATE_CACHE_TTL', '300'))

# Module-level cache: {cache_key: (template_content, timestamp)}
_template_cache: Dict[str, Tuple[str, float]] = {}

s3_config = Config(
    retries={
        'max_attempts': 1,
        'mode': 'standard'
    },
    connect_timeout=10,
    read_timeout=30
)

s3_client = boto3.client('s3', config=s3_config)

TEMPLATE_BUCKET = os.environ.get('MAIL_TEMPLATE_BUCKET')
TEMPLATE_KEY_PREFIX = os.environ.get('MAIL_TEMPLATE_KEY_PREFIX', 'mail_templates/')

# src/services/mail_text.py -> src/mail_templates/
TEMPLATES_DIR = Path(__file__).parent.parent / 'mail_templates'

DEFAULT_LANGUAGE = 'en'
VARIABLE_PREFIX = 'signatures_queue_'

TOKEN_PATTERN = re.compile(r'\[([\w-]+):([^\[\]\s]+)\]')
LANGUAGE_PATTERN = re.compile(r'^[a-z]{2}(-[A-Z]{2})?$')


def _load_from_filesystem(language: str, key: str) -> str:
    """
    Load packaged template.

    Raises:
        FileNotFoundError: If template file doesn't exist
    """
    template_path = TEMPLATES_DIR / language / f"{key}.txt"
    logger.debug(f"Loading mail template from filesystem: {template_path}")

    with open(template_path, 'r', encoding='utf-8') as f:
        return f.read()


def _load_from_s3(language: str, key: str) -> str:
    """
    Load template override from S3.

    Raises:
        ValueError: If MAIL_TEMPLATE_BUCKET not set
        ClientError: If the object can't be read
    """
    if not TEMPLATE_BUCKET:
        raise ValueError("MAIL_TEMPLATE_BUCKET environment variable not set")

    s3_key = f"{TEMPLATE_KEY_PREFIX}{language}/{key}.txt"
    logger.debug(f"Loading mail template from S3: s3://{TEMPLATE_BUCKET}/{s3_key}")

    response = s3_client.get_object(Bucket=TEMPLATE_BUCKET, Key=s3_key)
    return response['Body'].read().decode('utf-8')


def _load_template(language: str, key: str) -> Optional[str]:
    """Load one language's template, S3 override first. None if not found."""
    if TEMPLATE_BUCKET:
        try:
            return _load_from_s3(language, key)
        except (ClientError, ValueError) as e:
            logger.info(
                f"S3 override not available for {language}/{key} "
                f"({e.__class__.__name__}), falling back to local filesystem"
            )

    try:
        return _load_from_filesystem(language, key)
    except FileNotFoundError:
        return None


def load_template(key: str, language: str = DEFAULT_LANGUAGE, use_cache: bool = True) -> str:
    """
    Load mail template with caching and language fallback.

    Args:
        key: Mail text key (e.g., "initiate_signature_validation_body")
        language: Language code
        use_cache: Use cached version if available (default: True)

    Returns:
        str: Template text (tokens not replaced)

    Raises:
        ValueError: If no template exists for the key
    """
    if not isinstance(language, str) or not LANGUAGE_PATTERN.fullmatch(language):
        logger.warning(f"Invalid language {language!r}, using {DEFAULT_LANGUAGE}")
        language = DEFAULT_LANGUAGE

    cache_key = f"mail:{language}:{key}"
    current_time = time.time()

    if use_cache and cache_key in _template_cache:
        cached_content, cached_time = _template_cache[cache_key]
        if current_time - cached_time < CACHE_TTL_SECONDS:
            return cached_content
        logger.info(f"Cache expired for mail template: {language}/{key}, reloading...")

    content = _load_template(language, key)

    if content is None and language != DEFAULT_LANGUAGE:
        logger.info(
            f"No {language} template for {key}, falling back to {DEFAULT_LANGUAGE}"
        )
        content = _load_template(DEFAULT_LANGUAGE, key)

    if content is None:
        logger.error(
            f"Mail template not found: {key}. "
            f"Expected location: {TEMPLATES_DIR / language / (key + '.txt')}"
        )
        raise ValueError(f"Mail text '{key}' not found for language '{language}'")

    _template_cache[cache_key] = (content, current_time)
    return content


def scan_tokens(text: str) -> Dict[str, List[str]]:
    """
    Find the tokens used in a text.

    Example:
        >>> scan_tokens("Hi [signature:first-name], see [petition:url]")
        {'signature': ['first-name'], 'petition': ['url']}
    """
    found: Dict[str, List[str]] = {}
    for token_type, name in TOKEN_PATTERN.findall(text or ''):
        names = found.setdefault(token_type, [])
        if name not in names:
            names.append(name)
    return found


def replace_tokens(
    text: str,
    tokens: Optional[Mapping[str, Mapping[str, Any]]] = None,
    clear: bool = False
) -> str:
    """
    Replace [type:name] tokens in text.

    Replacement is a single pass: token-like text inside a replacement
    value is left as is.

    Args:
        text: Text containing tokens
        tokens: {type: {name: value}}; None values become empty strings
        clear: Remove tokens that have no value instead of leaving them

    Returns:
        str: Text with tokens replaced

    Example:
        >>> replace_tokens("Hello [signature:first-name]!",
        ...                {'signature': {'first-name': 'Ada'}})
        'Hello Ada!'
    """
    tokens = tokens or {}

    def _replace(match: 're.Match') -> str:
        token_type, name = match.group(1), match.group(2)
        values = tokens.get(token_type)
        if values is not None and name in values:
            value = values[name]
            return '' if value is None else str(value)
        return '' if clear else match.group(0)

    return TOKEN_PATTERN.sub(_replace, text)


def get_mail_text(
    key: str,
    language: str = DEFAULT_LANGUAGE,
    variables_map: Optional[Mapping[str, Mapping[str, Any]]] = None,
    replace: bool = True,
    clear: bool = False
) -> str:
    """
    Get the text for a mail key, with tokens replaced.

    Args:
        key: Mail text key (e.g., "initiate_signature_validation_subject")
        language: Language code (falls back to DEFAULT_LANGUAGE)
        variables_map: Token values, {type: {name: value}}
        replace: Replace tokens (False returns the raw text)
        clear: Remove tokens that have no value

    Returns:
        str: Mail text

    Raises:
        ValueError: If no text exists for the key
    """
    if not key:
        raise ValueError("Mail text key cannot be empty")

    text = variables.get(f"{VARIABLE_PREFIX}{key}")
    if text:
        logger.info(f"Using variable override for mail text: {key}")
        text = str(text)
    else:
        text = load_template(key, language or DEFAULT_LANGUAGE)

    if replace:
        return replace_tokens(text, variables_map, clear=clear)
    return text


def clear_cache() -> None:
    """Clear the mail template cache."""
    _template_cache.clear()
    logger.info("Mail template cache cleared")
