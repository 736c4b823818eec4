"""
Input Validation Utilities
Validation for API request payloads
"""
import re
from typing import Dict, Any, List, Optional, Tuple

# Regex patterns
EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')

MAX_ATTACHMENTS = 10


def validate_required_fields(data: Dict[str, Any], required_fields: List[str]) -> Tuple[bool, Optional[str]]:
    """
    Validate that all required fields are present in the data

    Args:
        data: Dictionary of input data
        required_fields: List of required field names

    Returns:
        Tuple of (is_valid, error_message)
    """
    missing_fields = [field for field in required_fields if field not in data or data[field] is None or data[field] == '']

    if missing_fields:
        return False, f"Missing required fields: {', '.join(missing_fields)}"

    return True, None


def validate_email(email: str) -> Tuple[bool, Optional[str]]:
    """
    Validate email format

    Args:
        email: Email address to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not email or not isinstance(email, str):
        return False, "Email must be a non-empty string"

    if not EMAIL_PATTERN.match(email):
        return False, "Invalid email format"

    if len(email) > 254:  # RFC 5321
        return False, "Email address too long"

    return True, None


def validate_email_list(value: Optional[str]) -> Tuple[bool, Optional[str]]:
    """Validate an optional comma separated cc/bcc list"""
    if not value:
        return True, None
    if not isinstance(value, str):
        return False, "Address list must be a comma separated string"

    for address in value.split(','):
        is_valid, error = validate_email(address.strip())
        if not is_valid:
            return False, f"{error}: {address.strip()}"

    return True, None


def validate_attachments(value: Any) -> Tuple[bool, Optional[str]]:
    """Attachments are an optional list of file names"""
    if value is None:
        return True, None
    if not isinstance(value, list) or not all(isinstance(name, str) and name for name in value):
        return False, "Attachments must be a list of file names"
    if len(value) > MAX_ATTACHMENTS:
        return False, f"At most {MAX_ATTACHMENTS} attachments are allowed"
    return True, None


def validate_line_items(items: Any) -> Tuple[bool, Optional[str]]:
    """
    Validate revision line items

    Each item needs a service_name; quantity and unit_price are optional
    non-negative numbers.
    """
    if items is None:
        return True, None
    if not isinstance(items, list):
        return False, "line_items must be a list"

    for index, item in enumerate(items):
        if not isinstance(item, dict) or not item.get('service_name'):
            return False, f"line_items[{index}] is missing service_name"
        for field in ('quantity', 'unit_price'):
            value = item.get(field)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
                return False, f"line_items[{index}].{field} must be a non-negative number"

    return True, None


def validate_string_fields(data: Dict[str, Any], fields: List[str]) -> Tuple[bool, Optional[str]]:
    """Fields that are present (and not null) must be strings"""
    for field in fields:
        value = data.get(field)
        if value is not None and not isinstance(value, str):
            return False, f"{field} must be a string"
    return True, None


def validate_revision_context(context: Any) -> Tuple[bool, Optional[str]]:
    """
    Validate the optional revision_context of a recorded email

    Must be an object; version_number and revision_notes are optional
    strings and is_revision an optional boolean.
    """
    if context is None:
        return True, None
    if not isinstance(context, dict):
        return False, "revision_context must be an object"

    is_valid, error = validate_string_fields(context, ['version_number', 'revision_notes'])
    if not is_valid:
        return False, f"revision_context.{error}"

    if context.get('is_revision') is not None and not isinstance(context['is_revision'], bool):
        return False, "revision_context.is_revision must be a boolean"

    return True, None
