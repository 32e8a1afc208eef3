"""
Canonical signing string construction.

The signed material is ``key=value`` fragments joined with ``&``, in the order
of the supplied (already sorted) keys, with values trimmed and empty values
dropped. Outbound requests and inbound notifications use the same rules.
"""

from typing import Any, Iterable, List, Mapping, Optional

from ..config import SIGN_FIELD, SIGN_TYPE_FIELD


def first_value(value: Any) -> str:
    """
    Get the transmitted value of a parameter.
    
    Multi-valued form mappings hold lists; only the first value counts.
    """
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return first_value(value[0]) if value else ""
    if isinstance(value, bytes):
        return value.decode('utf-8')
    return str(value)


def sorted_keys(params: Mapping[str, Any], exclude: Iterable[str] = ()) -> List[str]:
    """
    Get parameter names sorted ascending by their UTF-8 bytes.
    
    Args:
        params: Parameter mapping
        exclude: Names to leave out
    """
    excluded = frozenset(exclude)
    keys = [key for key in params if key not in excluded]
    return sorted(keys, key=lambda k: k.encode('utf-8'))


def build_canonical_string(
    ordered_keys: Optional[Iterable[str]],
    params: Optional[Mapping[str, Any]],
) -> str:
    """
    Build the canonical string for the given keys.
    
    Args:
        ordered_keys: Parameter names, pre-sorted
        params: Parameter mapping
        
    Returns:
        ``k1=v1&k2=v2...`` with empty values skipped
    """
    if not ordered_keys or not params:
        return ""
    
    fragments = []
    for key in ordered_keys:
        value = first_value(params.get(key)).strip()
        if value:
            fragments.append(f"{key}={value}")
    return "&".join(fragments)


def build_notification_string(form: Mapping[str, Any]) -> str:
    """
    Build the canonical string of an inbound notification.
    
    ``sign`` and ``sign_type`` are excluded; every other non-empty field is
    included in sorted order.
    """
    keys = sorted_keys(form, exclude=(SIGN_FIELD, SIGN_TYPE_FIELD))
    return build_canonical_string(keys, form)
