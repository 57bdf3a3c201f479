"""
Value masking for env-style secrets.

Given a value and a `Policy`, produce the string shown instead of it:

  - full masking   -> every character replaced by `mask_char`
  - partial mode   -> keep `show_start` leading and `show_end` trailing
                      characters, mask the middle (at least `min_mask` chars)

Quote handling:
- If the token was wrapped in matching `'` or `"`, only the inner content is
  masked and the result is re-wrapped in the same quote. Quotes are never
  masked.

Everything here is pure: no I/O, no state, same input -> same output.
"""

from __future__ import annotations

from typing import Optional, Tuple

from ..config import PartialMode, Policy

QUOTE_CHARS = ("'", '"')


def split_quotes(token: str) -> Tuple[Optional[str], str]:
    """
    Split a raw token into (quote, inner content).

    Examples:
      '"secret"' -> ('"', 'secret')
      "'a'"      -> ("'", 'a')
      'plain'    -> (None, 'plain')
      '"open'    -> (None, '"open')
    """
    if len(token) >= 2 and token[0] in QUOTE_CHARS and token[-1] == token[0]:
        return token[0], token[1:-1]
    return None, token


def _full_mask(value: str, mask_char: str) -> str:
    return mask_char * len(value)


def _too_short(length: int, partial: PartialMode) -> bool:
    edges = partial.show_start + partial.show_end
    return length <= edges or length < edges + partial.min_mask


def _partial_mask(value: str, partial: PartialMode, mask_char: str) -> str:
    """
    Show both edges and mask the middle.

    Examples (3/3/3):
      'secret123'  -> 'sec***123'
      'abcdefghij' -> 'abc****hij'
      'ab'         -> '**'          (too short, full mask)
    """
    n = len(value)
    if _too_short(n, partial):
        if partial.short_value == "first_char":
            return value[0] + mask_char * max(partial.min_mask, n - 1)
        return _full_mask(value, mask_char)

    s, e = partial.show_start, partial.show_end
    mask_length = max(partial.min_mask, n - s - e)
    return value[:s] + mask_char * mask_length + value[n - e:]


def redact(value: str, policy: Policy, quote: Optional[str] = None) -> str:
    """
    Mask `value` according to `policy`.

    Args:
        value: Unquoted value to hide.
        policy: Mask char and optional partial mode.
        quote: Quote character the value was wrapped in, if any. The result
            is re-wrapped in it.

    Returns:
        The display string. Empty input stays empty (apart from the quotes).
    """
    if not value:
        masked = ""
    elif policy.partial is None:
        masked = _full_mask(value, policy.mask_char)
    else:
        masked = _partial_mask(value, policy.partial, policy.mask_char)

    if quote:
        return f"{quote}{masked}{quote}"
    return masked


def mask_value(token: str, policy: Policy) -> str:
    """Redact a raw token that may still carry its quotes (completion/hover text)."""
    quote, inner = split_quotes(token)
    return redact(inner, policy, quote)
