"""Key casing normalization for LocalAPI responses.

tailscaled answers with a mix of Go-style exported names ("TailscaleIPs",
"DNSName") and snake_case keys. Every JSON body is rewritten to camelCase
before it reaches the caller so response handling only deals with one
convention.

Usage:
    from tailscale_localapi.core.casing import to_camel_case_keys

    to_camel_case_keys({"Self": {"HostName": "box", "user_id": 7}})
    # {"self": {"hostName": "box", "userId": 7}}
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

# Unicode whitespace code points treated as word separators
WHITESPACE = frozenset(chr(code_point) for code_point in (
    0x0009,  # '\t'
    0x000A,  # '\n'
    0x000B,  # '\v'
    0x000C,  # '\f'
    0x000D,  # '\r'
    0x0020,  # ' '
    0x0085,
    0x00A0,
    0x1680,
    0x2000,
    0x2001,
    0x2002,
    0x2003,
    0x2004,
    0x2005,
    0x2006,
    0x2007,
    0x2008,
    0x2009,
    0x200A,
    0x2028,
    0x2029,
    0x202F,
    0x205F,
    0x3000,
    0xFEFF,
))

WORD_SEPARATORS = frozenset({"-", "_"}) | WHITESPACE

# ASCII only, matching the daemon's Go identifiers
_LOWER_END_RE = re.compile(r"[a-z]$")
_UPPER_PAIR_END_RE = re.compile(r"[A-Z][A-Z]$")
_DIGIT_END_RE = re.compile(r"[0-9]$")
_LOWER_RE = re.compile(r"[a-z]")
_UPPER_RE = re.compile(r"[A-Z]")
_DIGIT_RE = re.compile(r"[0-9]")


def words(text: str) -> list[str]:
    """Split an identifier into words.

    Separators (hyphen, underscore and Unicode whitespace) end a word and
    are dropped. Case and digit transitions also start a new word:

    - lower → upper: "helloWorld" → ["hello", "World"]
    - two uppers → lower: the last upper starts the next word,
      "HELLOWorld" → ["HELLO", "World"]
    - digit ↔ non-digit: "abc123def" → ["abc", "123", "def"]

    Args:
        text: Identifier to split.

    Returns:
        Words in order. Never contains empty strings.
    """
    results: list[str] = []
    word = ""

    for character in text:
        if character in WORD_SEPARATORS:
            if word:
                results.append(word)
            word = ""
            continue

        if _LOWER_END_RE.search(word) and _UPPER_RE.match(character):
            results.append(word)
            word = ""
        elif _UPPER_PAIR_END_RE.search(word) and _LOWER_RE.match(character):
            results.append(word[:-1])
            word = word[-1]
        elif bool(_DIGIT_END_RE.search(word)) != bool(_DIGIT_RE.match(character)):
            if word:
                results.append(word)
            word = ""

        word += character

    if word:
        results.append(word)

    return results


def to_camel_case(key: str) -> str:
    """Convert a single key to camelCase.

    Keys without any lowercase letter are lowercased first so that
    "ID" becomes "id" rather than "iD". Otherwise the original casing
    drives the word boundaries, e.g. "TailscaleIPs" → "tailscaleIPs".
    """
    source = key if _LOWER_RE.search(key) else key.lower()

    parts = []
    for index, word in enumerate(words(source)):
        head = word[0].lower() if index == 0 else word[0].upper()
        parts.append(head + word[1:])

    return "".join(parts)


def to_camel_case_keys(data: Any) -> Any:
    """Recursively rewrite every mapping key in a JSON value to camelCase.

    Lists keep their order and length; scalars are returned as-is. When two
    keys collapse to the same camelCase name the later one wins. The input
    is not modified.

    Args:
        data: Decoded JSON value.

    Returns:
        A new value with normalized keys.
    """
    if isinstance(data, (list, tuple)):
        return [to_camel_case_keys(item) for item in data]

    if isinstance(data, Mapping):
        result: dict[Any, Any] = {}
        for key, value in data.items():
            camel_key = to_camel_case(key) if isinstance(key, str) else key
            result[camel_key] = to_camel_case_keys(value)
        return result

    return data
