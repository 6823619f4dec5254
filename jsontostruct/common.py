"""
Common utility functions for jsontostruct.
"""

# pylint: disable=line-too-long

import os
import re
from functools import lru_cache
from typing import List, Optional

import jinja2


# Trailing name segments that are rendered fully upper-case.
UPPERCASE_FIXUPS = frozenset(['id', 'url'])


def _title_segment(segment: str) -> str:
    """Upper-case every letter that starts a word, leave the rest alone."""
    chars = list(segment)
    prev_is_word = False
    for i, c in enumerate(chars):
        if not prev_is_word and c.isalpha():
            upper = c.upper()
            if len(upper) == 1:
                chars[i] = upper
        prev_is_word = c.isalnum() or c == '_'
    return ''.join(chars)


@lru_cache(maxsize=8192)
def field_name(key: str) -> str:
    """
    Convert a JSON object key into an exported Go identifier.

    The key is split on underscores, each segment is title-cased and the
    segments are joined again. A trailing ``id`` or ``url`` segment is
    upper-cased. Anything that is not a letter or digit (or not a letter in
    the first position) becomes an underscore.

    Example:
        field_name("foo_id") -> "FooID"
        field_name("avatar_url") -> "AvatarURL"
        field_name("2fa") -> "_fa"

    Args:
        key (str): The JSON object key.

    Returns:
        str: The identifier. Never empty.
    """
    parts = [_title_segment(part) for part in key.split('_')]
    last = parts[-1]
    if last.lower() in UPPERCASE_FIXUPS:
        parts[-1] = last.upper()
    assembled = ''.join(parts)
    if not assembled:
        return '_'
    chars = []
    for i, c in enumerate(assembled):
        ok = c.isalpha() if i == 0 else (c.isalpha() or c.isdecimal())
        chars.append(c if ok else '_')
    return ''.join(chars)


def type_identifier(name: str) -> str:
    """Convert a user supplied type name into a valid Go identifier."""
    val = re.sub(r'[^a-zA-Z0-9_]', '_', name)
    if not val or re.match(r'^[0-9]', val):
        val = '_' + val
    return val


def process_template(file_path: str, template_dir: Optional[str] = None, **kvargs) -> str:
    """
    Process a file as a Jinja2 template with the given object as input.

    Templates are looked up in ``template_dir`` first (when given) and then
    next to this module, so a caller can override any shipped template.

    Args:
        file_path (str): The template path relative to the search path.
        template_dir (str): Optional directory searched before the package.

    Returns:
        str: The processed template as a string.
    """
    search_path: List[str] = []
    if template_dir:
        search_path.append(template_dir)
    search_path.append(os.path.dirname(__file__))
    template_loader = jinja2.FileSystemLoader(searchpath=search_path)
    template_env = jinja2.Environment(loader=template_loader, keep_trailing_newline=True,
                                      undefined=jinja2.StrictUndefined)

    # Load the template from the file
    template = template_env.get_template(file_path)

    # Render the template with the object as input
    output = template.render(**kvargs)

    return output
