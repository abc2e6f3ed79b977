"""
Deterministic naming for scoped component classes

Three pure functions shared by the markup and style passes:

- string_hash: djb2-style content hash (same result as the component
  compiler's own css hash), base-36 encoded
- scopedClass_default: default class namer, "<prefix>-<hash>-<child>"
- componentName_derive: filename to component identifier

Both passes compute the scoped class for a (style content, parent, child)
triple independently. They agree only because they call the same functions
here with the same inputs, so nothing in this module may keep state.
"""

import importlib
import re
from typing import Any, Callable, Optional
from urllib.parse import quote

from ..config import appsettings
from .errors import NameDerivationError, NamerLoadError

# Signature: namer(hash=..., css=..., parent=..., child=..., filename=...) -> str
ClassNamer = Callable[..., str]

_BASE36 = '0123456789abcdefghijklmnopqrstuvwxyz'

# Characters encodeURI leaves untouched (besides alphanumerics)
_URI_SAFE = ";,/?:@&=+$-_.!~*'()#"


def string_hash(text: str) -> str:
    """
    Hash text into a short base-36 token

    Carriage returns are stripped first so CRLF and LF checkouts hash alike.
    The text is walked backwards one UTF-16 code unit at a time:
    h = ((h << 5) - h) ^ unit, starting from 5381, kept to 32 bits.

    Args:
        text: Content to hash (typically a whole style section)

    Returns:
        Unsigned 32-bit hash as lowercase base-36 (e.g., "45h" for "")

    Example:
        >>> string_hash("")
        '45h'
        >>> string_hash("a")
        '3ksa'
    """
    data = text.replace('\r', '').encode('utf-16-le')
    h = 5381
    for i in range(len(data) - 2, -1, -2):
        unit = data[i] | (data[i + 1] << 8)
        h = (((h << 5) - h) ^ unit) & 0xFFFFFFFF

    digits = []
    while True:
        h, remainder = divmod(h, 36)
        digits.append(_BASE36[remainder])
        if h == 0:
            break
    return ''.join(reversed(digits))


def scopedClass_default(
    hash: Callable[[str], str],
    css: str,
    parent: str,
    child: str,
    filename: Optional[str] = None,
    prefix: Optional[str] = None,
) -> str:
    """
    Default scoped class namer

    Args:
        hash: Hash function to apply to the style content
        css: Full style text of the parent component
        parent: Parent component name (unused by the default)
        child: Child component tag name
        filename: Display filename (unused by the default)
        prefix: Class prefix overriding settings.class_prefix

    Returns:
        Class token such as "scoped-1k3j4a-button"
    """
    if prefix:
        return f"{prefix}-{hash(css)}-{child.lower()}"
    return f"{appsettings.scopedPrefix_make(hash(css))}-{child.lower()}"


def scopedClass_make(
    namer: ClassNamer,
    css: str,
    parent: str,
    child: str,
    filename: Optional[str] = None,
) -> str:
    """Invoke a class namer with the keyword arguments every namer receives"""
    return namer(hash=string_hash, css=css, parent=parent, child=child, filename=filename)


def namer_load(path: Optional[str]) -> ClassNamer:
    """
    Resolve a class namer from a 'module:function' path

    Args:
        path: Import path, or None for the default namer

    Returns:
        Callable namer

    Raises:
        NamerLoadError: If the module or attribute cannot be found
    """
    if not path:
        return scopedClass_default

    module_name, _, attribute = path.partition(':')
    if not module_name or not attribute:
        raise NamerLoadError(f"Class namer must look like 'module:function', got '{path}'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise NamerLoadError(f"Cannot import class namer module '{module_name}': {e}") from e

    namer: Any = getattr(module, attribute, None)
    if not callable(namer):
        raise NamerLoadError(f"'{attribute}' in module '{module_name}' is not callable")
    return namer


def componentName_derive(filename: Optional[str]) -> Optional[str]:
    """
    Derive a component identifier from a file path

    Steps:
    1. Split on / and \\ and percent-encode each segment
    2. Fold a trailing index.<ext> onto its directory (a/index.x -> a.x)
    3. Strip the extension, turn runs of non-identifier chars into "_"
    4. Trim one leading/trailing "_", prefix "_" before a leading digit
    5. Uppercase the first character

    Args:
        filename: Path as given by the caller (may be None or empty)

    Returns:
        Identifier such as "Button", or None when no filename was given

    Raises:
        NameDerivationError: If nothing usable is left after sanitizing

    Example:
        >>> componentName_derive("src/lib/my-button.svelte")
        'My_button'
        >>> componentName_derive("src/Card/index.svelte")
        'Card'
    """
    if not filename:
        return None

    parts = [quote(part, safe=_URI_SAFE) for part in re.split(r'[/\\]', filename)]

    if len(parts) > 1:
        index_match = re.match(r'^index(\.\w+)', parts[-1], re.ASCII)
        if index_match:
            parts.pop()
            parts[-1] += index_match.group(1)

    base = parts.pop().replace('%', 'u')
    base = re.sub(r'\.[^.]+$', '', base)
    base = re.sub(r'[^a-zA-Z_$0-9]+', '_', base)
    base = re.sub(r'^_', '', base)
    base = re.sub(r'_$', '', base)
    base = re.sub(r'^([0-9])', r'_\1', base)

    if not base:
        raise NameDerivationError(filename)

    return base[0].upper() + base[1:]


def parentName_resolve(filename: Optional[str]) -> str:
    """Component name for filename, or the configured fallback parent"""
    return componentName_derive(filename) or appsettings.fallback_parent
