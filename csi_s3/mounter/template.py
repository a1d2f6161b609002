# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Placeholder expansion for extra mount options.

Volumes may carry a free-form option string such as
``-o use_cache=${cacheDir} -o multireq_max=5``. Placeholders are written
``${name}`` or ``$name``; ``$$`` is a literal dollar sign.
"""

import re
from typing import Callable, Dict, List, Optional

from ..exceptions import UnknownPlaceholderError
from ..utils import logger

PLACEHOLDER_RE = re.compile(r"\$(?:(\$)|\{([^}]*)\}|([A-Za-z_][A-Za-z0-9_]*))")

# A resolver returns None for names it does not know
Resolver = Callable[[str], Optional[str]]

class PlaceholderResolver:
    """
    Resolves placeholder names from a table of resolver functions.

    Args:
        resolvers (dict): Placeholder name -> zero-argument function
        strict (bool): Raise UnknownPlaceholderError for unknown names instead
            of passing the placeholder through unchanged
        context (str): Appears in the warning for unknown names
    """

    def __init__(self, resolvers: Dict[str, Callable[[], str]], strict: bool = False, context: str = ""):
        self.resolvers = dict(resolvers)
        self.strict = strict
        self.context = context

    def __call__(self, name: str) -> Optional[str]:
        resolve = self.resolvers.get(name)
        if resolve is not None:
            return resolve()
        if self.strict:
            raise UnknownPlaceholderError(name)
        logger.warning(f"Unknown extra option placeholder {name!r} of {self.context or 'volume'}")
        return None

def expand(raw: str, resolver: Resolver) -> List[str]:
    """
    Substitute placeholders in ``raw`` and split it into tokens.

    Placeholders the resolver does not know (it returns None) are kept
    verbatim, so ``${unknown}`` stays ``${unknown}``.

    Args:
        raw (str): Option string, may be empty
        resolver (callable): Maps a placeholder name to its value

    Returns:
        list: Whitespace separated tokens in input order

    Raises:
        UnknownPlaceholderError: If a strict resolver meets an unknown name
    """
    if not raw:
        return []

    def substitute(match):
        if match.group(1):
            return "$"
        name = match.group(2) if match.group(2) is not None else match.group(3)
        value = resolver(name)
        if value is None:
            return match.group(0)
        return value

    return PLACEHOLDER_RE.sub(substitute, raw).split()
