"""Summary lookup from handler docstrings."""

import inspect
import re
from typing import Any, Callable

SummaryLookup = Callable[[Any], str]


def summary_for(func: Any) -> str:
    """Return the first paragraph of ``func``'s docstring, or ``""``."""
    doc = inspect.getdoc(func) if func is not None else None
    if not doc:
        return ""
    first_paragraph = re.split(r"\n\s*\n", doc, maxsplit=1)[0]
    return " ".join(first_paragraph.split())
