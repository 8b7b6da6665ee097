"""Script definition."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Script:
    """A registered handler, addressed by its registry name.

    Names look like the file a classic install would ``require``:
    ``ListEvents.py``, ``reports/ReportList.py``, ``v2/dashboard``.
    """

    name: str
    handler: Callable[..., Any]
    description: str = ""
