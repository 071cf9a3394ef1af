"""
Source Programming Language Values
Result type returned by the runtime and the project manager
"""

import json
from dataclasses import dataclass
from typing import Any, Union


def display(value: Any) -> str:
    """Render a language value the way the shell shows it"""
    if value is None:
        return "null"
    elif isinstance(value, bool):
        return "true" if value else "false"
    elif isinstance(value, str):
        return value
    elif isinstance(value, (list, tuple, dict)):
        return json.dumps(value, default=str)
    else:
        return str(value)


@dataclass(frozen=True)
class Ok:
    value: Any = None

    def __str__(self):
        return display(self.value)


@dataclass(frozen=True)
class Error:
    message: str

    def __str__(self):
        return self.message


Result = Union[Ok, Error]
