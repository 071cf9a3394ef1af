"""
Source Programming Language Flags
Turns command-line tokens into an immutable configuration
"""

import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple, Union

from srclang.errors import FlagError

FLAG_MARKER = '-'
DEFINE_SEPARATOR = '='
DEFAULT_TASK = 'help'

DefineValue = Union[str, bool]


@dataclass(frozen=True)
class Config:
    options: Dict[str, bool] = field(default_factory=dict)
    defines: Dict[str, DefineValue] = field(default_factory=dict)
    search_paths: Tuple[str, ...] = ()
    output: Optional[str] = None
    project_path: str = field(default_factory=os.getcwd)
    filename: Optional[str] = None
    args: Tuple[str, ...] = ()

    @property
    def debug(self) -> bool:
        return self.options.get('DEBUG', False)

    @property
    def positionals(self) -> Tuple[str, ...]:
        """The filename followed by the program arguments"""
        if self.filename is None:
            return ()
        return (self.filename,) + self.args


def parse_task(argv: Sequence[str]) -> Tuple[str, List[str]]:
    """Split the task token from the rest of the arguments"""
    if not argv:
        return DEFAULT_TASK, []
    return argv[0], list(argv[1:])


def split_define(token: str) -> Tuple[str, DefineValue]:
    """'key=value' splits at the first '='; a bare 'key' is defined as true"""
    key, sep, value = token.partition(DEFINE_SEPARATOR)
    if not sep:
        return token, True
    return key, value


class FlagParser:
    """Scans tokens left to right. Flags are only recognised until the
    filename is seen; everything after it belongs to the program."""

    def __init__(self, tokens: Sequence[str]):
        self.tokens = list(tokens)
        self.pos = 0

        self.options: Dict[str, bool] = {}
        self.defines: Dict[str, DefineValue] = {}
        self.search_paths: List[str] = []
        self.output: Optional[str] = None
        self.project_path: Optional[str] = None
        self.filename: Optional[str] = None
        self.args: List[str] = []

        self.handlers = {
            'debug': self._flag_debug,
            'breakpoint': self._flag_breakpoint,
            'define': self._flag_define,
            'search-path': self._flag_search_path,
            'o': self._flag_output,
            'project-path': self._flag_project_path,
        }

    def parse(self) -> Config:
        while self.pos < len(self.tokens):
            token = self.advance()
            if self.filename is None and token.startswith(FLAG_MARKER):
                self._flag(token[len(FLAG_MARKER):])
            elif self.filename is None:
                self.filename = token
            else:
                self.args.append(token)

        return Config(
            options=dict(self.options),
            defines=dict(self.defines),
            search_paths=tuple(self.search_paths),
            output=self.output,
            project_path=self.project_path or os.getcwd(),
            filename=self.filename,
            args=tuple(self.args),
        )

    def advance(self) -> str:
        token = self.tokens[self.pos]
        self.pos += 1
        return token

    def expect_values(self, count: int) -> List[str]:
        if self.pos + count > len(self.tokens):
            raise FlagError(f"expecting {count} arguments")
        values = self.tokens[self.pos:self.pos + count]
        self.pos += count
        return values

    def _flag(self, name: str):
        handler = self.handlers.get(name)
        if handler is None:
            raise FlagError(f"invalid flag '{FLAG_MARKER}{name}'")
        handler()

    def _flag_debug(self):
        self.options['DEBUG'] = True

    def _flag_breakpoint(self):
        self.options['BREAK'] = True

    def _flag_define(self):
        key, value = split_define(self.expect_values(1)[0])
        self.defines[key] = value

    def _flag_search_path(self):
        self.search_paths.append(self.expect_values(1)[0])

    def _flag_output(self):
        self.output = self.expect_values(1)[0]

    def _flag_project_path(self):
        self.project_path = self.expect_values(1)[0]


def parse_flags(tokens: Sequence[str]) -> Config:
    return FlagParser(tokens).parse()
