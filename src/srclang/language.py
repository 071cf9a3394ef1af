"""
Source Programming Language Runtime
Compiles and executes scripts on top of the host Python compiler
"""

import ast
import builtins
import dis
import importlib.util
import logging
import marshal
import os
import pdb
import traceback
from pathlib import Path
from types import CodeType, SimpleNamespace
from typing import Any, Dict, List, Optional, Union

from srclang.errors import CompileError
from srclang.flags import Config
from srclang.values import Error, Ok, Result

logger = logging.getLogger(__name__)

SOURCE_SUFFIX = '.src'
BYTECODE_SUFFIX = '.srcc'
BYTECODE_MAGIC = b'SRCC'
SCRIPT_LABEL = '<script>'
RESULT_NAME = '__result__'
RESERVED_NAMES = frozenset(['__builtins__', '__name__', '__file__', 'require', 'exit', 'quit'])
SEARCH_PATH_ENV = 'SRCLANG_PATH'

PathLike = Union[str, os.PathLike]


def capture_last_expression(tree: ast.Module) -> ast.Module:
    """Store the value of a trailing expression statement in __result__"""
    if tree.body and isinstance(tree.body[-1], ast.Expr):
        last = tree.body[-1]
        tree.body[-1] = ast.copy_location(
            ast.Assign(targets=[ast.Name(id=RESULT_NAME, ctx=ast.Store())], value=last.value),
            last,
        )
        ast.fix_missing_locations(tree)
    return tree


def compile_source(source: str, label: str) -> CodeType:
    tree = capture_last_expression(ast.parse(source, filename=label, mode='exec'))
    return compile(tree, label, 'exec')


def dump_bytecode(code: CodeType) -> bytes:
    return BYTECODE_MAGIC + importlib.util.MAGIC_NUMBER + marshal.dumps(code)


def load_bytecode(data: bytes, label: str) -> CodeType:
    header = len(BYTECODE_MAGIC)
    magic = data[header:header + len(importlib.util.MAGIC_NUMBER)]
    if magic != importlib.util.MAGIC_NUMBER:
        raise CompileError(f"{label}: bytecode was compiled by an incompatible runtime")
    try:
        return marshal.loads(data[header + len(magic):])
    except (EOFError, ValueError, TypeError) as e:
        raise CompileError(f"{label}: corrupt bytecode: {e}")


def script_exit(code=None):
    """exit() for scripts; unlike the site builtin it leaves stdin open"""
    raise SystemExit(code)


def describe_syntax_error(e: SyntaxError) -> str:
    return f"{e.filename}:{e.lineno}: SyntaxError: {e.msg}"


class Language:
    """One runtime instance. Built once from a Config and handed to
    exactly one execution mode."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()
        self.options: Dict[str, bool] = dict(self.config.options)
        self.defines: Dict[str, Any] = {}
        self.search_paths: List[Path] = []
        self.modules: Dict[str, SimpleNamespace] = {}
        self.script_dir: Optional[Path] = None
        self.session: Optional[Dict[str, Any]] = None

        for key, value in self.config.defines.items():
            self.define(key, value)
        for path in self.config.search_paths:
            self.append_search_path(path)
        for path in os.environ.get(SEARCH_PATH_ENV, '').split(os.pathsep):
            if path:
                self.append_search_path(path)
        self.define('__ARGS__', list(self.config.args))

    @property
    def debug(self) -> bool:
        return self.options.get('DEBUG', False)

    @property
    def breakpoint(self) -> bool:
        return self.options.get('BREAK', False)

    def define(self, key: str, value: Any):
        logger.debug("define %s = %r", key, value)
        self.defines[key] = value
        if self.session is not None and key not in RESERVED_NAMES:
            self.session[key] = value

    def append_search_path(self, path: PathLike):
        self.search_paths.append(Path(path))

    # ---------------------------
    # Loading
    # ---------------------------
    def load(self, path: PathLike) -> CodeType:
        """Read a source or bytecode file into a code object"""
        path = Path(path)
        data = path.read_bytes()
        if data.startswith(BYTECODE_MAGIC):
            logger.debug("loading bytecode %s", path)
            return load_bytecode(data, str(path))
        logger.debug("compiling %s", path)
        return compile_source(data.decode('utf-8'), str(path))

    def compile(self, path: PathLike, output: Optional[PathLike] = None) -> int:
        source_path = Path(path)
        target = Path(output) if output else source_path.with_suffix(BYTECODE_SUFFIX)
        try:
            code = compile_source(source_path.read_text(encoding='utf-8'), str(source_path))
            if self.debug:
                logger.debug("bytecode for %s:\n%s", source_path, dis.Bytecode(code).dis())
            target.write_bytes(dump_bytecode(code))
        except SyntaxError as e:
            logger.error("%s", describe_syntax_error(e))
            return 1
        except (OSError, UnicodeDecodeError) as e:
            logger.error("%s", e)
            return 1
        logger.info("compiled %s -> %s", source_path, target)
        return 0

    # ---------------------------
    # Execution
    # ---------------------------
    def namespace(self, origin: str) -> Dict[str, Any]:
        namespace = dict(self.defines)
        namespace.update({
            '__builtins__': builtins,
            '__name__': '__main__',
            '__file__': origin,
            'require': self.require,
            'exit': script_exit,
            'quit': script_exit,
        })
        return namespace

    def execute(self, path: PathLike) -> Result:
        path = Path(path)
        if not path.is_file():
            return Error(f"{path}: no such file")
        try:
            code = self.load(path)
        except SyntaxError as e:
            return Error(describe_syntax_error(e))
        except (OSError, UnicodeDecodeError, CompileError) as e:
            return Error(str(e))

        self.script_dir = path.resolve().parent
        return self._run(code, self.namespace(str(path)))

    def execute_string(self, source: str, label: str = SCRIPT_LABEL) -> Result:
        """Run source text in the persistent session namespace"""
        try:
            code = compile_source(source, label)
        except SyntaxError as e:
            return Error(describe_syntax_error(e))

        if self.session is None:
            self.session = self.namespace(label)
        return self._run(code, self.session)

    def _run(self, code: CodeType, namespace: Dict[str, Any]) -> Result:
        namespace.pop(RESULT_NAME, None)
        if self.debug:
            logger.debug("executing %s:\n%s", code.co_filename, dis.Bytecode(code).dis())
        try:
            if self.breakpoint:
                pdb.Pdb().run(code, namespace)
            else:
                exec(code, namespace)
        except SystemExit as e:
            logger.debug("%s called exit(%r)", code.co_filename, e.code)
            return Error(f"SystemExit: {e.code}")
        except Exception as e:
            message = f"{type(e).__name__}: {e}"
            if self.debug:
                message = traceback.format_exc().rstrip()
            logger.debug("execution of %s failed: %s", code.co_filename, message)
            return Error(message)
        return Ok(namespace.pop(RESULT_NAME, None))

    # ---------------------------
    # Modules
    # ---------------------------
    def reset_modules(self):
        """Forget loaded modules so the next script starts from fresh state"""
        self.modules.clear()

    def find_module(self, name: str) -> Optional[Path]:
        roots = [self.script_dir or Path.cwd()] + self.search_paths
        for root in roots:
            for suffix in (SOURCE_SUFFIX, BYTECODE_SUFFIX):
                candidate = root / f"{name}{suffix}"
                if candidate.is_file():
                    return candidate
        return None

    def require(self, name: str) -> SimpleNamespace:
        """Builtin available to scripts: load a module from the search path"""
        if name in self.modules:
            return self.modules[name]

        path = self.find_module(name)
        if path is None:
            raise ImportError(f"module '{name}' not found in search path")

        logger.debug("require %s from %s", name, path)
        namespace = self.namespace(str(path))
        namespace['__name__'] = name
        exec(self.load(path), namespace)
        module = SimpleNamespace(**{
            key: value for key, value in namespace.items()
            if not key.startswith('_') and key not in RESERVED_NAMES and key not in self.defines
        })
        self.modules[name] = module
        return module
