#!/usr/bin/env python3
"""
Source Programming Language
Command-line entry point: picks a task and hands the runtime to it
"""

import logging
import os
import sys
from typing import Callable, Dict, List, Optional

from srclang.banner import print_help
from srclang.errors import FlagError
from srclang.flags import Config, parse_flags, parse_task
from srclang.language import Language
from srclang.project import ProjectManager
from srclang.repl import REPL
from srclang.values import Error, Result

logger = logging.getLogger(__name__)

LOG_LEVEL_ENV = 'SRCLANG_LOG_LEVEL'
NO_INPUT_FILE = "No input file specified"


def setup_logging(debug: bool):
    if debug:
        level = logging.DEBUG
    else:
        level = getattr(logging, os.environ.get(LOG_LEVEL_ENV, 'WARNING').upper(), logging.WARNING)
        if not isinstance(level, int):
            level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s", stream=sys.stderr)


# ---------------------------
# Tasks
# ---------------------------
def task_help(language: Language, config: Config) -> int:
    return print_help()


def task_run(language: Language, config: Config) -> int:
    if config.filename is None:
        print(NO_INPUT_FILE, file=sys.stderr)
        return 1
    result = language.execute(config.filename)
    if isinstance(result, Error):
        print(result.message, file=sys.stderr)
        return 1
    return 0


def task_compile(language: Language, config: Config) -> int:
    if config.filename is None:
        print(NO_INPUT_FILE, file=sys.stderr)
        return 1
    return language.compile(config.filename, config.output)


def task_interactive(language: Language, config: Config) -> int:
    return REPL(language).run()


def task_new(language: Language, config: Config) -> Result:
    if not config.positionals:
        return Error("no project name specified")
    return ProjectManager(language, config.project_path).create(config.positionals[0])


def task_test(language: Language, config: Config) -> Result:
    return ProjectManager(language, config.project_path).test()


TASKS: Dict[str, Callable[[Language, Config], int]] = {
    'help': task_help,
    'run': task_run,
    'compile': task_compile,
    'interactive': task_interactive,
}

PROJECT_TASKS: Dict[str, Callable[[Language, Config], Result]] = {
    'new': task_new,
    'test': task_test,
}


def dispatch(task: str, language: Language, config: Config) -> int:
    if task in PROJECT_TASKS:
        result = PROJECT_TASKS[task](language, config)
        if isinstance(result, Error):
            print(f"ERROR: {result.message}", file=sys.stderr)
            return 1
        return 0

    # unknown tasks fall through to help
    handler = TASKS.get(task, task_help)
    return handler(language, config)


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    task, tokens = parse_task(argv)
    try:
        config = parse_flags(tokens)
    except FlagError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    setup_logging(config.debug)
    logger.debug("task %s with %s", task, config)
    language = Language(config)

    try:
        return dispatch(task, language, config)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return 1
    except Exception as e:
        logger.debug("unhandled error in task %s", task, exc_info=True)
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
