"""
Source Programming Language REPL
Interactive Read-Eval-Print Loop
"""

import logging
import sys
from typing import Optional, TextIO

from srclang.banner import print_banner
from srclang.language import Language, SCRIPT_LABEL

logger = logging.getLogger(__name__)

EXIT_COMMAND = '.exit'


class REPL:
    def __init__(self, language: Language, stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None):
        self.language = language
        self.stdin = stdin
        self.stdout = stdout
        self.prompt = "> "
        self.result_prefix = ":: "

    def run(self) -> int:
        """Start the REPL. Ends on '.exit' or end of input."""
        stdin = self.stdin or sys.stdin
        stdout = self.stdout or sys.stdout
        print_banner(stdout)

        while True:
            stdout.write(self.prompt)
            stdout.flush()
            try:
                line = stdin.readline()
                if not line:
                    # closed stream, retrying would spin forever
                    logger.debug("end of input, leaving interactive shell")
                    stdout.write("\n")
                    break

                line = line.rstrip("\r\n")
                if line.strip() == EXIT_COMMAND:
                    break

                self.evaluate(line, stdout)
            except KeyboardInterrupt:
                stdout.write("\nKeyboardInterrupt\n")

        return 0

    def evaluate(self, line: str, stdout: TextIO):
        result = self.language.execute_string(line, SCRIPT_LABEL)
        print(f"{self.result_prefix}{result}", file=stdout)
