import sys
from typing import TextIO, Optional

LOGO = r"""
                       .__
  _____________   ____ |  | _____    ____    ____
 /  ___/\_  __ \_/ ___\|  | \__  \  /    \  / ___\
 \___ \  |  | \/\  \___|  |__/ __ \|   |  \/ /_/  >
/____  > |__|    \___  >____(____  /___|  /\___  /
     \/              \/          \/     \//_____/
"""

USAGE = """
 COMMANDS:
   run                    Run srclang script or bytecode (source ends with .src)
   interactive            Start srclang interactive shell
   compile                Compile srclang script into bytecode (.srcc)
   new <name>             Set up a new srclang project
   test                   Run the tests of the current project
   help                   Print this help message

 FLAGS:
  -debug                  Enable debugging outputs
  -breakpoint             Enable breakpoint at instructions
  -search-path <path>     Append module search path
  -define <key>=<value>   Define variable from command line
  -o <path>               Output path for compile
  -project-path <path>    Project root for new and test
"""


def print_banner(stream: Optional[TextIO] = None):
    print(LOGO, file=stream or sys.stdout)


def print_help(stream: Optional[TextIO] = None) -> int:
    stream = stream or sys.stdout
    print_banner(stream)
    print("Source Programming Language", file=stream)
    print(USAGE, file=stream)
    return 1
