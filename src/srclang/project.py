"""
Source Programming Language Projects
Scaffolds new projects and runs their test scripts
"""

import io
import json
import logging
import os
import re
from contextlib import redirect_stdout
from pathlib import Path
from typing import Any, Dict, List, Union

from srclang import __version__
from srclang.errors import ProjectError
from srclang.language import Language, SOURCE_SUFFIX
from srclang.values import Error, Ok, Result

logger = logging.getLogger(__name__)

MANIFEST = 'srclang.json'
EXPECT_MARKER = '# expect:'
PROJECT_NAME = re.compile(r'^[A-Za-z_][A-Za-z0-9_.-]*$')

DEFAULT_MANIFEST = {
    "version": "0.1.0",
    "main": "src/main.src",
    "tests": "tests",
    "search_paths": ["src"],
}

MAIN_TEMPLATE = '''# {name}
def greet(who):
    return "Hello, " + who + "!"

print(greet("{name}"))
'''

TEST_TEMPLATE = '''# expect: Hello, test!
main = require("main")
print(main.greet("test"))
'''


def expectations(source: str) -> List[str]:
    """Collect '# expect: <text>' lines from a test script"""
    found = []
    for line in source.splitlines():
        if EXPECT_MARKER in line:
            found.append(line.split(EXPECT_MARKER, 1)[1].strip())
    return found


class ProjectManager:
    def __init__(self, language: Language, project_path: Union[str, os.PathLike]):
        self.language = language
        self.project_path = Path(project_path)

    def load_manifest(self) -> Dict[str, Any]:
        manifest = dict(DEFAULT_MANIFEST)
        path = self.project_path / MANIFEST
        if path.is_file():
            try:
                with open(path, 'r', encoding='utf-8') as f:
                    loaded = json.load(f)
            except json.JSONDecodeError as e:
                raise ProjectError(f"{path}: invalid manifest: {e}")
            if not isinstance(loaded, dict):
                raise ProjectError(f"{path}: invalid manifest: expected a JSON object")
            manifest.update(loaded)
            logger.debug("loaded manifest %s", path)
        if not isinstance(manifest['search_paths'], list):
            raise ProjectError(f"{path}: invalid manifest: search_paths must be a list")
        return manifest

    # ---------------------------
    # new
    # ---------------------------
    def create(self, name: str) -> Result:
        try:
            root = self._create(name)
        except ProjectError as e:
            return Error(str(e))
        except OSError as e:
            return Error(f"failed to create project '{name}': {e}")
        print(f"created project '{name}' at {root}")
        return Ok(str(root))

    def _create(self, name: str) -> Path:
        if not PROJECT_NAME.match(name):
            raise ProjectError(f"invalid project name '{name}'")
        root = self.project_path / name
        if root.exists():
            raise ProjectError(f"{root} already exists")

        manifest = dict(DEFAULT_MANIFEST, name=name)
        (root / 'src').mkdir(parents=True)
        (root / manifest['tests']).mkdir()
        with open(root / MANIFEST, 'w', encoding='utf-8') as f:
            json.dump(manifest, f, indent=2)
            f.write("\n")
        (root / manifest['main']).write_text(MAIN_TEMPLATE.format(name=name), encoding='utf-8')
        (root / manifest['tests'] / f"main_test{SOURCE_SUFFIX}").write_text(TEST_TEMPLATE, encoding='utf-8')
        logger.info("srclang %s project %s written to %s", __version__, name, root)
        return root

    # ---------------------------
    # test
    # ---------------------------
    def test(self) -> Result:
        try:
            manifest = self.load_manifest()
        except ProjectError as e:
            return Error(str(e))

        tests_dir = self.project_path / manifest['tests']
        if not tests_dir.is_dir():
            return Error(f"tests directory not found: {tests_dir}")
        scripts = sorted(tests_dir.glob(f"*{SOURCE_SUFFIX}"))
        if not scripts:
            return Error(f"no tests found in {tests_dir}")

        self.language.append_search_path(self.project_path / 'src')
        for path in manifest['search_paths']:
            if path != 'src':
                self.language.append_search_path(self.project_path / path)

        failed = 0
        for script in scripts:
            if self.run_test(script):
                print(f"[test] {script.name}: PASS")
            else:
                failed += 1
        print(f"[test] {len(scripts) - failed}/{len(scripts)} passed")

        if failed:
            return Error(f"{failed} of {len(scripts)} tests failed")
        return Ok(len(scripts))

    def run_test(self, script: Path) -> bool:
        self.language.reset_modules()
        output = io.StringIO()
        with redirect_stdout(output):
            result = self.language.execute(script)

        if isinstance(result, Error):
            print(f"[test] {script.name}: FAIL\n  {result}")
            return False

        text = output.getvalue()
        missing = [e for e in expectations(script.read_text(encoding='utf-8')) if e not in text]
        if missing:
            print(f"[test] {script.name}: FAIL\n  output:\n{text}  expects: {missing}")
            return False
        return True
