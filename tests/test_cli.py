"""
Source Programming Language Tests
Task dispatch and exit codes
"""

import io
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
from unittest import mock

from srclang.cli import main


class CLITestCase(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        # keep basicConfig from binding a handler to a redirected stream
        patcher = mock.patch('srclang.cli.setup_logging')
        patcher.start()
        self.addCleanup(patcher.stop)

    def tearDown(self):
        self._tmp.cleanup()

    def invoke(self, *argv):
        stdout, stderr = io.StringIO(), io.StringIO()
        with redirect_stdout(stdout), redirect_stderr(stderr):
            code = main(list(argv))
        return code, stdout.getvalue(), stderr.getvalue()

    def write(self, name, source):
        path = self.tmp / name
        path.write_text(source, encoding='utf-8')
        return str(path)


class TestHelp(CLITestCase):

    def test_no_task_prints_help(self):
        code, out, _ = self.invoke()
        self.assertEqual(code, 1)
        self.assertIn("COMMANDS:", out)

    def test_help_task(self):
        code, out, _ = self.invoke('help')
        self.assertEqual(code, 1)
        self.assertIn("-search-path <path>", out)

    def test_unknown_task_prints_help(self):
        code, out, _ = self.invoke('frobnicate')
        self.assertEqual(code, 1)
        self.assertIn("COMMANDS:", out)


class TestFlags(CLITestCase):

    def test_invalid_flag(self):
        code, out, err = self.invoke('run', '-fast', 'main.src')
        self.assertEqual(code, 1)
        self.assertEqual(err, "ERROR: invalid flag '-fast'\n")
        self.assertEqual(out, "")

    def test_missing_flag_value(self):
        code, _, err = self.invoke('run', '-define')
        self.assertEqual(code, 1)
        self.assertEqual(err, "ERROR: expecting 1 arguments\n")


class TestRun(CLITestCase):

    def test_no_input_file(self):
        for task in ('run', 'compile'):
            with self.subTest(task=task):
                code, _, err = self.invoke(task, '-debug')
                self.assertEqual(code, 1)
                self.assertEqual(err, "No input file specified\n")

    def test_run_success(self):
        path = self.write("main.src", "print(name, __ARGS__)\n")
        code, out, _ = self.invoke('run', '-define', 'name=world', path, 'a', '-b')
        self.assertEqual(code, 0)
        self.assertEqual(out, "world ['a', '-b']\n")

    def test_run_error(self):
        path = self.write("main.src", "raise ValueError('nope')\n")
        code, _, err = self.invoke('run', path)
        self.assertEqual(code, 1)
        self.assertEqual(err, "ValueError: nope\n")

    def test_run_missing_file(self):
        code, _, err = self.invoke('run', str(self.tmp / "absent.src"))
        self.assertEqual(code, 1)
        self.assertIn("no such file", err)

    def test_run_exit_call_maps_to_one(self):
        path = self.write("main.src", "exit(7)\n")
        code, _, err = self.invoke('run', path)
        self.assertEqual(code, 1)
        self.assertEqual(err, "SystemExit: 7\n")

    def test_compile_then_run(self):
        path = self.write("main.src", "print('compiled')\n")
        output = str(self.tmp / "main.bin")
        code, _, _ = self.invoke('compile', '-o', output, path)
        self.assertEqual(code, 0)
        code, out, _ = self.invoke('run', output)
        self.assertEqual(code, 0)
        self.assertEqual(out, "compiled\n")

    def test_compile_failure_status(self):
        path = self.write("broken.src", "def (\n")
        with self.assertLogs('srclang.language', 'ERROR'):
            code, _, _ = self.invoke('compile', path)
        self.assertEqual(code, 1)

    def test_unexpected_exception(self):
        with mock.patch('srclang.cli.Language.execute', side_effect=RuntimeError("kaput")):
            code, _, err = self.invoke('run', 'main.src')
        self.assertEqual(code, 1)
        self.assertEqual(err, "ERROR: kaput\n")


class TestInteractive(CLITestCase):

    def test_interactive(self):
        with mock.patch('sys.stdin', io.StringIO("2 ** 10\n.exit\n")):
            code, out, _ = self.invoke('interactive')
        self.assertEqual(code, 0)
        self.assertIn(":: 1024\n", out)


class TestProject(CLITestCase):

    def test_new_without_name(self):
        code, _, err = self.invoke('new')
        self.assertEqual(code, 1)
        self.assertEqual(err, "ERROR: no project name specified\n")

    def test_new_and_test(self):
        code, out, _ = self.invoke('new', '-project-path', str(self.tmp), 'demo')
        self.assertEqual(code, 0)
        self.assertNotIn("COMMANDS:", out)
        self.assertTrue((self.tmp / "demo" / "src" / "main.src").is_file())

        code, out, _ = self.invoke('test', '-project-path', str(self.tmp / "demo"))
        self.assertEqual(code, 0)
        self.assertIn("[test] 1/1 passed", out)

    def test_new_existing_project(self):
        (self.tmp / "demo").mkdir()
        code, _, err = self.invoke('new', '-project-path', str(self.tmp), 'demo')
        self.assertEqual(code, 1)
        self.assertTrue(err.startswith("ERROR: "))
        self.assertIn("already exists", err)

    def test_test_failure(self):
        code, _, err = self.invoke('test', '-project-path', str(self.tmp))
        self.assertEqual(code, 1)
        self.assertIn("ERROR: tests directory not found", err)


if __name__ == '__main__':
    unittest.main()
