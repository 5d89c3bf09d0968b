"""
Shared fixtures for the gitai test suite.
"""

import subprocess
from typing import Any, Dict, List, Type

import pytest

from gitai.generators.base_generator import BaseGenerator


SIMPLE_MODIFICATION = """diff --git a/src/helper.ts b/src/helper.ts
index abc123..def456 100644
--- a/src/helper.ts
+++ b/src/helper.ts
@@ -10,7 +10,7 @@
 export function helper() {
-  return "old";
+  return "new";
 }"""

MULTI_FILE = """diff --git a/src/a.ts b/src/a.ts
index abc..def 100644
--- a/src/a.ts
+++ b/src/a.ts
@@ -1,3 +1,3 @@
-const a = 1;
+const a = 10;
diff --git a/src/b.ts b/src/b.ts
index abc..def 100644
--- a/src/b.ts
+++ b/src/b.ts
@@ -1,3 +1,3 @@
-const b = 2;
+const b = 20;
"""

LOCKFILE_AND_SOURCE = """diff --git a/pnpm-lock.yaml b/pnpm-lock.yaml
--- a/pnpm-lock.yaml
+++ b/pnpm-lock.yaml
@@ -1,3 +1,3 @@
-lockfile: old
+lockfile: new
diff --git a/src/app.py b/src/app.py
--- a/src/app.py
+++ b/src/app.py
@@ -1,2 +1,2 @@
-print("old")
+print("new")"""


class FakeGenerator(BaseGenerator):
    """Generator returning canned answers and remembering every prompt it was given."""

    def __init__(self, config: Dict[str, Any], responses: Dict[Type, Any] = None, error: Exception = None):
        super().__init__(config)
        self.responses = responses or {}
        self.error = error
        self.prompts: List[str] = []

    def _generate(self, prompt, schema):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.responses[schema]


@pytest.fixture
def simple_modification() -> str:
    return SIMPLE_MODIFICATION


@pytest.fixture
def multi_file_diff() -> str:
    return MULTI_FILE


@pytest.fixture
def lockfile_and_source_diff() -> str:
    return LOCKFILE_AND_SOURCE


@pytest.fixture
def fake_run(monkeypatch):
    """
    Replaces subprocess.run for the shell helper.

    Returns a recorder whose `outputs` maps a command prefix (tuple) to
    (returncode, stdout, stderr); every call is appended to `calls`.
    """

    class Recorder:
        def __init__(self):
            self.calls: List[List[str]] = []
            self.outputs: Dict[tuple, tuple] = {}

        def __call__(self, args, **kwargs):
            self.calls.append(list(args))
            for prefix, (code, stdout, stderr) in self.outputs.items():
                if tuple(args[:len(prefix)]) == prefix:
                    return subprocess.CompletedProcess(args, code, stdout, stderr)
            return subprocess.CompletedProcess(args, 0, "", "")

    recorder = Recorder()
    monkeypatch.setattr("gitai.shell.subprocess.run", recorder)
    return recorder
