import sys
from pathlib import Path
from typing import Callable, Dict

import pytest
from jinja2 import DictLoader

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'templayer'
for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))


class CountingLoader(DictLoader):
    """DictLoader that records how often each name is read."""

    def __init__(self, mapping: Dict[str, str]) -> None:
        super().__init__(mapping)
        self.reads: Dict[str, int] = {}

    def get_source(self, environment, template):
        self.reads[template] = self.reads.get(template, 0) + 1
        return super().get_source(environment, template)


@pytest.fixture
def counting_loader() -> Callable[[Dict[str, str]], CountingLoader]:
    return CountingLoader


@pytest.fixture
def write_templates(tmp_path: Path) -> Callable[[Dict[str, str]], Path]:
    """Write ``{relative_name: content}`` under tmp_path/templates and return the root."""

    def _write(files: Dict[str, str]) -> Path:
        root = tmp_path / "templates"
        for name, content in files.items():
            path = root / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        root.mkdir(parents=True, exist_ok=True)
        return root

    return _write
