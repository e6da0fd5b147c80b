"""Test utilities and helpers."""

import shutil
import sys
import tempfile
from pathlib import Path

import pytest

# Add project root to Python path so we can import cli, config, etc.
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from config import Config  # noqa: E402
from core.inventory import MarkdownDocument  # noqa: E402
from core.tasks import FileTask  # noqa: E402


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests."""
    temp = Path(tempfile.mkdtemp())
    yield temp
    shutil.rmtree(temp)


@pytest.fixture
def quiet_config():
    """Default config with progress bars disabled."""
    config = Config()
    config.notices.progress_bar = False
    return config


@pytest.fixture
def vault(tmp_path):
    """Create a small vault with notes, a hidden folder and a non-Markdown file."""
    root = tmp_path / "vault"
    (root / "posts").mkdir(parents=True)
    (root / ".obsidian").mkdir()

    (root / "posts" / "hello-world.md").write_text(
        "---\ntitle: Hello World\ndate: 2020-01-01\n---\n# Hello\n", encoding="utf-8"
    )
    (root / "posts" / "second-post.md").write_text(
        "---\ntitle: Second\ndate: 2021-06-01\n---\nBody\n", encoding="utf-8"
    )
    (root / "no-front-matter.md").write_text("Just text\n", encoding="utf-8")
    (root / ".obsidian" / "workspace.md").write_text("ignored\n", encoding="utf-8")
    (root / "image.png").write_bytes(b"\x89PNG")

    return root


def _make_task(name: str, created_at: float, assigned=None, existing=None) -> FileTask:
    doc = MarkdownDocument(file_path=Path(f"/vault/{name}.md"), name=name, created_at=created_at)
    return FileTask(
        document=doc,
        existing_abbrlink=existing,
        assigned_abbrlink=assigned,
        created_at=created_at,
    )


@pytest.fixture
def make_task():
    """Factory for tasks backed by in-memory documents."""
    return _make_task
