import os
import stat
import sys
import tempfile
from pathlib import Path

os.environ.setdefault("PYTEST_DISABLE_PLUGIN_AUTOLOAD", "1")
_DB_DIR = tempfile.mkdtemp(prefix="blogkit-test-db-")
os.environ["BLOG_DB_PATH"] = f"sqlite:///{_DB_DIR}/test.db"

import pytest  # noqa: E402

# Ensure project root is importable
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from blogkit.db import Base, engine  # noqa: E402

# Stand-in for the hugo binary: renders content/**/*.md into
# <dest>/posts/<slug>/index.html plus a home page.
FAKE_HUGO = '''#!{python}
import os
import re
import sys
from pathlib import Path

args = sys.argv[1:]
src = Path(args[args.index("-s") + 1])
dest = Path(args[args.index("-d") + 1])
behaviour = os.environ.get("FAKE_HUGO_MODE", "")

if behaviour == "fail":
    print("Error: error building site: failed to render pages", file=sys.stderr)
    sys.exit(1)

dest.mkdir(parents=True, exist_ok=True)
if behaviour == "empty":
    sys.exit(0)

titles = []
for md in sorted((src / "content").rglob("*.md")):
    text = md.read_text(encoding="utf-8")
    match = re.search(r'^title:\\s*"?([^"\\n]*)"?\\s*$', text, re.M)
    title = match.group(1) if match else md.stem
    page = dest / "posts" / md.stem / "index.html"
    page.parent.mkdir(parents=True, exist_ok=True)
    page.write_text(
        "<html><head><title>%s</title></head><body><h1>%s</h1></body></html>"
        % (title, title),
        encoding="utf-8",
    )
    titles.append(title)

(dest / "index.html").write_text(
    "<html><body>%s</body></html>" % "".join("<li>%s</li>" % t for t in titles),
    encoding="utf-8",
)
if behaviour == "partial":
    print("Error: template failed after writing the home page", file=sys.stderr)
    sys.exit(1)
print("Pages | %d" % len(titles))
'''


@pytest.fixture(autouse=True)
def clean_ledger():
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    yield


@pytest.fixture
def fake_hugo(tmp_path) -> str:
    path = tmp_path / "bin" / "hugo"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(FAKE_HUGO.replace("{python}", sys.executable), encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(path)


def _write_article(path: Path, front_matter: str, body: str = "Body text.\n") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"---\n{front_matter.strip()}\n---\n\n{body}", encoding="utf-8")
    return path


@pytest.fixture
def site(tmp_path) -> Path:
    """A blog checkout with one article and an empty sibling publishing checkout."""
    root = tmp_path / "blog"
    (root / "content" / "posts").mkdir(parents=True)
    (root / "hugo.toml").write_text('title = "blog"\n', encoding="utf-8")
    _write_article(
        root / "content" / "posts" / "hello.md",
        'title: "Hello"\ndate: "2024-01-01"',
    )
    (tmp_path / "smyrgeorge.github.io").mkdir()
    return root


@pytest.fixture
def deploy_config(site, fake_hugo):
    from blogkit.worker.build import DeployConfig

    return DeployConfig(
        site_root=str(site),
        publish_target="../smyrgeorge.github.io",
        hugo_bin=fake_hugo,
        verbose=True,
        mode="legacy",
    )
