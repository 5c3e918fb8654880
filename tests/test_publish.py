from pathlib import Path

import pytest

from blogkit.core.tree import count_files, snapshot
from blogkit.worker.build.errors import PublishError
from blogkit.worker.build.publish import (
    clear_directory,
    copy_tree_contents,
    swap_into_place,
)


def _seed_checkout(target):
    (target / ".git").mkdir(parents=True)
    (target / ".git" / "HEAD").write_text("ref: refs/heads/master\n")
    (target / "old.html").write_text("old")
    (target / "posts").mkdir()
    (target / "posts" / "index.html").write_text("stale")
    (target / "CNAME").write_text("blog.example.com\n")


def test_clear_directory_keeps_dotfiles_like_shell_glob(tmp_path):
    target = tmp_path / "site"
    _seed_checkout(target)

    removed = clear_directory(target)

    assert removed == 3
    assert sorted(p.name for p in target.iterdir()) == [".git"]


def test_clear_directory_missing_path_is_noop(tmp_path):
    assert clear_directory(tmp_path / "missing") == 0


def test_copy_tree_contents_skips_hidden_entries(tmp_path):
    src = tmp_path / "public"
    (src / "posts" / "hello").mkdir(parents=True)
    (src / "index.html").write_text("home")
    (src / "posts" / "hello" / "index.html").write_text("hello")
    (src / ".hidden").write_text("x")
    dst = tmp_path / "out"

    copied = copy_tree_contents(src, dst)

    assert copied == 2
    assert snapshot(dst) == snapshot(src, include_hidden=False)


def test_copy_tree_contents_missing_source(tmp_path):
    assert copy_tree_contents(tmp_path / "public", tmp_path / "out") == 0
    assert not (tmp_path / "out").exists()


def test_swap_into_place_replaces_content_and_keeps_git(tmp_path):
    rendered = tmp_path / "render"
    (rendered / "posts" / "hello").mkdir(parents=True)
    (rendered / "index.html").write_text("home")
    (rendered / "posts" / "hello" / "index.html").write_text("Hello")
    target = tmp_path / "site"
    _seed_checkout(target)

    published = swap_into_place(rendered, target, preserve=("CNAME",))

    assert published == 2
    assert not (target / "old.html").exists()
    assert (target / "posts" / "hello" / "index.html").read_text() == "Hello"
    assert (target / ".git" / "HEAD").exists()
    assert (target / "CNAME").read_text() == "blog.example.com\n"
    assert not (tmp_path / ".site.staging").exists()
    assert not (tmp_path / ".site.previous").exists()
    # rendered output itself is left alone
    assert count_files(rendered) == 2


def test_swap_into_place_prefers_rendered_cname(tmp_path):
    rendered = tmp_path / "render"
    rendered.mkdir()
    (rendered / "CNAME").write_text("new.example.com\n")
    target = tmp_path / "site"
    _seed_checkout(target)

    swap_into_place(rendered, target, preserve=("CNAME",))

    assert (target / "CNAME").read_text() == "new.example.com\n"


def test_swap_into_place_creates_missing_target(tmp_path):
    rendered = tmp_path / "render"
    rendered.mkdir()
    (rendered / "index.html").write_text("home")

    swap_into_place(rendered, tmp_path / "site")

    assert (tmp_path / "site" / "index.html").read_text() == "home"


def test_swap_into_place_requires_rendered_dir(tmp_path):
    target = tmp_path / "site"
    _seed_checkout(target)

    with pytest.raises(PublishError):
        swap_into_place(tmp_path / "missing", target)

    assert (target / "old.html").exists()


def test_swap_into_place_restores_target_when_rename_fails(tmp_path, monkeypatch):
    rendered = tmp_path / "render"
    rendered.mkdir()
    (rendered / "index.html").write_text("new")
    target = tmp_path / "site"
    _seed_checkout(target)
    before = snapshot(target)

    real_rename = Path.rename

    def failing_rename(self, dest):
        if self.name == ".site.staging":
            raise OSError("No space left on device")
        return real_rename(self, dest)

    monkeypatch.setattr(Path, "rename", failing_rename)

    with pytest.raises(PublishError, match="Could not swap"):
        swap_into_place(rendered, target, preserve=("CNAME",))

    assert snapshot(target) == before
    assert (target / ".git" / "HEAD").exists()
    assert (target / "CNAME").read_text() == "blog.example.com\n"
    assert not (tmp_path / ".site.staging").exists()
    assert not (tmp_path / ".site.previous").exists()
