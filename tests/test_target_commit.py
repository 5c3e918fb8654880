import subprocess
from pathlib import Path

from blogkit.worker.build.pages import PublishCommitConfig, commit_target


def _git(cwd: Path, *args: str) -> str:
    return subprocess.check_output(["git", *args], cwd=str(cwd), text=True).strip()


def _config(**kwargs) -> PublishCommitConfig:
    return PublishCommitConfig(
        git_user_name="blog-bot", git_user_email="blog-bot@example.com", **kwargs
    )


def test_commit_target_skips_plain_directory(tmp_path):
    assert commit_target(tmp_path, _config()) is None


def test_commit_target_commits_only_on_change(tmp_path):
    target = tmp_path / "site"
    target.mkdir()
    subprocess.run(["git", "init", str(target)], check=True)
    (target / "index.html").write_text("<h1>Hello</h1>", encoding="utf-8")

    commit1 = commit_target(target, _config())
    assert commit1
    assert _git(target, "status", "--porcelain") == ""

    # Nothing changed -> HEAD stays put.
    commit2 = commit_target(target, _config())
    assert commit2 == commit1

    (target / "index.html").write_text("<h1>Hello again</h1>", encoding="utf-8")
    commit3 = commit_target(target, _config())
    assert commit3 != commit1


def test_commit_target_pushes_to_remote(tmp_path):
    remote = tmp_path / "remote.git"
    subprocess.run(["git", "init", "--bare", str(remote)], check=True)
    target = tmp_path / "site"
    subprocess.run(["git", "init", str(target)], check=True)
    _git(target, "remote", "add", "origin", str(remote))
    (target / "index.html").write_text("<h1>Hello</h1>", encoding="utf-8")

    commit = commit_target(target, _config(push=True, branch="master"))

    assert _git(remote, "rev-parse", "master") == commit


def test_safe_deploy_commits_target(site, deploy_config):
    from blogkit.worker.build import run_deploy_pipeline

    target = site.parent / "smyrgeorge.github.io"
    subprocess.run(["git", "init", str(target)], check=True)
    deploy_config.mode = "safe"
    deploy_config.commit = True
    deploy_config.git_user_name = "blog-bot"
    deploy_config.git_user_email = "blog-bot@example.com"

    result = run_deploy_pipeline(deploy_config)

    assert result.status == "published"
    assert result.stages[-1].name == "commit"
    assert result.commit == _git(target, "rev-parse", "HEAD")
    assert "posts/hello/index.html" in _git(target, "ls-files")
