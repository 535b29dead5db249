import pytest


@pytest.fixture
def project(tmp_path):
    """A small tree: a.txt, b.md, sub/c.txt."""
    root = tmp_path / "project"
    (root / "sub").mkdir(parents=True)
    (root / "a.txt").write_text("alpha\n", encoding="utf-8")
    (root / "b.md").write_text("# bee\n", encoding="utf-8")
    (root / "sub" / "c.txt").write_text("gamma", encoding="utf-8")
    return root
