import pytest

GITHUB_DOC = b"""
/foo:
  repo: https://github.com/org/foo
"""

@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "vanity.yaml"
    path.write_bytes(GITHUB_DOC)
    return path
