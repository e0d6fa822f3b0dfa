import contextlib

import pytest

from tinyvcs.models import Repository


@pytest.fixture
def change_to_tmp_dir(tmp_path):
    with contextlib.chdir(tmp_path):
        yield tmp_path


@pytest.fixture
def repo(change_to_tmp_dir):
    return Repository.init(change_to_tmp_dir)


@pytest.fixture
def store(repo):
    return repo.store


def snapshot(root):
    """Map every file below ``root`` (outside the metadata dir) to its bytes."""
    return {
        path.relative_to(root).as_posix(): path.read_bytes()
        for path in root.rglob("*")
        if path.is_file() and ".tinyvcs" not in path.relative_to(root).parts
    }
