import os
import stat

import pytest

from csi_s3.exceptions import CredentialWriteError
from csi_s3.mounter.credentials import CredentialStore

def test_global_store_path(home_dir):
    store = CredentialStore.for_home(str(home_dir))
    assert store.path == str(home_dir / ".passwd-s3fs")
    assert not store.scoped

def test_scoped_store_path(home_dir):
    store = CredentialStore.for_home(str(home_dir), "pvc/1")
    assert store.path == str(home_dir / ".passwd-s3fs-pvc_1")
    assert store.scoped

def test_write_creates_owner_only_file(home_dir):
    store = CredentialStore.for_home(str(home_dir))
    store.write("AK:SK")
    with open(store.path) as f:
        assert f.read() == "AK:SK"
    assert stat.S_IMODE(os.stat(store.path).st_mode) == 0o600

def test_write_replaces_longer_content(home_dir):
    store = CredentialStore.for_home(str(home_dir))
    store.write("LONGACCESSKEY:LONGSECRETKEY")
    store.write("AK:SK")
    with open(store.path) as f:
        assert f.read() == "AK:SK"
    assert sorted(os.listdir(home_dir)) == [".passwd-s3fs"]

def test_write_missing_directory(tmp_path):
    store = CredentialStore.for_home(str(tmp_path / "missing"))
    with pytest.raises(CredentialWriteError) as exc_info:
        store.write("AK:SK")
    assert exc_info.value.code == "ERR_CREDENTIALS"
    assert exc_info.value.path == store.path

def test_remove_only_touches_scoped_files(home_dir):
    shared = CredentialStore.for_home(str(home_dir))
    scoped = CredentialStore.for_home(str(home_dir), "vol")
    shared.write("A:B")
    scoped.write("C:D")
    shared.remove()
    scoped.remove()
    scoped.remove()
    assert os.listdir(home_dir) == [".passwd-s3fs"]

def test_write_refuses_relative_path(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    store = CredentialStore.for_home("")
    with pytest.raises(CredentialWriteError, match="not absolute"):
        store.write("AK:SK")
    assert os.listdir(tmp_path) == []
