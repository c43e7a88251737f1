from pathlib import Path

from streamlit.testing.v1 import AppTest

from prep_bank.progress import MemoryStorage, ProgressStore, StorageError

ROOT = Path(__file__).resolve().parent.parent


class ReadOnlyStorage(MemoryStorage):
    def write(self, key, blob):
        raise StorageError("read-only file system")


def run_app(monkeypatch, store):
    monkeypatch.chdir(ROOT)
    at = AppTest.from_file(str(ROOT / "app.py"), default_timeout=30)
    at.session_state["progress_store"] = store
    return at.run()


def test_app_renders_sample_documents(monkeypatch):
    at = run_app(monkeypatch, ProgressStore(MemoryStorage()))

    assert not at.exception
    assert not at.error


def test_failed_progress_write_is_reported(monkeypatch):
    at = run_app(monkeypatch, ProgressStore(ReadOnlyStorage()))

    # sidebar "reset progress" is a write
    at.sidebar.button[0].click().run()

    assert not at.exception
    assert len(at.error) == 1
    assert at.error[0].value.startswith("Could not save progress")
