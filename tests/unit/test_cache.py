import json
from datetime import datetime, timezone

import pytest

import gitnav.cache as cache
from gitnav.errors import CacheCorruptError, CacheIoError, CacheUnavailableError
from gitnav.indexing import assign_branch_indices, assign_indices
from gitnav.models import StatusEntry, StatusKind


@pytest.fixture(autouse=True)
def temp_cache_dir(tmp_path, monkeypatch):
    cache_dir = tmp_path / "cache"
    monkeypatch.setattr(cache, "CACHE_DIR", cache_dir)
    monkeypatch.delenv(cache.CACHE_ENV, raising=False)
    return cache_dir


def _indexed():
    return assign_indices(
        [
            StatusEntry.of("a.txt", StatusKind.STAGED_NEW),
            StatusEntry.of("new.rs", StatusKind.STAGED_RENAMED, "old.rs"),
            StatusEntry.of("c.rs", StatusKind.UNSTAGED_MODIFIED),
            StatusEntry.of("d.txt", StatusKind.UNTRACKED),
        ]
    )


def test_repository_key_is_stable_across_spellings(tmp_path):
    repo = tmp_path / "repo"
    (repo / "sub").mkdir(parents=True)

    assert cache.repository_key(repo) == cache.repository_key(repo / "sub" / "..")
    assert cache.repository_key(repo) != cache.repository_key(tmp_path)
    assert len(cache.repository_key(repo)) == 40


def test_write_and_read_record(tmp_path):
    key = cache.repository_key(tmp_path)
    created = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)

    written = cache.write_record(key, "token-1", _indexed(), repo_root=tmp_path, created_at=created)
    loaded = cache.read_record(key)

    assert loaded == written
    assert loaded.entries[1].entry.original_path == "old.rs"
    assert loaded.repo_root == str(tmp_path)
    assert loaded.created_at == created
    assert cache.record_path(key).parent.name == key


def test_read_missing_record_returns_none():
    assert cache.read_record("0" * 40) is None


def test_write_replaces_previous_record(tmp_path):
    key = cache.repository_key(tmp_path)
    cache.write_record(key, "old", _indexed())
    cache.write_record(key, "new", _indexed()[:1])

    loaded = cache.read_record(key)

    assert loaded.freshness_token == "new"
    assert loaded.max_index == 1


def test_payload_is_versioned_json(tmp_path):
    key = cache.repository_key(tmp_path)
    cache.write_record(key, "tok", _indexed())

    payload = json.loads(cache.record_path(key).read_text(encoding="utf-8"))

    assert payload["version"] == cache.CACHE_VERSION
    assert payload["entries"][0] == {
        "index": 1,
        "path": "a.txt",
        "kind": "staged_new",
        "section": "staged",
    }


def test_unknown_fields_are_ignored(tmp_path):
    key = cache.repository_key(tmp_path)
    cache.write_record(key, "tok", _indexed())
    target = cache.record_path(key)
    payload = json.loads(target.read_text(encoding="utf-8"))
    payload["future_field"] = {"nested": True}
    payload["entries"][0]["colour"] = "green"
    target.write_text(json.dumps(payload), encoding="utf-8")

    loaded = cache.read_record(key)

    assert loaded.max_index == 4


@pytest.mark.parametrize(
    "mutate",
    [
        lambda payload: payload.update(version=99),
        lambda payload: payload.pop("freshness_token"),
        lambda payload: payload["entries"][0].update(kind="exploded"),
        lambda payload: payload["entries"][1].update(index=7),
        lambda payload: payload.update(entries="not-a-list"),
        lambda payload: payload.update(created_at=12),
    ],
)
def test_invalid_payloads_are_corrupt(tmp_path, mutate):
    key = cache.repository_key(tmp_path)
    cache.write_record(key, "tok", _indexed())
    target = cache.record_path(key)
    payload = json.loads(target.read_text(encoding="utf-8"))
    mutate(payload)
    target.write_text(json.dumps(payload), encoding="utf-8")

    with pytest.raises(CacheCorruptError):
        cache.read_record(key)


def test_garbage_file_is_corrupt(tmp_path):
    key = cache.repository_key(tmp_path)
    target = cache.record_path(key)
    target.parent.mkdir(parents=True)
    target.write_text("{ half a record", encoding="utf-8")

    with pytest.raises(CacheCorruptError) as excinfo:
        cache.read_record(key)
    assert excinfo.value.path == target


def test_undecodable_file_is_corrupt(tmp_path):
    key = cache.repository_key(tmp_path)
    target = cache.record_path(key)
    target.parent.mkdir(parents=True)
    target.write_bytes(b"\xff\xfe{ not utf-8")

    with pytest.raises(CacheCorruptError) as excinfo:
        cache.read_record(key)
    assert excinfo.value.path == target


def test_deeply_nested_document_is_corrupt(tmp_path):
    key = cache.repository_key(tmp_path)
    target = cache.record_path(key)
    target.parent.mkdir(parents=True)
    target.write_text("[" * 200_000 + "]" * 200_000, encoding="utf-8")

    with pytest.raises(CacheCorruptError):
        cache.read_record(key)


def test_listing_flags_undecodable_file(tmp_path):
    key = cache.repository_key(tmp_path)
    target = cache.record_path(key)
    target.parent.mkdir(parents=True)
    target.write_bytes(b"\xff\xfe\x00")

    entries = cache.list_cache_entries()

    assert [entry["corrupt"] for entry in entries] == [True]


@pytest.mark.parametrize("bad_index", ["1", 1.5, True])
def test_branch_record_with_non_integer_index_is_corrupt(tmp_path, bad_index):
    key = cache.repository_key(tmp_path)
    cache.write_branch_record(key, "btok", assign_branch_indices(["main"], "main"))
    target = cache.branch_record_path(key)
    payload = json.loads(target.read_text(encoding="utf-8"))
    payload["branches"][0]["index"] = bad_index
    target.write_text(json.dumps(payload), encoding="utf-8")

    with pytest.raises(CacheCorruptError):
        cache.read_branch_record(key)


def test_branch_record_for_another_repository_is_corrupt(tmp_path):
    key = cache.repository_key(tmp_path)
    other = cache.repository_key(tmp_path / "elsewhere")
    cache.write_branch_record(other, "btok", assign_branch_indices(["main"], "main"))
    cache.ensure_repository_cache_dir(key)
    cache.branch_record_path(other).replace(cache.branch_record_path(key))

    with pytest.raises(CacheCorruptError):
        cache.read_branch_record(key)


def test_record_for_another_repository_is_corrupt(tmp_path):
    key = cache.repository_key(tmp_path)
    other = cache.repository_key(tmp_path / "elsewhere")
    cache.write_record(other, "tok", _indexed())
    cache.ensure_repository_cache_dir(key)
    cache.record_path(other).replace(cache.record_path(key))

    with pytest.raises(CacheCorruptError):
        cache.read_record(key)


def test_failed_replace_keeps_previous_record(tmp_path, monkeypatch):
    key = cache.repository_key(tmp_path)
    cache.write_record(key, "committed", _indexed())

    def failing_replace(src, dst):
        raise OSError("disk full")

    with monkeypatch.context() as patch:
        patch.setattr(cache.os, "replace", failing_replace)
        with pytest.raises(CacheIoError):
            cache.write_record(key, "half-written", _indexed()[:2])

    loaded = cache.read_record(key)
    assert loaded.freshness_token == "committed"
    assert loaded.max_index == 4
    leftovers = [path.name for path in cache.record_path(key).parent.iterdir()]
    assert leftovers == [cache.FILES_FILENAME]


def test_interrupted_write_keeps_previous_record(tmp_path, monkeypatch):
    key = cache.repository_key(tmp_path)
    cache.write_record(key, "committed", _indexed())

    def interrupted_fsync(fd):
        raise KeyboardInterrupt

    with monkeypatch.context() as patch:
        patch.setattr(cache.os, "fsync", interrupted_fsync)
        with pytest.raises(KeyboardInterrupt):
            cache.write_record(key, "never", _indexed())

    assert cache.read_record(key).freshness_token == "committed"


def test_unwritable_cache_dir_is_unavailable(tmp_path, monkeypatch):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    monkeypatch.setattr(cache, "CACHE_DIR", blocker)

    with pytest.raises(CacheUnavailableError):
        cache.write_record(cache.repository_key(tmp_path), "tok", _indexed())


def test_clear_record(tmp_path):
    key = cache.repository_key(tmp_path)
    cache.write_record(key, "tok", _indexed())

    assert cache.clear_record(key) is True
    assert cache.read_record(key) is None
    assert cache.clear_record(key) is False
    assert not cache.repository_cache_dir(key).exists()


def test_branch_record_round_trip(tmp_path):
    key = cache.repository_key(tmp_path)
    branches = assign_branch_indices(["main", "dev"], "dev")

    cache.write_branch_record(key, "btok", branches, repo_root=tmp_path)
    loaded = cache.read_branch_record(key)

    assert loaded.branches == branches
    assert loaded.lookup(1).is_current is True
    assert cache.clear_repository(key) == 1


def test_list_and_clear_all_cache(tmp_path):
    first = tmp_path / "one"
    second = tmp_path / "two"
    cache.write_record(cache.repository_key(first), "a", _indexed(), repo_root=first)
    cache.write_branch_record(
        cache.repository_key(second),
        "b",
        assign_branch_indices(["main"], "main"),
        repo_root=second,
    )

    entries = {entry["repo_root"]: entry for entry in cache.list_cache_entries()}

    assert entries[str(first)]["file_count"] == 4
    assert entries[str(first)]["branch_count"] is None
    assert entries[str(second)]["branch_count"] == 1
    assert not any(entry["corrupt"] for entry in entries.values())
    assert cache.clear_all_cache() == 2
    assert cache.list_cache_entries() == []


def test_list_cache_entries_flags_corrupt_records(tmp_path):
    key = cache.repository_key(tmp_path)
    target = cache.record_path(key)
    target.parent.mkdir(parents=True)
    target.write_text("[]", encoding="utf-8")

    (entry,) = cache.list_cache_entries()

    assert entry["key"] == key
    assert entry["corrupt"] is True


def test_env_var_overrides_default_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(cache, "CACHE_DIR", cache.DEFAULT_CACHE_DIR)
    monkeypatch.setenv(cache.CACHE_ENV, str(tmp_path / "from-env"))

    assert cache.cache_root() == (tmp_path / "from-env").resolve()


def test_cache_dir_context_overrides(tmp_path):
    override = tmp_path / "ctx"
    with cache.cache_dir_context(override):
        assert cache.cache_root() == override.resolve()
        cache.write_record("k" * 40, "tok", _indexed())
    assert (override / ("k" * 40) / cache.FILES_FILENAME).exists()
    assert cache.cache_root() != override.resolve()


def test_set_cache_dir_rejects_files(tmp_path):
    target = tmp_path / "file"
    target.write_text("x", encoding="utf-8")
    with pytest.raises(NotADirectoryError):
        cache.set_cache_dir(target)


def test_surrogate_escaped_paths_round_trip(tmp_path):
    key = cache.repository_key(tmp_path)
    odd = b"caf\xe9.txt".decode("utf-8", "surrogateescape")
    indexed = assign_indices([StatusEntry.of(odd, StatusKind.UNTRACKED)])

    cache.write_record(key, "tok", indexed)

    assert cache.read_record(key).entries[0].entry.path == odd
