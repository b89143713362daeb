from outreach.config import settings
from outreach.models.profile import ProfileRecord
from outreach.services.dedup_store import (
    DedupIndex,
    HistoryStats,
    append_records,
    extend_index,
    load_dedup_index,
    read_profile_urls,
)

PATTERN = settings.dedup_file_pattern


def _records(*pairs):
    return [ProfileRecord(name=name, profile_url=url) for name, url in pairs]


def test_append_creates_file_with_header(tmp_path):
    target = tmp_path / "linkedin-results-2026-01-01.csv"

    written = append_records(target, _records(
        ("Ada Lovelace", "https://www.linkedin.com/in/ada/"),
        ("Alan Turing", "https://www.linkedin.com/in/alan/"),
    ))

    assert written == 2
    assert target.read_text(encoding="utf-8") == (
        'Name,Profile URL\n'
        '"Ada Lovelace","https://www.linkedin.com/in/ada/"\n'
        '"Alan Turing","https://www.linkedin.com/in/alan/"'
    )


def test_append_to_existing_file_prefixes_newline_and_skips_header(tmp_path):
    target = tmp_path / "linkedin-results-2026-01-01.csv"
    append_records(target, _records(("A", "https://x/in/a/")))
    append_records(target, _records(("B", "https://x/in/b/")))

    content = target.read_text(encoding="utf-8")
    assert content.count("Name,Profile URL") == 1
    assert content.endswith('"A","https://x/in/a/"\n"B","https://x/in/b/"')


def test_append_to_empty_file_writes_header(tmp_path):
    target = tmp_path / "linkedin-results-empty.csv"
    target.write_text("", encoding="utf-8")

    append_records(target, _records(("A", "https://x/in/a/")))

    assert target.read_text(encoding="utf-8").startswith("Name,Profile URL\n")


def test_append_nothing_creates_no_file(tmp_path):
    target = tmp_path / "linkedin-connect-with-email.csv"

    assert append_records(target, []) == 0
    assert not target.exists()


def test_round_trip_with_embedded_quotes(tmp_path):
    target = tmp_path / "linkedin-results-quotes.csv"
    records = _records(
        ('Robert "Bob" Smith', "https://www.linkedin.com/in/bob/"),
        ('"Quoted"', "https://www.linkedin.com/in/quoted/"),
        ("Smith, Jane", "https://www.linkedin.com/in/jane/"),
    )
    append_records(target, records)

    index, count = load_dedup_index(tmp_path, PATTERN)

    assert count == 1
    assert set(index) == {r.profile_url for r in records}
    assert 'Robert ""Bob"" Smith' in target.read_text(encoding="utf-8")


def test_load_unions_matching_files_only(tmp_path):
    append_records(tmp_path / "linkedin-results-2026-01-01.csv", _records(("A", "u1")))
    append_records(tmp_path / "linkedin-results-2026-01-02.csv", _records(("B", "u2"), ("A", "u1")))
    append_records(tmp_path / "linkedin-connect-with-email.csv", _records(("C", "u3")))
    append_records(tmp_path / "unrelated.csv", _records(("D", "u4")))

    index, count = load_dedup_index(tmp_path, PATTERN)

    assert count == 3
    assert set(index) == {"u1", "u2", "u3"}
    assert "u4" not in index


def test_load_skips_unparseable_file(tmp_path):
    append_records(tmp_path / "linkedin-results-good.csv", _records(("A", "u1")))
    (tmp_path / "linkedin-results-bad.csv").write_bytes(b"\xff\xfe\x00garbage")

    index, count = load_dedup_index(tmp_path, PATTERN)

    assert count == 2
    assert set(index) == {"u1"}


def test_load_missing_directory_returns_empty_index(tmp_path):
    index, count = load_dedup_index(tmp_path / "missing", PATTERN)

    assert count == 0
    assert len(index) == 0


def test_read_skips_header_and_blank_lines(tmp_path):
    path = tmp_path / "linkedin-results-x.csv"
    path.write_text('Name,Profile URL\n"A","u1"\n\n"B","u2"\n', encoding="utf-8")

    assert read_profile_urls(path) == ["u1", "u2"]


def test_dedup_index_membership():
    index = DedupIndex(["u1"])
    index.add("u2")
    index.add("")

    assert index.contains("u1")
    assert "u2" in index
    assert len(index) == 2


def test_default_pattern_covers_every_campaign_log(tmp_path):
    for name in (
        "linkedin-results-2026-01-01.csv",
        "linkedin-connect-with-email-2026-01-01.csv",
        "linkedin-global-results.csv",
    ):
        (tmp_path / name).write_text(f'Name,Profile URL\n"A","{name}"', encoding="utf-8")
    (tmp_path / "linkedin-pending-results.csv").write_text(
        'Name,Profile URL\n"P","pending"', encoding="utf-8"
    )

    index, count = load_dedup_index(tmp_path, PATTERN)

    assert count == 3
    assert "pending" not in index


def test_extend_index_reads_existing_files_only(tmp_path):
    good = tmp_path / "custom.csv"
    good.write_text('Name,Profile URL\n"A","u1"', encoding="utf-8")
    index = DedupIndex()

    read = extend_index(index, [good, tmp_path / "missing.csv"])

    assert read == 1
    assert "u1" in index


def test_history_stats_reloads_when_logs_change(tmp_path, monkeypatch):
    from outreach.services import dedup_store

    loads = []
    load = dedup_store.load_dedup_index

    def counting_load(directory, pattern):
        loads.append(directory)
        return load(directory, pattern)

    monkeypatch.setattr(dedup_store, "load_dedup_index", counting_load)
    log = tmp_path / "linkedin-results-a.csv"
    log.write_text('Name,Profile URL\n"A","u1"', encoding="utf-8")
    stats = HistoryStats()

    assert stats.counts(tmp_path, PATTERN) == (1, 1)
    assert stats.counts(tmp_path, PATTERN) == (1, 1)
    assert len(loads) == 1

    append_records(log, _records(("B", "u2")))

    assert stats.counts(tmp_path, PATTERN) == (2, 1)
    assert len(loads) == 2


def test_history_stats_missing_directory(tmp_path):
    assert HistoryStats().counts(tmp_path / "nope", PATTERN) == (0, 0)
