"""
File-backed deduplication of discovered profiles.

Result logs are two-column CSV files (`Name,Profile URL`). Every log in the
results directory whose name matches the naming convention contributes its
URLs to one DedupIndex. Logs are only ever appended to.
"""
import csv
import io
import logging
import re
from pathlib import Path
from typing import Iterable

from outreach.errors import LogParseError
from outreach.models.profile import ProfileRecord

logger = logging.getLogger("outreach")

CSV_HEADER = "Name,Profile URL"


class DedupIndex:
    """Set of profile URLs already recorded by an earlier run."""

    def __init__(self, urls: Iterable[str] = ()):
        self._urls = set(urls)

    def contains(self, profile_url: str) -> bool:
        return profile_url in self._urls

    def add(self, profile_url: str) -> None:
        if profile_url:
            self._urls.add(profile_url)

    def update(self, urls: Iterable[str]) -> None:
        for url in urls:
            self.add(url)

    def __contains__(self, profile_url: str) -> bool:
        return self.contains(profile_url)

    def __len__(self) -> int:
        return len(self._urls)

    def __iter__(self):
        return iter(self._urls)


def read_profile_urls(filepath: Path) -> list[str]:
    """
    Return the second column of every data row in a result log.

    Raises LogParseError if the file cannot be read or is not valid CSV.
    """
    try:
        raw = filepath.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise LogParseError(f"Could not read {filepath.name}: {e}") from e

    if not raw.strip():
        return []

    urls = []
    try:
        reader = csv.reader(io.StringIO(raw, newline=""), strict=True)
        next(reader, None)  # header
        for row in reader:
            if len(row) < 2:
                continue
            url = row[1].strip()
            if url:
                urls.append(url)
    except csv.Error as e:
        raise LogParseError(f"Malformed CSV in {filepath.name}: {e}") from e

    return urls


def matching_logs(directory: Path, filename_pattern: str) -> list[Path]:
    """Sorted result logs in `directory` whose name matches. Raises OSError."""
    pattern = re.compile(filename_pattern, re.IGNORECASE)
    return sorted(
        p for p in Path(directory).iterdir()
        if p.is_file() and pattern.match(p.name)
    )


def load_dedup_index(directory: Path, filename_pattern: str) -> tuple[DedupIndex, int]:
    """
    Union the profile URLs of every matching log in `directory`.

    Returns (index, matched_file_count). Files that fail to parse are
    skipped with a warning.
    """
    index = DedupIndex()
    directory = Path(directory)

    try:
        files = matching_logs(directory, filename_pattern)
    except OSError as e:
        logger.warning(f"Could not read directory {directory}: {e}")
        return index, 0

    for filepath in files:
        try:
            index.update(read_profile_urls(filepath))
        except LogParseError as e:
            logger.warning(f"Skipping {filepath.name}: {e}")

    if files:
        logger.info(
            f"Loaded {len(index)} known profiles from {len(files)} "
            f"existing file{'s' if len(files) > 1 else ''}"
        )
    return index, len(files)


def extend_index(index: DedupIndex, filepaths: Iterable[Path]) -> int:
    """
    Union the URLs of specific logs into `index`.

    Missing files are ignored and unparseable ones skipped with a warning.
    Returns how many files were read.
    """
    read = 0
    for filepath in filepaths:
        filepath = Path(filepath)
        if not filepath.is_file():
            continue
        try:
            index.update(read_profile_urls(filepath))
        except LogParseError as e:
            logger.warning(f"Skipping {filepath.name}: {e}")
            continue
        read += 1
    return read


def format_rows(records: Iterable[ProfileRecord]) -> str:
    """Quote every value and double internal quotes; rows joined by newlines."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for record in records:
        writer.writerow([record.name or "", record.profile_url or ""])
    return buffer.getvalue().rstrip("\n")


def append_records(filepath: Path, records: list[ProfileRecord]) -> int:
    """
    Append records to a result log. Returns the number of rows written.

    A new or empty file gets the header first. Otherwise the rows are
    prefixed with a newline so they never join the last existing row.
    """
    if not records:
        return 0

    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    has_content = filepath.exists() and filepath.stat().st_size > 0
    rows = format_rows(records)
    data = f"\n{rows}" if has_content else f"{CSV_HEADER}\n{rows}"

    with open(filepath, "a", encoding="utf-8", newline="") as f:
        f.write(data)

    logger.info(
        f"{'Appended' if has_content else 'Saved'} {len(records)} rows to {filepath}"
    )
    return len(records)


class HistoryStats:
    """
    Cached size of the result history for status polling.

    Each call only stats the matching logs. They are parsed again only when
    a log was added, removed or changed since the last call.
    """

    def __init__(self):
        self._signature = None
        self._counts = (0, 0)

    def counts(self, directory: Path, filename_pattern: str) -> tuple[int, int]:
        """Return (known_profiles, history_files)."""
        signature = self._signature_of(Path(directory), filename_pattern)
        if signature != self._signature:
            index, file_count = load_dedup_index(directory, filename_pattern)
            self._counts = (len(index), file_count)
            self._signature = signature
        return self._counts

    @staticmethod
    def _signature_of(directory: Path, filename_pattern: str) -> tuple:
        try:
            files = tuple(
                (p.name, p.stat().st_size, p.stat().st_mtime_ns)
                for p in matching_logs(directory, filename_pattern)
            )
        except OSError:
            files = None
        return str(directory.resolve()), filename_pattern, files


# Global history cache for the control API
history_stats = HistoryStats()
