from __future__ import annotations

import dataclasses

GROUP_BY_CHOICES = ("user", "repo", "lang")
THEN_BY_CHOICES = ("repo", "lang", "date", "cluster")
OUTPUT_FORMATS = ("table", "csv", "html", "json")
GRANULARITIES = ("line", "file")

DEFAULT_DAY_BUCKETS = (7, 30, 180, 365)
LEGACY_AUTHOR = "Legacy"

# secondary key -> count
AggregateRow = dict[str, int]
# primary key -> secondary key -> count
AggregateTable = dict[str, AggregateRow]


@dataclasses.dataclass(frozen=True)
class AuthorshipRecord:
    repository: str
    file_path: str
    author: str
    commit_timestamp: int
    language: str
    cluster: str = ""

    def to_json(self) -> dict[str, object]:
        return {
            "repository": self.repository,
            "file_path": self.file_path,
            "author": self.author,
            "commit_timestamp": self.commit_timestamp,
            "language": self.language,
            "cluster": self.cluster,
        }

    @classmethod
    def from_json(cls, obj: dict) -> AuthorshipRecord:
        return cls(
            repository=str(obj["repository"]),
            file_path=str(obj["file_path"]),
            author=str(obj["author"]),
            commit_timestamp=int(obj["commit_timestamp"]),
            language=str(obj.get("language") or "Other"),
            cluster=str(obj.get("cluster") or ""),
        )


@dataclasses.dataclass(frozen=True)
class Cluster:
    label: tuple[str, ...]
    files: frozenset[str]
    weight: int

    @property
    def path(self) -> str:
        return "/".join(self.label) if self.label else "(root)"


@dataclasses.dataclass
class AggregateResult:
    group_by: str
    then_by: str
    table: AggregateTable
    records: int = 0
    interrupted: bool = False
    errors: list[str] = dataclasses.field(default_factory=list)

    def totals(self) -> dict[str, int]:
        return {key: sum(row.values()) for key, row in self.table.items()}

    def secondary_keys(self) -> list[str]:
        out: list[str] = []
        for row in self.table.values():
            for k in row:
                if k not in out:
                    out.append(k)
        return out


@dataclasses.dataclass(frozen=True)
class CacheConfig:
    read: bool = False
    write: bool = False
    file_name: str = ".gitstats-cache.jsonl"


@dataclasses.dataclass(frozen=True)
class ScanConfig:
    target_path: str = "."
    additional_repo_paths: tuple[str, ...] = ()
    output_format: str = "table"
    html_output_file: str = "git-stats.html"
    filename_globs: tuple[str, ...] = ()
    exclude_globs: tuple[str, ...] = ()
    group_by: str = "user"
    then_by: str = "date"
    day_buckets: tuple[int, ...] = DEFAULT_DAY_BUCKETS
    granularity: str = "line"
    history_depth: int = 0
    cluster: bool = True
    discovery_depth: int = 3
    cache: CacheConfig = CacheConfig()


@dataclasses.dataclass
class RepoScan:
    repository: str
    path: str
    files: int = 0
    files_skipped: int = 0
    records: int = 0
    clusters: list[Cluster] = dataclasses.field(default_factory=list)
    from_cache: bool = False
    errors: list[str] = dataclasses.field(default_factory=list)
