import yaml
from types import MappingProxyType
from typing import Any, Dict, Mapping
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from .errors import ParseError

GITHUB = "github.com"

class RepositoryEntry(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    repo: str = Field(min_length=1)
    display: str = ""

    @field_validator("display", mode="before")
    @classmethod
    def _blank_display(cls, v: Any) -> Any:
        # `display:` with no value loads as None
        return "" if v is None else v

def github_display(repo: str) -> str:
    return f"{repo} {repo}/tree/master{{/dir}} {repo}/blob/master{{/dir}}/{{file}}#L{{line}}"

def enrich(entry: RepositoryEntry) -> RepositoryEntry:
    if entry.display or GITHUB not in entry.repo:
        return entry
    return entry.model_copy(update={"display": github_display(entry.repo)})

def _load_yaml(raw: bytes) -> Dict[Any, Any]:
    try:
        doc = yaml.safe_load(raw)
    except (yaml.YAMLError, RecursionError) as e:
        raise ParseError(f"malformed yaml: {e!s:.200}") from e
    if doc is None:
        return {}
    if not isinstance(doc, dict):
        raise ParseError(f"top level must be a mapping, got {type(doc).__name__}")
    return doc

def parse_config(raw: bytes) -> Mapping[str, RepositoryEntry]:
    """Decode a vanity document into a read-only path -> entry mapping.

    Any invalid entry fails the whole document, so a bad edit never
    replaces a good mapping with a partial one.
    """
    entries: Dict[str, RepositoryEntry] = {}
    for path, value in _load_yaml(raw).items():
        if not isinstance(path, str):
            raise ParseError(f"path {path!r} must be a string")
        try:
            entry = RepositoryEntry.model_validate(value if value is not None else {})
        except ValidationError as e:
            raise ParseError(f"invalid entry for {path}: {e}") from e
        entries[path] = enrich(entry)
    return MappingProxyType(entries)
