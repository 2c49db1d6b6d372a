"""
Session and per-statement execution context.

Session state is passed explicitly through the call chain instead of being
read from global storage.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .catalog import Catalog, VersionReference
from .config import VddlConfig
from .ddl.refresh import RefreshScheduler


@dataclass
class SessionContext:
    """Per-session settings: default schema and version reference per source."""

    user: str = "anonymous"
    default_schema: Optional[List[str]] = None
    _versions: Dict[str, VersionReference] = field(default_factory=dict, repr=False)

    def get_session_version_for_source(self, source: str) -> VersionReference:
        return self._versions.get(source.lower(), VersionReference.unspecified())

    def set_session_version_for_source(
        self, source: str, version: VersionReference
    ) -> None:
        if version.is_specified:
            self._versions[source.lower()] = version
        else:
            self._versions.pop(source.lower(), None)

    @property
    def source_versions(self) -> Dict[str, VersionReference]:
        return dict(self._versions)


@dataclass(frozen=True)
class QueryContext:
    """Everything a statement handler needs for one execution."""

    catalog: Catalog
    session: SessionContext
    config: VddlConfig
    refresh_scheduler: RefreshScheduler
