"""
Version resolution for vddl.

Turns the session's symbolic reference for a source into a concrete
ResolvedVersion and guards mutations against immutable targets.
"""

import logging
from typing import Optional

from ..catalog import Catalog, ResolvedVersion
from ..exceptions import NotMutableVersionError, UnresolvableVersionError
from ..session import SessionContext


logger = logging.getLogger(__name__)


class VersionResolver:
    """Resolves session version references against current catalog state."""

    def __init__(self, catalog: Catalog):
        self.catalog = catalog

    async def resolve(
        self, source: str, session: SessionContext
    ) -> Optional[ResolvedVersion]:
        """
        Resolve the session's reference for ``source``.

        Nothing is cached: every call reads the catalog as it is now, so a
        later call may return a different handle for the same name.

        Args:
            source: Source name (root of the table path)
            session: Session holding the per-source version references

        Returns:
            The resolved version, or None when the source does not version
            its tables

        Raises:
            UnresolvableVersionError: If the referenced name does not exist
        """
        if not await self.catalog.supports_versioned_tables(source):
            return None

        reference = session.get_session_version_for_source(source)
        resolved = await self.catalog.resolve_version(source, reference)
        if resolved is None:
            if reference.is_specified:
                raise UnresolvableVersionError(source, str(reference))
            default_branch = await self.catalog.get_default_branch(source)
            raise UnresolvableVersionError(source, f"branch {default_branch}")

        logger.debug(f"Resolved {reference} in {source} to {resolved}")
        return resolved

    @staticmethod
    def require_branch(
        resolved: Optional[ResolvedVersion], path_for_message: str
    ) -> None:
        """
        Reject tags and commits as mutation targets.

        Must be called before mutating operations only; reads may use any
        resolved version.

        Raises:
            NotMutableVersionError: If ``resolved`` is not a branch
        """
        if resolved is None or resolved.is_branch:
            return
        raise NotMutableVersionError(str(resolved), path_for_message)
