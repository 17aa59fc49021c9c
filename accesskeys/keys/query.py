"""Read side of the access key lifecycle."""

from __future__ import annotations

from typing import Optional, Union

from accesskeys.keys.errors import PersistenceError, StoreError
from accesskeys.keys.models import AccessKey
from accesskeys.store.protocol import KeyStore, RetrieveQueryParams
from accesskeys.utils.logger import get_logger

logger = get_logger(__name__)


class KeyQueryService:
    def __init__(self, store: KeyStore) -> None:
        self._store = store

    async def list(
        self,
        project_id: int,
        sort_by: Optional[str] = None,
        sort_descending: bool = False,
        key: Optional[AccessKey] = None,
    ) -> Union[AccessKey, list[AccessKey]]:
        """List a project's keys, or return the single pre-resolved ``key``.

        When ``key`` is given (identifier-scoped request) it is returned
        as-is and the store is not queried. Otherwise the store's listing is
        returned: removed keys excluded, secrets masked, ordered by
        ``sort_by`` (``name`` or ``type``; anything else falls back to
        ``name``).

        Raises:
            PersistenceError: The store failed.
        """
        if key is not None:
            return key

        params = RetrieveQueryParams(sort_by=sort_by, sort_inverted=sort_descending)
        try:
            return await self._store.list(project_id, params)
        except StoreError as exc:
            logger.error("access_key_list_failed", project_id=project_id, error=str(exc))
            raise PersistenceError("Access keys could not be listed") from exc
