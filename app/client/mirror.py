"""
Client-side collection mirrors.

A mirror keeps an ordered, in-memory copy of one table for a UI surface.
It is not authoritative: every mutation goes to the store first and only the
row the store returns is applied locally.

    mirror = ArticleMirror(include_unpublished=True)
    await mirror.refetch()
    article = await mirror.create({"title": "Hello", "slug": "hello"})
    await mirror.publish(article.id)

State:
    data        ordered rows (list of pydantic models)
    is_loading  True while refetch() is running
    error       last failure message, or None

Each call runs independently; two overlapping calls both write `data` and the
one that completes last wins.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar, Union
from uuid import UUID

import structlog
from pydantic import BaseModel, ValidationError

from app.client.store import CollectionStore
from app.core.errors import StoreError, StoreNotFoundError, StoreUnavailableError
from app.schemas import ArticleOut, ExperimentOut, LearningEntryOut

logger = structlog.get_logger(__name__)

T = TypeVar("T", bound=BaseModel)
Key = Union[str, UUID]


class CollectionMirror(Generic[T]):
    """Ordered local copy of one remote table."""

    table: str
    model: Type[T]
    label: str

    def __init__(self, store: Optional[CollectionStore] = None):
        self.store = store or CollectionStore(self.table)
        self.data: List[T] = []
        self.is_loading = False
        self.error: Optional[str] = None

    def list_params(self) -> Dict[str, Any]:
        """Query parameters for the select-all request."""
        return {}

    def _parse(self, row: Any) -> T:
        try:
            return self.model.model_validate(row)
        except ValidationError as e:
            raise StoreError(f"Unexpected {self.label} row from store: {e}") from e

    async def refetch(self) -> List[T]:
        """
        Replace the local copy with the store's current contents.

        An unconfigured or unreachable store is treated as "no data yet":
        the copy is emptied and no error is recorded. Any other failure is
        recorded in `error` and leaves the copy as it was.
        """
        self.is_loading = True
        try:
            rows = await self.store.select_all(**self.list_params())
            self.data = [self._parse(row) for row in rows]
            self.error = None
        except StoreUnavailableError as e:
            logger.warning("Collection store not available, using empty data", table=self.table, error=str(e))
            self.data = []
            self.error = None
        except StoreError as e:
            self.error = f"Failed to fetch {self.label}s: {e}"
            logger.error("Collection fetch failed", table=self.table, error=str(e))
        finally:
            self.is_loading = False
        return self.data

    fetch_all = refetch

    async def _mutation(self, action: str, call) -> Any:
        try:
            return await call
        except StoreError as e:
            self.error = f"Failed to {action} {self.label}: {e}"
            logger.warning("Collection mutation failed", table=self.table, action=action, error=str(e))
            raise

    def _replace(self, key: Key, item: T) -> None:
        self.data = [item if str(existing.id) == str(key) else existing for existing in self.data]

    async def create(self, values: Any) -> T:
        """Insert and put the stored row at the front of `data`."""
        item = await self._mutation("create", self._insert(values))
        self.data = [item] + self.data
        return item

    async def _insert(self, values: Any) -> T:
        return self._parse(await self.store.insert(values))

    async def update(self, key: Key, values: Any) -> T:
        """Patch one row; the stored row replaces the local one in place."""
        item = await self._mutation("update", self._patch(key, values))
        self._replace(key, item)
        return item

    async def _patch(self, key: Key, values: Any) -> T:
        return self._parse(await self.store.update(str(key), values))

    async def delete(self, key: Key) -> None:
        """Delete one row; keys not held locally leave `data` unchanged."""
        await self._mutation("delete", self.store.delete(str(key)))
        self.data = [existing for existing in self.data if str(existing.id) != str(key)]

    async def get(self, key: Key) -> Optional[T]:
        """
        Load a single row without touching `data`.

        None when the row does not exist, including keys the store rejects
        as malformed (422), since no row can have such a key.
        """
        try:
            return self._parse(await self.store.select_one(str(key)))
        except StoreNotFoundError:
            return None
        except StoreError as e:
            if e.status_code == 422:
                return None
            raise


class ArticleMirror(CollectionMirror[ArticleOut]):
    """
    Blog posts.

    include_unpublished=False is the public view (PUBLISHED only, newest
    publication first); True is the admin view (everything, newest edit first).
    """

    table = "articles"
    model = ArticleOut
    label = "article"

    def __init__(self, include_unpublished: bool = False, store: Optional[CollectionStore] = None):
        super().__init__(store)
        self.include_unpublished = include_unpublished

    def list_params(self) -> Dict[str, Any]:
        return {"include_unpublished": str(self.include_unpublished).lower()}

    async def get_by_slug(self, slug: str) -> Optional[ArticleOut]:
        return await self.get(f"slug/{slug}")

    async def publish(self, key: Key) -> ArticleOut:
        """
        Move an article to PUBLISHED.

        The store keeps an existing publish timestamp, so publishing twice
        does not move `published_at`.
        """
        return await self._transition(
            "publish",
            key,
            {"status": "PUBLISHED", "published_at": datetime.now(timezone.utc).isoformat()},
        )

    async def archive(self, key: Key) -> ArticleOut:
        return await self._transition("archive", key, {"status": "ARCHIVED"})

    async def _transition(self, action: str, key: Key, values: Dict[str, Any]) -> ArticleOut:
        item = await self._mutation(action, self._patch(key, values))
        self._replace(key, item)
        return item


class _StatusMirror(CollectionMirror[T]):
    completed_status = "COMPLETED"

    async def set_status(self, key: Key, status: str) -> T:
        """Change lifecycle state; completing also sets progress to 100."""
        values: Dict[str, Any] = {"status": status}
        if status == self.completed_status:
            values["progress"] = 100
        item = await self._mutation("update", self._patch(key, values))
        self._replace(key, item)
        return item


class ExperimentMirror(_StatusMirror[ExperimentOut]):
    table = "experiments"
    model = ExperimentOut
    label = "experiment"


class LearningEntryMirror(_StatusMirror[LearningEntryOut]):
    table = "learning-entries"
    model = LearningEntryOut
    label = "learning entry"
