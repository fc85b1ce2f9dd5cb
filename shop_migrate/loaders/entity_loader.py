"""Loaders for REST entities: products, collections, pages and blogs with articles."""

import logging
from typing import Any, Callable, Dict, List, Optional

from .base import BaseLoader, LoadResult
from ..extractors.rest_extractor import RestExtractor, COLLECTION_RESOURCES, SINGULAR_KEYS
from ..models.record import ResultStatus
from ..services.cleaner import (
    COLLECTION_TYPE_FIELD,
    clean_article,
    clean_blog,
    clean_collection,
    clean_page,
    clean_product,
)
from ..services.conflict import ALREADY_EXISTS, DRY_RUN, Action
from ..services.matcher import handle_matcher

logger = logging.getLogger(__name__)


class EntityLoader(BaseLoader):
    """
    Generic loader for products, collections and pages.

    Fetches the full source collection and filters it to the requested IDs,
    fetches the full target collection (best effort), then cleans, matches,
    resolves and writes each selected item.
    """

    CLEANERS: Dict[str, Callable[[Dict[str, Any]], Dict[str, Any]]] = {
        "products": clean_product,
        "collections": clean_collection,
        "pages": clean_page,
    }

    def __init__(self, source_client, target_client, entity_kind: str, **kwargs):
        super().__init__(source_client, target_client, **kwargs)
        if entity_kind not in self.CLEANERS:
            raise ValueError(f"Unsupported entity kind: {entity_kind}")
        self.entity_kind = entity_kind
        self.source_extractor = RestExtractor(source_client)
        self.target_extractor = RestExtractor(target_client, best_effort=self.target_best_effort)

    def _resource_for(self, item: Dict[str, Any]) -> str:
        """REST resource an item is written to."""
        if self.entity_kind == "collections":
            return COLLECTION_RESOURCES.get(item.get(COLLECTION_TYPE_FIELD), "custom_collections")
        return self.entity_kind

    def load(self, item_ids: List[str]) -> LoadResult:
        result = LoadResult(entity=self.entity_kind)

        selected = self.source_extractor.select(self.source_extractor.fetch(self.entity_kind), item_ids)
        targets = self.target_extractor.fetch(self.entity_kind)
        logger.info(
            f"Migrating {len(selected)} {self.entity_kind} "
            f"({len(targets)} on target, dry_run={self.dry_run})"
        )

        for item in selected:
            title = item.get("title") or str(item.get("id"))
            try:
                existing = handle_matcher.match(item, targets)
                self.apply(
                    result,
                    item.get("id"),
                    title,
                    existing,
                    create=lambda item=item: self._create(item),
                    update=lambda target, item=item: self._update(item, target),
                )
            except Exception as e:
                result.error(item.get("id"), title, str(e))

        logger.info(f"Finished {self.entity_kind}: {result.summary.to_dict()}")
        return result

    def _payload(self, item: Dict[str, Any]) -> Dict[str, Any]:
        resource = self._resource_for(item)
        return {SINGULAR_KEYS[resource]: self.CLEANERS[self.entity_kind](item)}

    def _create(self, item: Dict[str, Any]) -> None:
        resource = self._resource_for(item)
        self.target_client.post(self.target_client.rest_path(f"{resource}.json"), self._payload(item))

    def _update(self, item: Dict[str, Any], target: Dict[str, Any]) -> None:
        resource = self._resource_for(item)
        self.target_client.put(
            self.target_client.rest_path(f"{resource}/{target['id']}.json"), self._payload(item)
        )


class BlogLoader(BaseLoader):
    """
    Loader for blogs and their articles.

    Once a blog is created or matched, its articles are always created on the
    target blog, so re-running a blog migration duplicates its articles. With
    ``match_articles`` set, articles are matched by handle within the target
    blog and follow the conflict policy instead.
    """

    entity_kind = "blogs"

    def __init__(self, source_client, target_client, match_articles: bool = False, **kwargs):
        super().__init__(source_client, target_client, **kwargs)
        self.match_articles = match_articles
        self.source_extractor = RestExtractor(source_client)
        self.target_extractor = RestExtractor(target_client, best_effort=self.target_best_effort)

    def load(self, item_ids: List[str]) -> LoadResult:
        result = LoadResult(entity=self.entity_kind)

        blogs = self.source_extractor.fetch("blogs", with_articles=False)
        selected = self.source_extractor.select(blogs, item_ids)
        targets = self.target_extractor.fetch("blogs", with_articles=False)
        logger.info(f"Migrating {len(selected)} blogs ({len(targets)} on target, dry_run={self.dry_run})")

        for blog in selected:
            title = blog.get("title") or str(blog.get("id"))
            try:
                self._load_blog(result, blog, title, handle_matcher.match(blog, targets))
            except Exception as e:
                result.error(blog.get("id"), title, str(e))

        logger.info(f"Finished blogs: {result.summary.to_dict()}")
        return result

    def _load_blog(
        self,
        result: LoadResult,
        blog: Dict[str, Any],
        title: str,
        existing: Optional[Dict[str, Any]]
    ) -> None:
        action = self.resolver.resolve(existing is not None)

        if action == Action.SIMULATE:
            result.add(blog["id"], title, self.resolver.predict(existing is not None), DRY_RUN)
            return
        if action == Action.SKIP:
            result.add(blog["id"], title, ResultStatus.SKIPPED, ALREADY_EXISTS)
            return

        if existing:
            # The blog record itself is not rewritten, only its articles are migrated
            target_blog_id = existing.get("id")
            result.add(blog["id"], title, ResultStatus.UPDATED)
        else:
            created = self.target_client.post(
                self.target_client.rest_path("blogs.json"), {"blog": clean_blog(blog)}
            )
            target_blog_id = (created.get("blog") or {}).get("id")
            result.add(blog["id"], title, ResultStatus.CREATED)

        if not target_blog_id:
            return
        try:
            self._load_articles(result, blog, target_blog_id, existing is not None)
        except Exception as e:
            result.error(blog["id"], f"{title}: articles", str(e))

    def _load_articles(
        self,
        result: LoadResult,
        blog: Dict[str, Any],
        target_blog_id: Any,
        blog_existed: bool
    ) -> None:
        articles = self.source_extractor.fetch_articles(blog["id"])
        endpoint = self.target_client.rest_path(f"blogs/{target_blog_id}/articles.json")

        target_articles: List[Dict[str, Any]] = []
        if self.match_articles and blog_existed:
            target_articles = self._fetch_target_articles(target_blog_id)

        for article in articles:
            title = f"Article: {article.get('title')}"

            def create(article=article):
                self.target_client.post(endpoint, {"article": clean_article(article)})

            if not self.match_articles:
                try:
                    create()
                    result.add(article.get("id"), title, ResultStatus.CREATED)
                except Exception as e:
                    result.error(article.get("id"), title, str(e))
                continue

            def update(target, article=article):
                self.target_client.put(
                    self.target_client.rest_path(f"blogs/{target_blog_id}/articles/{target['id']}.json"),
                    {"article": clean_article(article)},
                )

            self.apply(
                result,
                article.get("id"),
                title,
                handle_matcher.match(article, target_articles),
                create=create,
                update=update,
            )

    def _fetch_target_articles(self, target_blog_id: Any) -> List[Dict[str, Any]]:
        try:
            return self.target_extractor.fetch_articles(target_blog_id)
        except Exception as e:
            if not self.target_best_effort:
                raise
            logger.warning(f"Fetching articles of target blog {target_blog_id} failed: {e}")
            return []
