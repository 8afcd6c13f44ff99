"""
Article store.

The whole collection is the unit of persistence: every call loads the full
document from the backend, and every mutation saves it back in full.
Mutations in this process run under one lock so concurrent requests cannot
drop each other's writes.
"""
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .clock import iso_utc, next_timestamp_ms, parse_iso

logger = logging.getLogger(__name__)

_write_lock = threading.Lock()

# Unparsable dates sort after every real one
_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


class ArticleValidationError(ValueError):
    pass


def _sort_key(article: Dict[str, Any]) -> datetime:
    return parse_iso(article.get("date")) or _OLDEST


def _id_of(article) -> Optional[str]:
    # Hand-edited documents may hold numeric ids or non-object entries
    if not isinstance(article, dict) or article.get("id") is None:
        return None
    return str(article["id"])


class ArticleStore:
    def __init__(self, backend):
        self.backend = backend

    def list(self) -> List[Dict[str, Any]]:
        """All articles as stored, newest first; equal dates keep their stored order."""
        articles = [a for a in self.backend.load() if isinstance(a, dict)]
        return sorted(articles, key=_sort_key, reverse=True)

    def create(self, title: Optional[str], text: Optional[str], image: Optional[str] = None) -> Dict[str, Any]:
        if not title or not text:
            raise ArticleValidationError("Title and text are required")

        with _write_lock:
            articles = self.backend.load()
            taken = {_id_of(a) for a in articles}
            ts = next_timestamp_ms()
            while str(ts) in taken:
                ts = next_timestamp_ms()
            article = {
                "id": str(ts),
                "title": title,
                "text": text,
                "image": image,
                "date": iso_utc(ts),
            }
            articles.append(article)
            self.backend.save(articles)
        return article

    def delete(self, article_id: str) -> bool:
        """Remove the article with this id. Returns False when there is none."""
        with _write_lock:
            articles = self.backend.load()
            remaining = [a for a in articles if _id_of(a) != article_id]
            if len(remaining) == len(articles):
                return False
            self.backend.save(remaining)
        return True
