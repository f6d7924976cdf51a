"""
Elasticsearch record source using the scroll API.

Elasticsearch REST documentation:
https://www.elastic.co/guide/en/elasticsearch/reference/current/scroll-api.html
"""

import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import requests

from ..core.exceptions import FatalSetupError, TransportError
from ..core.models import Page, SearchHit
from ..core.source import RecordSource


logger = logging.getLogger(__name__)


def build_time_range_query(
    days_back: int,
    domain: Optional[str] = None,
    timestamp_field: str = "@timestamp",
    domain_field: str = "url.domain",
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Build the bool query selecting the last ``days_back`` days of records,
    optionally restricted to one domain.
    """
    now = now or datetime.now(timezone.utc)
    since = (now - timedelta(days=days_back)).replace(microsecond=0)
    
    filters: List[Dict[str, Any]] = [
        {"range": {timestamp_field: {"gte": since.isoformat()}}},
    ]
    if domain:
        filters.append({"term": {domain_field: domain}})
    
    return {"bool": {"filter": filters}}


class ElasticsearchSource(RecordSource):
    """
    Record source backed by an Elasticsearch index pattern.
    
    Uses a separate ``_count`` request for the estimate and the scroll API
    for pagination. Failed pages are not retried: the first error stops
    the source for good.
    """

    def __init__(
        self,
        url: str,
        index: str,
        query: Dict[str, Any],
        api_key: Optional[str] = None,
        page_size: int = 1000,
        scroll_keepalive: str = "5m",
        timeout: int = 60,
        verify_certs: bool = True,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the Elasticsearch source.
        
        Args:
            url: Cluster base URL (e.g. https://es.example.com:9200)
            index: Index name or pattern, may contain '*'
            query: Query DSL object placed under "query"
            api_key: Encoded API key sent as "Authorization: ApiKey ..."
            page_size: Hits per scroll page
            scroll_keepalive: How long the cluster keeps the scroll context
            timeout: Request timeout in seconds
            verify_certs: Whether to verify TLS certificates
            session: Optional preconfigured requests session
            
        Raises:
            FatalSetupError: If the URL or index is not usable
        """
        parsed = urlparse(url or "")
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise FatalSetupError(f"Error creating the client: invalid URL {url!r}")
        if not index:
            raise FatalSetupError("Error creating the client: no index configured")
        if page_size < 1:
            raise FatalSetupError(f"Error creating the client: invalid page size {page_size}")
        
        self.url = url.rstrip("/")
        self.index = index
        self.query = query
        self.page_size = page_size
        self.scroll_keepalive = scroll_keepalive
        self.timeout = timeout
        
        self.session = session or requests.Session()
        self.session.verify = verify_certs
        self.session.headers.update({"Content-Type": "application/json"})
        if api_key:
            self.session.headers["Authorization"] = f"ApiKey {api_key}"
        
        self._scroll_id: Optional[str] = None
        self._exhausted = False
        self._error: Optional[TransportError] = None
        self.pages_fetched = 0

    def count(self) -> int:
        """Estimate total matching hits with a _count request."""
        try:
            body = self._post(f"/{self.index}/_count", {"query": self.query})
            total = int(body["count"])
        except (requests.RequestException, TransportError, KeyError, TypeError, ValueError) as e:
            raise FatalSetupError(f"Error estimating total hits: {e}") from e
        
        logger.info(f"Estimated {total} matching hits in {self.index}")
        return total

    def next_page(self) -> Page:
        """Fetch the next scroll page."""
        if self._error is not None:
            raise self._error
        if self._exhausted:
            return []
        
        try:
            if self._scroll_id is None:
                body = self._post(
                    f"/{self.index}/_search",
                    {"query": self.query, "size": self.page_size, "sort": ["_doc"]},
                    params={"scroll": self.scroll_keepalive},
                )
            else:
                body = self._post(
                    "/_search/scroll",
                    {"scroll": self.scroll_keepalive, "scroll_id": self._scroll_id},
                )
            self._scroll_id = body.get("_scroll_id") or self._scroll_id
            raw_hits = body["hits"]["hits"]
        except requests.RequestException as e:
            self._error = TransportError(f"Error scrolling: {e}")
            raise self._error from e
        except TransportError as e:
            self._error = e
            raise
        except (KeyError, TypeError, AttributeError) as e:
            self._error = TransportError(f"Error scrolling: malformed response ({e})")
            raise self._error from e
        
        if not raw_hits:
            self._exhausted = True
            logger.debug("Scroll exhausted")
            return []
        
        self.pages_fetched += 1
        return [
            SearchHit(
                doc_id=str(hit.get("_id")),
                source=hit.get("_source"),
                index=hit.get("_index"),
            )
            for hit in raw_hits
        ]

    def _post(
        self,
        path: str,
        payload: Dict[str, Any],
        params: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """POST a JSON body and return the decoded response."""
        response = self.session.post(
            f"{self.url}{path}",
            params=params,
            data=json.dumps(payload),
            timeout=self.timeout,
        )
        if response.status_code >= 400:
            raise TransportError(
                f"HTTP {response.status_code} from {path}: {response.text[:500]}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"Invalid JSON from {path}: {e}",
                                 status_code=response.status_code) from e

    def close(self) -> None:
        """Clear the scroll context and close the HTTP session."""
        if self._scroll_id is not None:
            try:
                self.session.delete(
                    f"{self.url}/_search/scroll",
                    data=json.dumps({"scroll_id": self._scroll_id}),
                    timeout=self.timeout,
                )
            except requests.RequestException as e:
                logger.warning(f"Failed to clear scroll context: {e}")
            self._scroll_id = None
        self.session.close()

    def get_name(self) -> str:
        """Return the source name."""
        return "elasticsearch"
