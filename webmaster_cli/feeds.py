"""Typed records extracted from decoded Webmaster Tools feeds.

Each ``parse_*`` function takes the output of :func:`xml_decoder.decode` and
the name of the root element (``feed`` for lists, ``entry`` for a single
resource) and picks out the fields worth keeping.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .errors import MalformedDocument
from .xml_decoder import NodeValue, XMLNode

ETAG_ATTRIBUTES = ("gd:etag", "etag")


@dataclass(frozen=True)
class VerificationMethod:
    type: Optional[str]
    in_use: bool
    value: NodeValue


@dataclass(frozen=True)
class Website:
    etag: Optional[str]
    id: Optional[NodeValue] = None
    updated: Optional[NodeValue] = None
    url: Optional[NodeValue] = None
    verified: Optional[NodeValue] = None
    verification_methods: List[VerificationMethod] = field(default_factory=list)
    crawl_rate: Optional[NodeValue] = None
    geolocation: Optional[NodeValue] = None
    enhanced_image_search: Optional[NodeValue] = None
    preferred_domain: Optional[NodeValue] = None


@dataclass(frozen=True)
class WebsiteFeed:
    etag: Optional[str]
    id: Optional[NodeValue]
    updated: Optional[NodeValue]
    url: Optional[NodeValue]
    websites: List[Website]


@dataclass(frozen=True)
class Sitemap:
    etag: Optional[str]
    id: Optional[NodeValue] = None
    updated: Optional[NodeValue] = None
    title: Optional[NodeValue] = None
    type: Optional[NodeValue] = None
    status: Optional[NodeValue] = None
    last_downloaded: Optional[NodeValue] = None
    url_count: Optional[NodeValue] = None
    news_publication_label: Optional[NodeValue] = None
    mobile_markup_language: Optional[NodeValue] = None


@dataclass(frozen=True)
class SitemapFeed:
    etag: Optional[str]
    id: Optional[NodeValue]
    updated: Optional[NodeValue]
    sitemaps: List[Sitemap]
    sitemap_mobile: Optional[NodeValue] = None
    sitemap_news: Optional[NodeValue] = None


@dataclass(frozen=True)
class Keyword:
    value: NodeValue
    source: Optional[str]


@dataclass(frozen=True)
class KeywordFeed:
    etag: Optional[str]
    id: Optional[NodeValue]
    updated: Optional[NodeValue]
    keywords: List[Keyword]


@dataclass(frozen=True)
class CrawlIssue:
    id: Optional[NodeValue] = None
    updated: Optional[NodeValue] = None
    title: Optional[NodeValue] = None
    crawl_type: Optional[NodeValue] = None
    issue_type: Optional[NodeValue] = None
    url: Optional[NodeValue] = None
    date_detected: Optional[NodeValue] = None
    message: Optional[NodeValue] = None


@dataclass(frozen=True)
class CrawlIssueFeed:
    etag: Optional[str]
    id: Optional[NodeValue]
    updated: Optional[NodeValue]
    total_results: Optional[NodeValue]
    start_index: Optional[NodeValue]
    items_per_page: Optional[NodeValue]
    issues: List[CrawlIssue]


WEBSITE_FIELDS = {
    "id": "id",
    "updated": "updated",
    "url": "title",
    "verified": "wt:verified",
    "crawl_rate": "wt:crawl_rate",
    "geolocation": "wt:geolocation",
    "enhanced_image_search": "wt:enhanced_image_search",
    "preferred_domain": "wt:preferred_domain",
}

SITEMAP_FIELDS = {
    "id": "id",
    "updated": "updated",
    "title": "title",
    "type": "wt:sitemap_type",
    "status": "wt:sitemap_status",
    "last_downloaded": "wt:sitemap_last_downloaded",
    "url_count": "wt:sitemap_url_count",
    "news_publication_label": "wt:sitemap_news_publication_label",
    "mobile_markup_language": "wt:sitemap_mobile_markup_language",
}

CRAWL_ISSUE_FIELDS = {
    "id": "id",
    "updated": "updated",
    "title": "title",
    "crawl_type": "wt:crawl_type",
    "issue_type": "wt:issue_type",
    "url": "wt:url",
    "date_detected": "wt:date_detected",
    "message": "wt:detail",
}


def _root(document: Dict[str, XMLNode], root: str) -> XMLNode:
    node = document.get(root)
    if node is None:
        found = ", ".join(document) or "nothing"
        raise MalformedDocument(f"Expected a <{root}> element, found {found}")
    return node


def _etag(node: XMLNode) -> Optional[str]:
    for name in ETAG_ATTRIBUTES:
        if name in node.attributes:
            return node.attributes[name]
    return None


def _entries(document: Dict[str, XMLNode], root: str) -> List[XMLNode]:
    node = _root(document, root)
    if root == "entry":
        return [node]
    return node.child_list("entry")


def _pick(node: XMLNode, fields: Dict[str, str]) -> Dict[str, NodeValue]:
    return {key: node.child(name).value for key, name in fields.items() if node.child(name) is not None}


def _verification_method(node: XMLNode) -> VerificationMethod:
    return VerificationMethod(
        type=node.attribute("type"),
        in_use=node.attribute("in_use") == "true",
        value=node.value,
    )


def parse_website(node: XMLNode) -> Website:
    return Website(
        etag=_etag(node),
        verification_methods=[
            _verification_method(method) for method in node.child_list("wt:verification_method")
        ],
        **_pick(node, WEBSITE_FIELDS),
    )


def parse_websites(document: Dict[str, XMLNode], root: str = "feed") -> WebsiteFeed:
    node = _root(document, root)
    return WebsiteFeed(
        etag=_etag(node),
        id=node.child_value("id"),
        updated=node.child_value("updated"),
        url=node.child_value("title"),
        websites=[parse_website(entry) for entry in _entries(document, root)],
    )


def _section_value(node: Optional[XMLNode], inner: str) -> Optional[NodeValue]:
    # these sections wrap their value in a single nested element
    if node is None:
        return None
    if node.child(inner) is not None:
        return node.child_value(inner)
    return node.value


def parse_sitemap(node: XMLNode) -> Sitemap:
    return Sitemap(etag=_etag(node), **_pick(node, SITEMAP_FIELDS))


def parse_sitemaps(document: Dict[str, XMLNode], root: str = "feed") -> SitemapFeed:
    node = _root(document, root)
    return SitemapFeed(
        etag=_etag(node),
        id=node.child_value("id"),
        updated=node.child_value("updated"),
        sitemaps=[parse_sitemap(entry) for entry in _entries(document, root)],
        sitemap_mobile=_section_value(node.child("wt:sitemap_mobile"), "wt:markup_language"),
        sitemap_news=_section_value(node.child("wt:sitemap_news"), "wt:publication_label"),
    )


def parse_keywords(document: Dict[str, XMLNode]) -> KeywordFeed:
    node = _root(document, "feed")
    return KeywordFeed(
        etag=_etag(node),
        id=node.child_value("id"),
        updated=node.child_value("updated"),
        keywords=[
            Keyword(value=keyword.value, source=keyword.attribute("source"))
            for keyword in node.child_list("wt:keyword")
        ],
    )


def parse_crawl_issues(document: Dict[str, XMLNode]) -> CrawlIssueFeed:
    node = _root(document, "feed")
    return CrawlIssueFeed(
        etag=_etag(node),
        id=node.child_value("id"),
        updated=node.child_value("updated"),
        total_results=node.child_value("open_search:total_results"),
        start_index=node.child_value("open_search:start_index"),
        items_per_page=node.child_value("open_search:items_per_page"),
        issues=[CrawlIssue(**_pick(entry, CRAWL_ISSUE_FIELDS)) for entry in node.child_list("entry")],
    )
