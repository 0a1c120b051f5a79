"""Client for the Google Webmaster Tools GData feeds.

All methods raise :class:`~webmaster_cli.errors.APIError` when Google answers
with an unexpected status code; the error carries the complete response.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
from urllib.parse import quote_plus

from .consumer import OAuthConsumer
from .errors import APIError
from .feeds import (
    CrawlIssueFeed,
    KeywordFeed,
    Sitemap,
    SitemapFeed,
    Website,
    WebsiteFeed,
    parse_crawl_issues,
    parse_keywords,
    parse_sitemaps,
    parse_websites,
)
from .http_response import RawResponse, default_headers, parse_response
from .templates import render_body
from .transport import TransportOption
from .xml_decoder import decode

logger = logging.getLogger(__name__)

API_URL = "https://www.google.com/webmasters/tools/feeds/"
SCOPE = API_URL

VERIFICATION_METHODS = ("metatag", "htmlpage")
WEBSITE_OPTIONS = ("geolocation", "crawl-rate", "preferred-domain")
SITEMAP_TYPES = ("web", "video", "code", "mobile", "news")


class WebmasterTools:
    def __init__(
        self,
        consumer: OAuthConsumer,
        api_url: str = API_URL,
        template_dir: Optional[Path] = None,
    ) -> None:
        self.consumer = consumer
        self.api_url = api_url if api_url.endswith("/") else api_url + "/"
        self.template_dir = template_dir

    def set_tokens(self, oauth_token: str, oauth_token_secret: str) -> None:
        self.consumer.set_tokens(oauth_token, oauth_token_secret)

    def _send(
        self,
        url: str,
        method: str = "GET",
        body: Optional[str] = None,
        headers: Optional[List[str]] = None,
    ) -> RawResponse:
        self.consumer.reset()

        options: Dict[Any, Any] = {
            TransportOption.INCLUDE_HEADERS: True,
            "headers": headers if headers is not None else default_headers(len(body.encode("utf-8")) if body else None),
        }
        if body is not None:
            options[TransportOption.BODY] = body.encode("utf-8")

        response = parse_response(self.consumer.request(url, method, None, options))
        logger.info("%s %s -> %s", method, url, response.status_code)
        return response

    def _expect(self, response: RawResponse, status: int, message: str) -> None:
        if response.status_code != status:
            logger.warning("%s (HTTP %s)", message, response.status_code)
            raise APIError(message, response)

    def _render(self, template_name: str, **context: object) -> str:
        return render_body(template_name, template_dir=self.template_dir, **context)

    def get_websites(
        self, website: Optional[str] = None, etag: Optional[str] = None
    ) -> Union[WebsiteFeed, Website]:
        """List every website, or fetch one when ``website`` is given.

        With ``etag`` the request is conditional; Google answers 304 when
        nothing changed, which is raised as an :class:`APIError` with code 304.
        """
        headers = default_headers()
        if etag:
            headers.append(f"If-None-Match: {etag}")

        url = self.api_url + "sites/"
        root = "feed"
        if website:
            url += quote_plus(website)
            root = "entry"

        response = self._send(url, "GET", headers=headers)
        self._expect(response, 200, "The list of websites could not be retrieved.")

        feed = parse_websites(decode(response.body), root)
        if root == "entry":
            return feed.websites[0]
        return feed

    def add_website(self, website_url: str) -> Website:
        body = self._render("add_website", website=website_url)
        response = self._send(self.api_url + "sites/", "POST", body)
        self._expect(response, 201, f"The website {website_url} could not be added.")
        return parse_websites(decode(response.body), "entry").websites[0]

    def delete_website(self, website: str) -> bool:
        url = self.api_url + "sites/" + quote_plus(website)
        response = self._send(url, "DELETE", headers=default_headers())
        self._expect(response, 200, f"The website {website} could not be removed.")
        return True

    def verify_website(self, website: str, verification_method: str) -> bool:
        """Ask Google to verify ``website`` with ``metatag`` or ``htmlpage``."""
        if verification_method not in VERIFICATION_METHODS:
            raise ValueError(f"The verification method {verification_method} is unknown.")

        body = self._render("verify_website", website_id=website, verification_method=verification_method)
        url = self.api_url + "sites/" + quote_plus(website)
        response = self._send(url, "PUT", body)
        self._expect(response, 200, f"The website {website} could not be verified.")

        entry = decode(response.body).get("entry")
        verified = entry.child_value("wt:verified") if entry is not None else None
        return verified is True

    def update_website(self, website: str, option: str, value: str) -> Website:
        """Change one setting of ``website``; option names may use underscores."""
        option = option.replace("_", "-")
        if option not in WEBSITE_OPTIONS:
            raise ValueError(f"The option {option} isn't recognized.")

        body = self._render("update_website", website_id=website, option_key=option, option_value=value)
        url = self.api_url + "sites/" + quote_plus(website)
        response = self._send(url, "PUT", body)
        self._expect(response, 200, f"The settings for the website {website} could not be updated.")
        return parse_websites(decode(response.body), "entry").websites[0]

    def get_keywords(self, website: str) -> KeywordFeed:
        url = self.api_url + quote_plus(website) + "/keywords/"
        response = self._send(url)
        self._expect(response, 200, f"The keywords for the website {website} could not be retrieved.")
        return parse_keywords(decode(response.body))

    def get_sitemaps(self, website: str, sitemap: Optional[str] = None) -> Union[SitemapFeed, Sitemap]:
        url = self.api_url + quote_plus(website) + "/sitemaps/"
        root = "feed"
        if sitemap:
            url += quote_plus(sitemap)
            root = "entry"

        response = self._send(url)
        self._expect(response, 200, f"The sitemaps for the website {website} could not be retrieved.")

        feed = parse_sitemaps(decode(response.body), root)
        if root == "entry":
            return feed.sitemaps[0]
        return feed

    def add_sitemap(self, website: str, sitemap: str, sitemap_type: str = "web") -> Sitemap:
        if sitemap_type.lower() not in SITEMAP_TYPES:
            raise ValueError(f"The sitemap type {sitemap_type} is unknown.")

        body = self._render("add_sitemap", sitemap=sitemap, sitemap_type=sitemap_type.upper())
        url = self.api_url + quote_plus(website) + "/sitemaps/"
        response = self._send(url, "POST", body)
        self._expect(response, 201, f"The sitemap {sitemap} could not be added.")
        return parse_sitemaps(decode(response.body), "entry").sitemaps[0]

    def delete_sitemap(self, website: str, sitemap: str) -> bool:
        url = self.api_url + quote_plus(website) + "/sitemaps/" + quote_plus(sitemap)
        response = self._send(url, "DELETE")
        self._expect(response, 200, f"The sitemap {sitemap} could not be removed from the website {website}.")
        return True

    def get_crawl_issues(self, website: str) -> CrawlIssueFeed:
        url = self.api_url + quote_plus(website) + "/crawlissues/"
        response = self._send(url)
        self._expect(response, 200, f"The crawl issues feed for {website} could not be retrieved.")
        return parse_crawl_issues(decode(response.body))
