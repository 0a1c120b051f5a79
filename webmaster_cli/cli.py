"""Command-line entrypoint for the Webmaster Tools client."""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import Any, List

from .config import (
    Settings,
    ensure_required_credentials,
    ensure_runtime_directories,
    load_settings,
)
from .consumer import OAuthConsumer
from .db import get_session, init_db, latest_access_token, save_access_token
from .oauth_flow import Authorizer, DatabaseSessionStore
from .templates import builtin_template_dir, list_templates, validate_template
from .transport import TransportOption
from .webmaster import SCOPE, WebmasterTools

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def _print_json(payload: Any) -> None:
    if dataclasses.is_dataclass(payload):
        payload = dataclasses.asdict(payload)
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def _build_consumer(settings: Settings) -> OAuthConsumer:
    ensure_required_credentials(settings)
    return OAuthConsumer(
        settings.consumer_key,
        settings.consumer_secret,
        transport_config={
            "verify_ssl": settings.verify_ssl,
            TransportOption.TIMEOUT: settings.timeout,
        },
    )


def _prepare(settings: Settings) -> None:
    _configure_logging(settings.log_level)
    ensure_runtime_directories(settings)
    init_db(settings.db_url)


def _build_client(settings: Settings) -> WebmasterTools:
    consumer = _build_consumer(settings)
    token, secret = settings.oauth_token, settings.oauth_token_secret

    if not (token and secret):
        with get_session(settings.db_url) as db:
            stored = latest_access_token(db, settings.consumer_key)
        if not stored:
            raise RuntimeError("No access token configured; run 'webmaster auth request' first.")
        token, secret = stored.token, stored.token_secret

    client = WebmasterTools(consumer, api_url=settings.api_url, template_dir=settings.template_dir)
    client.set_tokens(token, secret)
    return client


def cmd_init() -> int:
    settings = load_settings()
    _prepare(settings)

    print("Initialized webmaster tools client")
    print(f"DB: {settings.db_url}")
    print(f"API: {settings.api_url}")
    return 0


def cmd_auth_request(scope: str, callback: str) -> int:
    settings = load_settings()
    _prepare(settings)
    consumer = _build_consumer(settings)

    with get_session(settings.db_url) as db:
        authorizer = Authorizer(consumer, DatabaseSessionStore(db, namespace=settings.consumer_key))
        url = authorizer.authorize_user(scope, callback)

    print("Open the following URL to authorize access:")
    print(url)
    return 0


def cmd_auth_access(token: str, verifier: str, scope: str) -> int:
    settings = load_settings()
    _prepare(settings)
    consumer = _build_consumer(settings)

    with get_session(settings.db_url) as db:
        authorizer = Authorizer(consumer, DatabaseSessionStore(db, namespace=settings.consumer_key))
        tokens = authorizer.get_access_token(token, verifier)
        record = save_access_token(
            db,
            consumer_key=settings.consumer_key,
            token=tokens["oauth_token"],
            token_secret=tokens["oauth_token_secret"],
            scope=scope,
        )
        record_id = record.id

    print(f"Stored access token id={record_id}")
    return 0


def cmd_sites(args: argparse.Namespace) -> int:
    settings = load_settings()
    _prepare(settings)
    client = _build_client(settings)

    if args.sites_command == "list":
        _print_json(client.get_websites(etag=args.etag))
    elif args.sites_command == "show":
        _print_json(client.get_websites(args.url, etag=args.etag))
    elif args.sites_command == "add":
        _print_json(client.add_website(args.url))
    elif args.sites_command == "delete":
        client.delete_website(args.url)
        print(f"Removed website {args.url}")
    elif args.sites_command == "verify":
        verified = client.verify_website(args.url, args.method)
        print(f"Verified: {'yes' if verified else 'no'}")
    elif args.sites_command == "update":
        _print_json(client.update_website(args.url, args.option, args.value))
    return 0


def cmd_sitemaps(args: argparse.Namespace) -> int:
    settings = load_settings()
    _prepare(settings)
    client = _build_client(settings)

    if args.sitemaps_command == "list":
        _print_json(client.get_sitemaps(args.site, args.sitemap))
    elif args.sitemaps_command == "add":
        _print_json(client.add_sitemap(args.site, args.sitemap, args.type))
    elif args.sitemaps_command == "delete":
        client.delete_sitemap(args.site, args.sitemap)
        print(f"Removed sitemap {args.sitemap}")
    return 0


def cmd_keywords(site: str) -> int:
    settings = load_settings()
    _prepare(settings)
    _print_json(_build_client(settings).get_keywords(site))
    return 0


def cmd_crawl_issues(site: str) -> int:
    settings = load_settings()
    _prepare(settings)
    _print_json(_build_client(settings).get_crawl_issues(site))
    return 0


def cmd_templates_list() -> int:
    settings = load_settings()
    _configure_logging(settings.log_level)

    directories = [settings.template_dir] if settings.template_dir else []
    directories.append(builtin_template_dir())
    for directory in directories:
        for tmpl in list_templates(directory):
            print(f"{tmpl.name}\t{tmpl.path}")
    return 0


def cmd_templates_validate(template_path: Path) -> int:
    settings = load_settings()
    _configure_logging(settings.log_level)

    validate_template(template_path)
    print(f"Template valid: {template_path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="webmaster", description="Google Webmaster Tools client")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init", help="Initialize the token database")

    auth = sub.add_parser("auth", help="OAuth authorization")
    auth_sub = auth.add_subparsers(dest="auth_command", required=True)
    request_parser = auth_sub.add_parser("request", help="Get a request token and print the authorize URL")
    request_parser.add_argument("--scope", default=SCOPE, help="Scope of the token")
    request_parser.add_argument("--callback", required=True, help="URL Google redirects to after authorization")
    access_parser = auth_sub.add_parser("access", help="Exchange an authorized request token for an access token")
    access_parser.add_argument("--token", required=True, help="oauth_token from the callback query string")
    access_parser.add_argument("--verifier", required=True, help="oauth_verifier from the callback query string")
    access_parser.add_argument("--scope", default=SCOPE, help="Scope the token was requested for")

    sites = sub.add_parser("sites", help="Website operations")
    sites_sub = sites.add_subparsers(dest="sites_command", required=True)
    sites_list = sites_sub.add_parser("list", help="List websites")
    sites_list.add_argument("--etag", required=False, help="Only fetch when changed since this etag")
    sites_show = sites_sub.add_parser("show", help="Show a single website")
    sites_show.add_argument("--url", required=True, help="Website URL")
    sites_show.add_argument("--etag", required=False, help="Only fetch when changed since this etag")
    sites_add = sites_sub.add_parser("add", help="Add a website")
    sites_add.add_argument("--url", required=True, help="Website URL")
    sites_delete = sites_sub.add_parser("delete", help="Remove a website")
    sites_delete.add_argument("--url", required=True, help="Website URL")
    sites_verify = sites_sub.add_parser("verify", help="Verify a website")
    sites_verify.add_argument("--url", required=True, help="Website URL")
    sites_verify.add_argument("--method", required=True, choices=["metatag", "htmlpage"], help="Verification method")
    sites_update = sites_sub.add_parser("update", help="Update a website setting")
    sites_update.add_argument("--url", required=True, help="Website URL")
    sites_update.add_argument(
        "--option", required=True, choices=["geolocation", "crawl-rate", "preferred-domain"], help="Setting name"
    )
    sites_update.add_argument("--value", required=True, help="New value")

    sitemaps = sub.add_parser("sitemaps", help="Sitemap operations")
    sitemaps_sub = sitemaps.add_subparsers(dest="sitemaps_command", required=True)
    sitemaps_list = sitemaps_sub.add_parser("list", help="List sitemaps of a website")
    sitemaps_list.add_argument("--site", required=True, help="Website URL")
    sitemaps_list.add_argument("--sitemap", required=False, help="Exact URL of a single sitemap")
    sitemaps_add = sitemaps_sub.add_parser("add", help="Add a sitemap")
    sitemaps_add.add_argument("--site", required=True, help="Website URL")
    sitemaps_add.add_argument("--sitemap", required=True, help="Sitemap URL")
    sitemaps_add.add_argument("--type", default="web", choices=["web", "video", "code", "mobile", "news"])
    sitemaps_delete = sitemaps_sub.add_parser("delete", help="Remove a sitemap")
    sitemaps_delete.add_argument("--site", required=True, help="Website URL")
    sitemaps_delete.add_argument("--sitemap", required=True, help="Sitemap URL")

    keywords = sub.add_parser("keywords", help="List keywords of a website")
    keywords.add_argument("--site", required=True, help="Website URL")

    crawl = sub.add_parser("crawl-issues", help="List crawl issues of a website")
    crawl.add_argument("--site", required=True, help="Website URL")

    tmpl_parser = sub.add_parser("templates", help="Request body template operations")
    tmpl_sub = tmpl_parser.add_subparsers(dest="templates_command", required=True)
    tmpl_sub.add_parser("list", help="List templates")
    validate_parser = tmpl_sub.add_parser("validate", help="Validate a template file")
    validate_parser.add_argument("--template", required=True, help="Absolute or relative template file path")

    return parser


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        if args.command == "init":
            return cmd_init()

        if args.command == "auth" and args.auth_command == "request":
            return cmd_auth_request(args.scope, args.callback)

        if args.command == "auth" and args.auth_command == "access":
            return cmd_auth_access(args.token, args.verifier, args.scope)

        if args.command == "sites":
            return cmd_sites(args)

        if args.command == "sitemaps":
            return cmd_sitemaps(args)

        if args.command == "keywords":
            return cmd_keywords(args.site)

        if args.command == "crawl-issues":
            return cmd_crawl_issues(args.site)

        if args.command == "templates" and args.templates_command == "list":
            return cmd_templates_list()

        if args.command == "templates" and args.templates_command == "validate":
            return cmd_templates_validate(Path(args.template))

        parser.print_help()
        return 1
    except Exception as exc:
        logger.debug("Command failed", exc_info=True)
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
