"""
Tests for links.py — link filtering, normalisation and nav-first ordering.
"""

from __future__ import annotations

import pytest

from sitecorpus.dom import load_document
from sitecorpus.links import LinkDiscoverer

from conftest import page

PAGE_URL = "https://example.com/docs/intro"


def discover(body: str, url: str = PAGE_URL, head: str = "") -> list:
    html = f"<html><head>{head}</head><body>{body}</body></html>"
    return LinkDiscoverer().discover_links(load_document(html, url), url)


def anchors(*hrefs: str) -> str:
    return "".join(f'<a href="{href}">link</a>' for href in hrefs)


class TestResolution:

    def test_relative_links_resolved_against_page(self):
        assert discover(anchors("setup", "/about", "../api")) == [
            "https://example.com/docs/setup",
            "https://example.com/about",
            "https://example.com/api",
        ]

    def test_base_href_respected(self):
        links = discover(anchors("guide"), head='<base href="https://example.com/manual/">')
        assert links == ["https://example.com/manual/guide"]

    def test_malformed_base_href_falls_back_to_page_url(self):
        links = discover(anchors("guide", "/about"), head='<base href="http://[broken">')
        assert links == ["https://example.com/docs/guide", "https://example.com/about"]

    def test_base_href_with_bad_port_ignored(self):
        links = discover(anchors("guide"), head='<base href="https://example.com:port/x/">')
        assert links == ["https://example.com/docs/guide"]

    def test_query_and_fragment_stripped(self):
        links = discover(anchors("/a?page=2", "/a#section", "/a"))
        assert links == ["https://example.com/a"]

    def test_host_lowercased_and_default_port_dropped(self):
        links = discover(anchors("https://EXAMPLE.com:443/b"))
        assert links == ["https://example.com/b"]


class TestFiltering:

    def test_other_hosts_rejected(self):
        links = discover(anchors(
            "https://other.com/a",
            "https://www.example.com/b",
            "https://sub.example.com/c",
            "/kept",
        ))
        assert links == ["https://example.com/kept"]

    def test_self_links_rejected(self):
        links = discover(anchors("#top", "?tab=2", "/docs/intro", "intro#x"))
        assert links == []

    def test_non_http_schemes_rejected(self):
        links = discover(anchors(
            "mailto:team@example.com",
            "javascript:void(0)",
            "tel:+100000",
            "ftp://example.com/file",
        ))
        assert links == []

    @pytest.mark.parametrize("href", [
        "/files/report.pdf",
        "/img/photo.JPG",
        "/img/logo.svg",
        "/downloads/archive.zip",
        "/templates/letter.docx",
    ])
    def test_non_content_extensions_rejected(self, href):
        assert discover(anchors(href)) == []

    def test_dots_elsewhere_in_path_allowed(self):
        links = discover(anchors("/v1.2/guide", "/page.html"))
        assert links == ["https://example.com/v1.2/guide", "https://example.com/page.html"]

    @pytest.mark.parametrize("href", [
        "/wp-admin/options.php",
        "/admin",
        "/account/login",
        "/cart",
        "/shop/checkout/step-1",
    ])
    def test_administrative_paths_rejected(self, href):
        assert discover(anchors(href)) == []

    def test_empty_href_ignored(self):
        assert discover('<a href="">empty</a><a href="   ">blank</a><a>none</a>') == []


class TestOrdering:

    def test_navigation_links_first(self):
        body = (
            anchors("/body-one")
            + "<nav>" + anchors("/nav-one", "/nav-two") + "</nav>"
            + anchors("/body-two")
        )
        assert discover(body) == [
            "https://example.com/nav-one",
            "https://example.com/nav-two",
            "https://example.com/body-one",
            "https://example.com/body-two",
        ]

    def test_navigation_containers(self):
        body = (
            anchors("/body")
            + '<div role="navigation">' + anchors("/by-role") + "</div>"
            + '<ul class="menu">' + "<li>" + anchors("/by-menu") + "</li></ul>"
            + '<div class="nav">' + anchors("/by-nav-class") + "</div>"
        )
        assert discover(body) == [
            "https://example.com/by-role",
            "https://example.com/by-menu",
            "https://example.com/by-nav-class",
            "https://example.com/body",
        ]

    def test_link_in_nav_and_body_listed_once_in_nav_position(self):
        body = anchors("/shared", "/other") + "<nav>" + anchors("/shared") + "</nav>"
        assert discover(body) == [
            "https://example.com/shared",
            "https://example.com/other",
        ]

    def test_duplicates_removed_in_encounter_order(self):
        body = anchors("/b", "/a", "/b?x=1", "/a#y")
        assert discover(body) == ["https://example.com/b", "https://example.com/a"]

    def test_filters_apply_to_navigation_links(self):
        body = "<nav>" + anchors("/login", "https://other.com/x", "/guide") + "</nav>"
        assert discover(body) == ["https://example.com/guide"]

    def test_document_not_modified(self):
        html = page("T", "<nav>" + anchors("/a") + "</nav>")
        document = load_document(html, PAGE_URL)
        LinkDiscoverer().discover_links(document, PAGE_URL)
        assert len(document.select("nav a")) == 1
