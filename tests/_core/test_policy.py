"""
Tests for the request blocking policy and its combination with the cache.

Test Categories:
---------------
1. Classification of resource types and hosts
2. Dispositions (block, respond_from_cache, pass_through)
"""

import pytest

from pagewalker import ResponseCacheStore, WalkOptions
from pagewalker._core._policy import classify, dispose, host_of, is_trusted_host

CDN_ASSET = "https://d17ivq9b7rppb3.cloudfront.net/images/logo.png"
THIRD_PARTY_ASSET = "https://www.googletagmanager.com/gtm.js"
PAGE = "https://www.dicoding.com/academies/86/tutorials/1"


@pytest.fixture
def options() -> WalkOptions:
    return WalkOptions()


# =============================================================================
# Test Suite 1: Classification
# =============================================================================


class TestClassify:
    @pytest.mark.parametrize("resource_type", ["image", "stylesheet", "font", "script", "Image"])
    def test_untrusted_assets_are_blocked(self, options: WalkOptions, resource_type: str) -> None:
        assert classify(resource_type, "www.googletagmanager.com", options) == "block"

    @pytest.mark.parametrize("resource_type", ["image", "stylesheet", "font", "script"])
    def test_trusted_assets_pass(self, options: WalkOptions, resource_type: str) -> None:
        assert classify(resource_type, "d17ivq9b7rppb3.cloudfront.net", options) == "pass_through"

    @pytest.mark.parametrize("resource_type", ["document", "xhr", "fetch", "media", "websocket", "other"])
    def test_other_resource_types_pass(self, options: WalkOptions, resource_type: str) -> None:
        assert classify(resource_type, "www.googletagmanager.com", options) == "pass_through"

    def test_trusted_suffix_is_configurable(self) -> None:
        options = WalkOptions(trusted_asset_host_suffix="assets.example.org")

        assert classify("image", "cdn.assets.example.org", options) == "pass_through"
        assert classify("image", "d17ivq9b7rppb3.cloudfront.net", options) == "block"

    def test_empty_suffix_trusts_nothing(self) -> None:
        assert not is_trusted_host("d17ivq9b7rppb3.cloudfront.net", "")

    def test_host_of(self) -> None:
        assert host_of("https://D17IVQ9B7RPPB3.cloudfront.net:443/a.png") == "d17ivq9b7rppb3.cloudfront.net"
        assert host_of("data:image/png;base64,AAAA") == ""


# =============================================================================
# Test Suite 2: Dispositions
# =============================================================================


class TestDispose:
    def test_blocked_request_never_reaches_the_cache(self, options: WalkOptions) -> None:
        store = ResponseCacheStore()
        store.observe(THIRD_PARTY_ASSET, 200, {"cache-control": "max-age=60"}, b"", now=0)

        assert dispose("script", THIRD_PARTY_ASSET, store, options, now=1000) == ("block", None)

    def test_live_entry_is_served(self, options: WalkOptions) -> None:
        store = ResponseCacheStore()
        store.observe(CDN_ASSET, 200, {"cache-control": "max-age=60"}, b"png", now=0)

        disposition, entry = dispose("image", CDN_ASSET, store, options, now=59_000)

        assert disposition == "respond_from_cache"
        assert entry is not None
        assert entry.body == b"png"

    def test_expired_entry_passes_through(self, options: WalkOptions) -> None:
        store = ResponseCacheStore()
        store.observe(CDN_ASSET, 200, {"cache-control": "max-age=60"}, b"png", now=0)

        assert dispose("image", CDN_ASSET, store, options, now=60_000) == ("pass_through", None)

    def test_documents_are_served_from_cache_too(self, options: WalkOptions) -> None:
        store = ResponseCacheStore()
        store.observe(PAGE, 200, {"cache-control": "max-age=10"}, b"<html>", now=0)

        disposition, _ = dispose("document", PAGE, store, options, now=1)

        assert disposition == "respond_from_cache"

    def test_unknown_url_passes_through(self, options: WalkOptions) -> None:
        assert dispose("document", PAGE, ResponseCacheStore(), options, now=0) == ("pass_through", None)
