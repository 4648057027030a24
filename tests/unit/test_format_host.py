from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from lenses_config.domain.config import ClientConfiguration, format_host

HOST_ALPHABET = st.sampled_from(list("abcxyz019.-:/"))
HOSTS = st.text(HOST_ALPHABET, max_size=24)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("example.com", "http://example.com:80"),
        ("example.com:443", "https://example.com:443"),
        ("https://example.com/", "https://example.com:443"),
        ("http://example.com", "http://example.com:80"),
        ("example.com:9991", "http://example.com:9991"),
        ("https://example.com:8443", "https://example.com:8443"),
        ("http://example.com:443/", "http://example.com:443"),
        ("", ""),
    ],
)
def test_format_host_examples(raw: str, expected: str) -> None:
    assert format_host(raw) == expected


def test_scheme_colon_is_not_a_port_marker() -> None:
    assert format_host("http://lenses") == "http://lenses:80"


@given(HOSTS)
def test_format_host_is_idempotent(host: str) -> None:
    once = format_host(host)
    assert format_host(once) == once


@given(HOSTS.filter(bool))
def test_format_host_never_leaves_trailing_slash(host: str) -> None:
    assert not format_host(host).endswith("/")


def test_method_rewrites_in_place() -> None:
    cfg = ClientConfiguration(host="lenses/")
    cfg.format_host()
    assert cfg.host == "http://lenses:80"
