from __future__ import annotations

import pytest

from lenses_config.domain.duration import parse_duration
from lenses_config.domain.errors import ValidationError


@pytest.mark.parametrize(
    ("text", "seconds"),
    [
        ("300ms", 0.3),
        ("-1.5h", -5400.0),
        ("2h45m", 9900.0),
        ("5s", 5.0),
        ("1500us", 0.0015),
        ("1500µs", 0.0015),
        ("0", 0.0),
        (" 10s ", 10.0),
    ],
)
def test_parse_duration(text: str, seconds: float) -> None:
    assert parse_duration(text) == pytest.approx(seconds)


def test_empty_means_no_timeout() -> None:
    assert parse_duration("") is None


@pytest.mark.parametrize("text", ["5", "5 s", "s", "-", "1d", "10sx"])
def test_malformed_duration(text: str) -> None:
    with pytest.raises(ValidationError):
        parse_duration(text)
