from __future__ import annotations

from lenses_config.domain.errors import ConfigError, InvalidFormat, NotFound, ValidationError


def test_error_hierarchy() -> None:
    assert issubclass(InvalidFormat, ConfigError)
    assert issubclass(ValidationError, ConfigError)
    assert issubclass(NotFound, ConfigError)
    for exception in (InvalidFormat(""), ValidationError(""), NotFound("")):
        assert isinstance(exception, ConfigError)


def test_decode_and_validation_errors_are_distinct() -> None:
    assert not issubclass(InvalidFormat, ValidationError)
    assert not issubclass(ValidationError, InvalidFormat)
    assert not issubclass(NotFound, InvalidFormat)
