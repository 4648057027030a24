"""Authentication variants that may occupy a context's credential slot.

Purpose
-------
Model the closed set of mutually exclusive credential kinds as immutable value
objects. A :class:`~lenses_config.domain.config.ClientConfiguration` holds at
most one of them.

Contents
--------
* :class:`BasicAuthentication` – username/password login.
* :class:`KerberosAuthentication` – Kerberos login; carries one
  :data:`KerberosMethod`.
* :class:`KerberosWithPassword` / :class:`KerberosWithKeytab` /
  :class:`KerberosFromCCache` – the Kerberos ticket sources.
* :data:`Authentication` / :data:`KerberosMethod` – the unions themselves.

System Role
-----------
Codecs serialize each variant under its own document key and rebuild the
concrete class from that key, so the ``kind`` attribute here is the only
discriminator the rest of the package needs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Union

MASK: Final[str] = "****"


@dataclass(frozen=True, slots=True)
class BasicAuthentication:
    """Plain username and password credentials.

    Examples
    --------
    >>> auth = BasicAuthentication("admin", "secret")
    >>> auth.kind, auth.describe()
    ('basic', {'kind': 'basic', 'username': 'admin', 'password': '****'})
    """

    username: str = ""
    password: str = ""

    @property
    def kind(self) -> str:
        return "basic"

    def describe(self) -> dict[str, str]:
        """Return a log-safe view with the password masked."""

        return {"kind": self.kind, "username": self.username, "password": _mask(self.password)}


@dataclass(frozen=True, slots=True)
class KerberosWithPassword:
    """Obtain a ticket from a principal's password."""

    username: str = ""
    password: str = ""
    realm: str = ""

    @property
    def kind(self) -> str:
        return "password"

    def describe(self) -> dict[str, str]:
        return {"kind": self.kind, "username": self.username, "password": _mask(self.password), "realm": self.realm}


@dataclass(frozen=True, slots=True)
class KerberosWithKeytab:
    """Obtain a ticket from a keytab file."""

    keytab_file: str = ""

    @property
    def kind(self) -> str:
        return "keytab"

    def describe(self) -> dict[str, str]:
        return {"kind": self.kind, "keytab_file": self.keytab_file}


@dataclass(frozen=True, slots=True)
class KerberosFromCCache:
    """Reuse a ticket already present in a credentials cache file."""

    ccache_file: str = ""

    @property
    def kind(self) -> str:
        return "ccache"

    def describe(self) -> dict[str, str]:
        return {"kind": self.kind, "ccache_file": self.ccache_file}


KerberosMethod = Union[KerberosWithPassword, KerberosWithKeytab, KerberosFromCCache]


@dataclass(frozen=True, slots=True)
class KerberosAuthentication:
    """Kerberos credentials: a ``krb5.conf`` location plus one ticket source.

    Examples
    --------
    >>> auth = KerberosAuthentication("/etc/krb5.conf", KerberosWithKeytab("/etc/lenses.keytab"))
    >>> auth.describe()["method"]
    {'kind': 'keytab', 'keytab_file': '/etc/lenses.keytab'}
    """

    conf_file: str = ""
    method: KerberosMethod | None = None

    @property
    def kind(self) -> str:
        return "kerberos"

    def describe(self) -> dict[str, object]:
        method = self.method.describe() if self.method is not None else None
        return {"kind": self.kind, "conf_file": self.conf_file, "method": method}


Authentication = Union[BasicAuthentication, KerberosAuthentication]


def _mask(secret: str) -> str:
    return MASK if secret else ""


__all__ = [
    "Authentication",
    "BasicAuthentication",
    "KerberosAuthentication",
    "KerberosFromCCache",
    "KerberosMethod",
    "KerberosWithKeytab",
    "KerberosWithPassword",
    "MASK",
]
