"""Registry of dynamic DNS service providers."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Callable, Optional

GENERIC_HTTP_REQUEST = (
    "GET %s HTTP/1.0\r\n"
    "Host: %s\r\n"
    "User-Agent: %s\r\n\r\n"
)

DYNDNS_MY_IP_SERVER = "checkip.dyndns.com"
DYNDNS_MY_CHECKIP_URL = "/"
DDNS_MY_IP_SERVER = "ifconfig.me"
DDNS_MY_CHECKIP_URL = "/ip"

DDNS_DEFAULT_STARTUP_SLEEP = 0
DDNS_DEFAULT_PERIOD = 120
DDNS_MIN_PERIOD = 30
DDNS_MAX_PERIOD = 10 * 24 * 3600
DDNS_ERROR_UPDATE_PERIOD = 600
DDNS_FORCED_UPDATE_PERIOD = 30 * 24 * 3600
DDNS_DEFAULT_CMD_CHECK_PERIOD = 1
DDNS_DEFAULT_ITERATIONS = 0
DDNS_MAX_ALIAS_NUMBER = 50
DDNS_MAX_SERVER_NUMBER = 5

_LIST_HEADER = "\x1b[7m%-32s  %-32s  %-15s\x1b[0m\n"
_LIST_ROW = "%-32s  %-32s %s\n"


class CheckipSsl(IntEnum):
    """HTTPS support of a provider's check-IP server."""

    UNSUPPORTED = -1
    SUPPORTED = 1
    REQUIRED = 3


@dataclass(eq=False)
class Provider:
    """A DDNS provider: its servers, request template and callbacks."""

    name: str
    setup: Optional[Callable] = None
    request: Optional[Callable] = None
    response: Optional[Callable] = None
    nousername: bool = False
    checkip_name: str = DDNS_MY_IP_SERVER
    checkip_url: str = DDNS_MY_CHECKIP_URL
    checkip_ssl: CheckipSsl = CheckipSsl.UNSUPPORTED
    server_name: str = ""
    server_url: str = ""
    server_req: Optional[str] = None
    cloned: bool = False


def _text(value):
    return "" if value is None else str(value)


class PluginRegistry:
    """Ordered collection of registered providers."""

    def __init__(self, plugpath=None):
        self.plugpath = plugpath
        self._providers: list[Provider] = []

    def __iter__(self):
        return iter(list(self._providers))

    def __len__(self):
        return len(self._providers)

    def register(self, provider, request=None):
        """Add *provider* with its request template.

        Returns False when a provider of the same name is already registered.
        """
        if provider is None:
            raise ValueError("no provider given")
        if not provider.name:
            raise ValueError("provider has no name")
        if self.find(provider.name, False) is not None:
            return False
        provider.server_req = request
        self._providers.append(provider)
        return True

    def register_v6(self, provider, request=None):
        """Register an IPv6 clone of *provider*: default@x becomes ipv6@x."""
        clone = replace(provider, name="ipv6" + provider.name[7:], cloned=True)
        return self.register(clone, request)

    def unregister(self, provider):
        """Remove *provider* and any IPv6 clone made from it."""
        registered = self.find(provider.name, False)
        if registered is None:
            return
        name = provider.name
        if "default@" in name:
            name = "ipv6" + provider.name[7:]

        target = provider if provider in self._providers else registered
        self._providers.remove(target)

        clone = self.find(name, False)
        if clone is not None and clone.cloned:
            self._providers.remove(clone)

    def _search(self, name, loose):
        wanted = name.lower()
        for provider in self._providers:
            have = provider.name.lower()
            if (wanted in have) if loose else (have == wanted):
                return provider
        return None

    def find(self, name, loose=False):
        """Return the provider matching *name*, or None.

        Anything after a ':' in *name* is ignored.  With *loose* a
        case-insensitive substring match is used.  Failing a direct match,
        the name is tried again under the plugin path with a .so suffix.
        """
        if name is None:
            raise ValueError("no provider name given")
        name = name.split(":", 1)[0]

        found = self._search(name, loose)
        if found is not None:
            return found

        if self.plugpath and not name.startswith("/"):
            sep = "" if self.plugpath.endswith("/") else "/"
            ext = "" if name.endswith(".so") else ".so"
            found = self._search(f"{self.plugpath}{sep}{name}{ext}", loose)
        return found

    def format_list(self):
        """Return a table of every provider and its servers."""
        lines = [_LIST_HEADER % ("PROVIDER", "CHECKIP/UPDATE SERVER", "URL")]
        for p in self._providers:
            lines.append(_LIST_ROW % (p.name, _text(p.checkip_name), _text(p.checkip_url)))
            lines.append(_LIST_ROW % ("", _text(p.server_name), _text(p.server_url)))
        return "".join(lines)

    def show(self, name):
        """Return a description of the provider *name*.

        Tries an exact match first, then a substring match.  Raises
        LookupError when neither finds a provider.
        """
        provider = self.find(name, False) or self.find(name, True)
        if provider is None:
            raise LookupError(f"No such plugin '{name}', even tried substring match")

        req = (provider.server_req or "").replace("\\", "\\\\")
        return (
            f"Name           : {provider.name}\n"
            f"nousername     : {'true' if provider.nousername else 'false'}\n"
            f"checkip server : {_text(provider.checkip_name)}\n"
            f"checkip URL    : {_text(provider.checkip_url)}\n"
            f"update server  : {_text(provider.server_name)}\n"
            f"update URL     : {_text(provider.server_url)}\n"
            f"update REQ     : {req}\n"
        )