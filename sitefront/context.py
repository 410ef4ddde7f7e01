"""
Base-path context for one resolved tenant.

The context is built once per resolved request and passed explicitly to the
renderers. base_path_provider() additionally publishes it in a ContextVar for
code that cannot take it as a parameter (template globals, log records).
"""
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Iterator, Optional

from .exceptions import BasePathContextError
from .links import rewrite_internal_link
from .logging import tenant_var
from .models import Site, normalize_base_path


@dataclass(frozen=True)
class BasePathContext:
    site: Site
    base_path: str
    is_alias_domain: bool = False
    hostname: Optional[str] = None
    scheme: str = "https"

    @classmethod
    def for_site(cls, site: Site, is_alias_domain: bool = False,
                 hostname: Optional[str] = None, scheme: str = "https") -> "BasePathContext":
        # Alias domains arrive with the base path already stripped by the proxy
        base_path = "" if is_alias_domain else normalize_base_path(site.base_path)
        return cls(site=site, base_path=base_path, is_alias_domain=is_alias_domain,
                   hostname=hostname, scheme=scheme)

    def prefix_path(self, path: str) -> str:
        """Site-relative path -> path under the base path"""
        if not self.base_path or not path:
            return path
        if path.startswith(("http://", "https://", "//", "#", "?")):
            return path
        if not path.startswith("/"):
            path = "/" + path
        return rewrite_internal_link(path, self.base_path)

    def get_full_url(self, path: str) -> str:
        host = self.hostname or self.site.domain
        return f"{self.scheme}://{host}{self.prefix_path(path)}"

    @property
    def home_url(self) -> str:
        return self.base_path or "/"


_current_context: ContextVar[Optional[BasePathContext]] = ContextVar("base_path_context", default=None)


@contextmanager
def base_path_provider(context: BasePathContext) -> Iterator[BasePathContext]:
    """Publish a tenant context for the duration of the with-block"""
    token = _current_context.set(context)
    tenant_token = tenant_var.set({"site_id": context.site.id, "hostname": context.hostname or context.site.domain})
    try:
        yield context
    finally:
        tenant_var.reset(tenant_token)
        _current_context.reset(token)


def get_base_path_context() -> BasePathContext:
    context = _current_context.get()
    if context is None:
        raise BasePathContextError("get_base_path_context")
    return context


def get_current_site() -> Site:
    context = _current_context.get()
    if context is None:
        raise BasePathContextError("get_current_site")
    return context.site


def get_current_base_path() -> str:
    context = _current_context.get()
    if context is None:
        raise BasePathContextError("get_current_base_path")
    return context.base_path
