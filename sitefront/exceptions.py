"""
Custom exceptions for tenant resolution, theming and rendering
"""
from typing import Optional, Dict, Any


class SitefrontException(Exception):
    """Base exception for all sitefront errors"""

    def __init__(
        self,
        message: str,
        code: str = "SITEFRONT_ERROR",
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class SiteNotFoundError(SitefrontException):
    """Raised when no tenant site can be resolved for a hostname"""

    def __init__(self, hostname: str, reason: str = "unknown domain"):
        super().__init__(
            message=f"No site is configured for '{hostname}'",
            code="SITE_NOT_FOUND",
            status_code=404,
            details={"hostname": hostname, "reason": reason}
        )


class DomainCheckError(SitefrontException):
    """Raised when the domain-check collaborator cannot be reached or answers badly"""

    def __init__(self, hostname: str, reason: str):
        super().__init__(
            message=f"Domain check for '{hostname}' failed: {reason}",
            code="DOMAIN_CHECK_FAILED",
            status_code=502,
            details={"hostname": hostname, "reason": reason}
        )


class ContentFetchError(SitefrontException):
    """Raised when the content collaborator fails"""

    def __init__(self, resource: str, reason: str):
        super().__init__(
            message=f"Fetching {resource} failed: {reason}",
            code="CONTENT_FETCH_FAILED",
            status_code=502,
            details={"resource": resource, "reason": reason}
        )


class BasePathContextError(SitefrontException):
    """Raised when the base-path context is read outside a tenant scope"""

    def __init__(self, accessor: str):
        super().__init__(
            message=f"{accessor}() must be called inside a base_path_provider() scope",
            code="BASE_PATH_CONTEXT_MISSING",
            status_code=500,
            details={"accessor": accessor}
        )


class ThemeScopeError(SitefrontException):
    """Raised when two tenants' themes would be applied to one style namespace"""

    def __init__(self, active_owner: str, requested_owner: str):
        super().__init__(
            message=(
                f"Theme for '{requested_owner}' cannot be applied while "
                f"the theme for '{active_owner}' is still mounted"
            ),
            code="THEME_SCOPE_CONFLICT",
            status_code=500,
            details={"active": active_owner, "requested": requested_owner}
        )


class ConfigurationError(SitefrontException):
    """Raised when configuration is invalid"""

    def __init__(self, setting: str, reason: str):
        super().__init__(
            message=f"Configuration error for '{setting}': {reason}",
            code="CONFIGURATION_ERROR",
            status_code=500,
            details={"setting": setting, "reason": reason}
        )
