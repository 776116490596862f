from __future__ import annotations


class AppError(Exception):
    """Base error for expected failures."""

    def __init__(self, message: str, *, http_status: int = 400):
        super().__init__(message)
        self.message = message
        self.http_status = http_status


class AuthError(AppError):
    def __init__(self, message: str = "unauthorized"):
        super().__init__(message, http_status=401)


class NotFoundError(AppError):
    def __init__(self, message: str = "not found"):
        super().__init__(message, http_status=404)


class ConfigError(AppError):
    def __init__(self, message: str):
        super().__init__(message, http_status=500)


# ----------------------------
# Upstream / transport
# ----------------------------


class TransportError(AppError):
    """Request never produced a response (connect, read, timeout)."""

    def __init__(self, message: str):
        super().__init__(message, http_status=502)


class UpstreamError(AppError):
    """Snyk answered with a non-2xx status."""

    def __init__(self, status_code: int, upstream_message: str | None = None):
        if upstream_message:
            message = f"unexpected status code {status_code}: {upstream_message}"
        else:
            message = f"unexpected status code {status_code}"
        super().__init__(message, http_status=502)
        self.status_code = status_code
        self.upstream_message = upstream_message


class ContentTypeError(AppError):
    # only a prefix of the upstream body is echoed back to API callers
    MAX_BODY_CHARS = 200

    def __init__(self, content_type: str, body: str = ""):
        message = f"unexpected content type {content_type}"
        if body:
            snippet = body[: self.MAX_BODY_CHARS]
            if len(body) > self.MAX_BODY_CHARS:
                snippet = f"{snippet}..."
            message = f"{message} - {snippet}"
        super().__init__(message, http_status=502)
        self.content_type = content_type


class DecodeError(AppError):
    def __init__(self, message: str = "failed to decode response body"):
        super().__init__(message, http_status=502)


# ----------------------------
# Domain
# ----------------------------


class PageTokenError(AppError):
    def __init__(self, message: str = "invalid page token"):
        super().__init__(message, http_status=400)


class RoleNameError(AppError):
    def __init__(self, name: str):
        super().__init__(f"failed to parse role name and type for '{name}'", http_status=422)
        self.name = name


class RoleNotFoundError(NotFoundError):
    def __init__(self, role: str):
        super().__init__(f"role {role} not found")
        self.role = role


class DefaultRoleMissingError(AppError):
    def __init__(self, slug: str):
        super().__init__(f"minimal default role {slug} not found", http_status=409)
        self.slug = slug


class PrincipalNotGrantableError(AppError):
    def __init__(self, message: str = "only users can be granted organization entitlements"):
        super().__init__(message, http_status=400)


class UnsupportedOperationError(AppError):
    def __init__(self, message: str):
        super().__init__(message, http_status=405)
