"""
Failures raised by the share engine and the blob store.

Share link failures carry the HTTP status and the title/message shown on the
public error page. A locked link is not an error; it resolves to
``ResolveState.NEEDS_PASSWORD`` (see ``schemas.share``).
"""


class StoreFailure(Exception):
    """The underlying blob store failed to read or write."""

    status_code = 500


class ShareLinkError(Exception):
    status_code = 400
    title = "Invalid link"
    message = "The share link could not be opened."

    def __init__(self, message: str = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class InvalidLink(ShareLinkError):
    status_code = 400
    title = "Invalid link"
    message = "The link is missing a required parameter."


class LinkNotFound(ShareLinkError):
    status_code = 404
    title = "Link not found"
    message = "This share link does not exist or has been deleted."


class LinkExpired(ShareLinkError):
    status_code = 410
    title = "Link expired"
    message = "This share link has passed its expiry time."


class LinkExhausted(ShareLinkError):
    status_code = 410
    title = "Link used up"
    message = "This share link has reached its maximum number of views."


class SourceMissing(ShareLinkError):
    status_code = 404
    title = "Source file missing"
    message = "The share record exists but its file has been deleted."


class Unauthorized(ShareLinkError):
    status_code = 403
    title = "Not allowed"
    message = "Sign in as the administrator to preview files directly."
