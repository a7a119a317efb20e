"""Classification of Notion API failures."""

from notion_client.errors import HTTPResponseError, RequestTimeoutError

# Messages the API returns when a block type can't have its children listed
UNSUPPORTED_MARKERS = ("ai_block", "not supported")


def is_transient_error(error: BaseException) -> bool:
    """
    Check whether a failure is worth retrying.

    Server errors (5xx), rate limiting (429) and request timeouts are
    transient. Validation errors and missing properties are not.
    """
    if isinstance(error, RequestTimeoutError):
        return True
    if isinstance(error, HTTPResponseError):
        status = getattr(error, "status", None)
        return status is not None and (status >= 500 or status == 429)
    return False


def is_unsupported_block_error(error: BaseException) -> bool:
    """Check whether a listing failed because the block type can't be listed."""
    message = str(error)
    return any(marker in message for marker in UNSUPPORTED_MARKERS)
