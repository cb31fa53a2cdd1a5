"""
RouterChat package: a multi-tenant LLM chat platform.

This package contains the core service components including:
- Flask application and API routes
- Chat orchestration (guest and authenticated branches)
- Completion provider and identity provider clients
- Relational persistence of identities, sessions and messages
- Configuration and utility modules
"""

import logging
import os

# Configure logging with clickable paths before anything else imports logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(levelname)s: %(pathname)s:%(lineno)d %(message)s",
)

REPOSITORY_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


class ClickablePathFilter(logging.Filter):
    """Filter to make file paths clickable in the terminal.

    Paths under the repository root are shown relative to it; other paths
    (site-packages, the interpreter) are left untouched.
    """

    def __init__(self, root: str = REPOSITORY_ROOT) -> None:
        super().__init__()
        self.root = root

    def filter(self, record: logging.LogRecord) -> bool:
        pathname = getattr(record, "pathname", None)
        if pathname and pathname.startswith(self.root):
            record.pathname = os.path.relpath(pathname, self.root)
        return True


# Handler filters also see records propagated from module loggers
for _handler in logging.getLogger().handlers:
    _handler.addFilter(ClickablePathFilter())
