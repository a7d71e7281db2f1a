"""Tailoring bounded context — client orders, measurements and messaging.

Covers the order record of a tailoring shop: billing, the status lifecycle
with its payment gate before delivery, free-text measurement documents, and
the message templates used for reminders and confirmations.
"""

from protean.domain import Domain

from tailoring.utils.logging import configure_logging, get_logger

configure_logging(log_dir="logs", log_file_prefix="tailoring")

logger = get_logger(__name__)

# Domain Composition Root
tailoring = Domain(name="tailoring")
