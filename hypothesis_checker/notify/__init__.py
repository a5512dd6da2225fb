"""Paper summary side channel."""

from .email import SummarySender, format_paper_email

__all__ = ["SummarySender", "format_paper_email"]
