from .formatters import format_json, format_markdown
from .models import HistoryContext

__all__ = ["HistoryContext", "format_json", "format_markdown"]
