"""Scrawl runtime: execution context, object model and template cache."""

from scrawl.runtime.cache import TemplateCache
from scrawl.runtime.context import ExecutionContext
from scrawl.runtime.objects import ScriptObject, to_display_string

__all__ = ["ExecutionContext", "ScriptObject", "TemplateCache", "to_display_string"]
