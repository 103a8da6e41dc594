"""Scrawl Template package: parsed templates ready for evaluation."""

from scrawl.template.core import Template

__all__ = ["Template"]
