"""Kida environment setup for site builds."""

from atoll.templating.integration import collect_templates, create_environment

__all__ = ["collect_templates", "create_environment"]
