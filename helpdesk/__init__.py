"""Helpdesk administration backend: ticket lifecycle, directory and reports."""

__version__ = "0.1.0"
