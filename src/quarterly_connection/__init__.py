"""Quarterly connection report generator for Jira and GitHub activity."""

__version__ = "0.1.0"
