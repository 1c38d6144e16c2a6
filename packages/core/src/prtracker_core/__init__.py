"""Merged pull request tracking and bulk repository administration for GitHub organizations."""
