"""LinkedIn profile and company lookup.

Uses the formal API when it can and falls back to browser extraction
(Playwright) when the API errors out or the profile is private. Each module
covers one concern so that site-specific parts can be swapped on their own.
"""
