"""Adapters to external collaborators: DevTools HTTP discovery and Playwright."""
