"""Command executors, one module per verb family."""
