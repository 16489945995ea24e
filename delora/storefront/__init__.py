"""Delora storefront front-end state and command-line entry point."""
