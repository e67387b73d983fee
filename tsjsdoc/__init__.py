"""Rewrite TypeScript-flavored JSDoc type annotations into resolved JSDoc."""

__version__ = "0.1.0"
