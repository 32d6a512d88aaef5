"""Corpus pipeline: sidebars, pages, documents and output."""
