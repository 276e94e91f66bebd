"""Command-line tools for gigtrail.

- ``python -m gigtrail.cli lookup ARTIST`` -- aggregate an artist's
  performances and print a Markdown digest, JSON, or a one-line summary.

The CLI builds its own components through ``gigtrail.main.build_components``
and closes the shared HTTP client when the lookup finishes.
"""
