"""Utility modules for gigtrail.

- **errors** -- exception hierarchy rooted at GigTrailError.
- **logging** -- structlog setup (console in development, JSON in production).
- **concurrency** -- retry combinator and per-provider request throttle.
- **pagination** -- batched parallel page fetcher used by the event adapters.
- **http** -- JSON GET / HEAD helpers over an injected httpx client.
- **country_mapping** -- country name, variation and ISO code canonicalization.
- **venue_capacity** -- venue capacity table plus keyword-based estimate.
- **dates** -- provider date normalization and sort keys.
- **text_normalizer** -- artist-name matching (rapidfuzz) and snippet cleanup.
"""
