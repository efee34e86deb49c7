"""
External provider integrations (TVmaze, TMDb) and the shared throttled fetcher.

New provider clients should live under this namespace so they stay decoupled
from the pipeline stages in `ingestion/` and the CLI scripts in `scripts/`.
"""
