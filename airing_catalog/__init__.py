"""
Recently-aired TV catalog builder.

This package holds the discovery and reconciliation pipeline that is driven by
the CLI scripts in `scripts/`:
- provider clients and the throttled fetcher in `integrations/`
- discovery, fallback resolution and catalog assembly in `ingestion/`
- output projections in `models/` and file persistence in `repositories/`

Entrypoints should live outside this package and import from `airing_catalog`.
"""
