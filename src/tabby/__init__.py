# ABOUTME: Tabby - scan book covers and shelves into catalog candidates.
# ABOUTME: Library entry points live in tabby.catalog and tabby.core; the CLI in tabby.cli.
