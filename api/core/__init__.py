"""
Shared, cross-cutting code for the API.

`core/` holds the building blocks every feature uses: settings, the error
taxonomy, the record stores (flat-file JSON and Postgres) and the Pinata
client. Keep feature-specific field handling in the feature package
(e.g. `submissions/`).
"""
