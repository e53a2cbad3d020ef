"""HTTP bridge exposing the catalog scan operations."""
