"""Redaction engine: masking, feature switches, reveal sessions and overlay planning."""
