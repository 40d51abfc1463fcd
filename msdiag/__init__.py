"""MS Diagnosis 2024 — McDonald criteria classifier and service."""
