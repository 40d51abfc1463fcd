"""Core layers: criteria classifier, findings wizard, reports."""
