"""Code lifecycle resolution and bulk-operation engine."""
