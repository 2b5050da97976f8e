"""Output stores and publish reconciliation."""
