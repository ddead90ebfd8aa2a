"""Request, ranking and engagement event log with summary statistics."""
