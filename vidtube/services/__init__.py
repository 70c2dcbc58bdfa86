"""
Domain services.

Thin operations over the entity store. Reads go through the view builder so
that every response carries the same enrichment; mutations validate input,
scope writes to the owner and hand dependent cleanup to the cascade
coordinator.
"""
