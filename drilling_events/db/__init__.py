"""PostgreSQL access: connection handle, bulk insert and the event store."""
