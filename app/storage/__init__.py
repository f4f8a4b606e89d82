"""Storage adapters for users: PostgreSQL (users manager) and gRPC (gateway)."""
