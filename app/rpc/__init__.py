"""gRPC transport for the users manager.

This package hosts:
- Message models and the JSON codec used on the wire (``messages``).
- Stub, servicer base and registration for ``users_manager.v1.UsersManager``.
- Status-code lookup tables for both directions of the boundary.
- The servicer adapter and the server bootstrap.
"""
