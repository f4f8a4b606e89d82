"""gRPC channel to the users manager, shared by all gateway requests."""

import grpc
from fastapi import Request


def create_users_channel(target: str) -> grpc.Channel:
    """Open an insecure channel; connection happens lazily on first call."""
    return grpc.insecure_channel(target)


def get_users_channel(request: Request) -> grpc.Channel:
    """Dependency returning the channel created in the app lifespan."""
    return request.app.state.users_channel


def check_users_service_connected(channel: grpc.Channel, timeout: float) -> bool:
    """Wait up to ``timeout`` seconds for the channel to become ready."""
    ready = grpc.channel_ready_future(channel)
    try:
        ready.result(timeout=timeout)
        return True
    except grpc.FutureTimeoutError:
        ready.cancel()
        return False
