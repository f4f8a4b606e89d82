"""Client stub, servicer base and server registration for users_manager.v1.UsersManager."""

import grpc

from app.rpc import messages

SERVICE_NAME = "users_manager.v1.UsersManager"

# method name -> (request model, response model)
METHODS = {
    "GetUsers": (messages.GetUsersRequest, messages.GetUsersResponse),
    "GetUserById": (messages.GetUserByIdRequest, messages.GetUserByIdResponse),
    "Insert": (messages.InsertRequest, messages.InsertResponse),
    "Update": (messages.UpdateRequest, messages.UpdateResponse),
    "Delete": (messages.DeleteRequest, messages.DeleteResponse),
}


def method_path(name: str) -> str:
    return f"/{SERVICE_NAME}/{name}"


class UsersManagerStub:
    """Client-side callables for each UsersManager method."""

    def __init__(self, channel: grpc.Channel) -> None:
        self.GetUsers = self._unary(channel, "GetUsers")
        self.GetUserById = self._unary(channel, "GetUserById")
        self.Insert = self._unary(channel, "Insert")
        self.Update = self._unary(channel, "Update")
        self.Delete = self._unary(channel, "Delete")

    @staticmethod
    def _unary(channel: grpc.Channel, name: str) -> grpc.UnaryUnaryMultiCallable:
        _, response_cls = METHODS[name]
        return channel.unary_unary(
            method_path(name),
            request_serializer=messages.encode,
            response_deserializer=response_cls.model_validate_json,
        )


class UsersManagerServicer:
    """Base servicer; every method answers UNIMPLEMENTED until overridden."""

    def _unimplemented(self, context: grpc.ServicerContext) -> None:
        context.set_code(grpc.StatusCode.UNIMPLEMENTED)
        context.set_details("Method not implemented!")
        raise NotImplementedError("Method not implemented!")

    def GetUsers(self, request, context):
        self._unimplemented(context)

    def GetUserById(self, request, context):
        self._unimplemented(context)

    def Insert(self, request, context):
        self._unimplemented(context)

    def Update(self, request, context):
        self._unimplemented(context)

    def Delete(self, request, context):
        self._unimplemented(context)


def add_UsersManagerServicer_to_server(
    servicer: UsersManagerServicer, server: grpc.Server
) -> None:
    rpc_method_handlers = {
        name: grpc.unary_unary_rpc_method_handler(
            getattr(servicer, name),
            request_deserializer=request_cls.model_validate_json,
            response_serializer=messages.encode,
        )
        for name, (request_cls, _) in METHODS.items()
    }
    generic_handler = grpc.method_handlers_generic_handler(SERVICE_NAME, rpc_method_handlers)
    server.add_generic_rpc_handlers((generic_handler,))
