"""Wire messages for the UsersManager service (JSON-encoded pydantic models)."""

from pydantic import BaseModel, Field

from app.schemas.user import UserPayload


class UserMessage(BaseModel):
    """User on the wire. Ids travel as strings; empty strings mean "unset"."""

    id: str = ""
    login: str = ""
    password: str = ""
    role: str = ""


class GetUsersRequest(BaseModel):
    pass


class GetUsersResponse(BaseModel):
    users: list[UserMessage] = Field(default_factory=list)


class GetUserByIdRequest(BaseModel):
    id: str = ""


class GetUserByIdResponse(BaseModel):
    user: UserMessage | None = None


class InsertRequest(BaseModel):
    user: UserMessage | None = None


class InsertResponse(BaseModel):
    user: UserMessage | None = None


class UpdateRequest(BaseModel):
    id: str = ""
    user: UserMessage | None = None


class UpdateResponse(BaseModel):
    user: UserMessage | None = None


class DeleteRequest(BaseModel):
    id: str = ""


class DeleteResponse(BaseModel):
    user: UserMessage | None = None


def user_to_message(user: UserPayload) -> UserMessage:
    return UserMessage(
        id=str(user.id),
        login=user.login,
        password=user.password,
        role=user.role,
    )


def message_to_user(message: UserMessage | None) -> UserPayload:
    """
    Convert a wire user into the validated payload.

    Raises ValueError (pydantic's ValidationError is one) when the message is
    missing, the id is not a UUID, or a field is empty.
    """
    if message is None:
        raise ValueError("user is required")
    return UserPayload.model_validate(message.model_dump())


def encode(message: BaseModel) -> bytes:
    return message.model_dump_json().encode("utf-8")
