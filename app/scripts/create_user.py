"""
Create a user directly in the database (e.g. the first admin). Run from project root:
  python -m app.scripts.create_user LOGIN PASSWORD [role]
Example:
  python -m app.scripts.create_user admin your-password admin
"""
import argparse
import sys
import uuid

from app.core.context import CallContext
from app.core.database import SessionLocal
from app.schemas.user import UserPayload
from app.services.errors import AlreadyExistsError, ServiceError
from app.services.users import UsersService
from app.storage.users_psql import UsersPsqlStorage


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a user without going through the gateway.")
    parser.add_argument("login", help="Login (non-empty)")
    parser.add_argument("password", help="Password (non-empty)")
    parser.add_argument("role", nargs="?", default="user", help="Role (default: user)")
    parser.add_argument("--id", dest="user_id", default=None, help="UUID to use (default: random)")
    args = parser.parse_args(argv)

    login = args.login.strip()
    if not login or not args.password or not args.role.strip():
        print("Login, password and role must be non-empty.", file=sys.stderr)
        return 1
    try:
        user_id = uuid.UUID(args.user_id) if args.user_id else uuid.uuid4()
    except ValueError:
        print(f"Invalid id '{args.user_id}'.", file=sys.stderr)
        return 1

    service = UsersService(UsersPsqlStorage(SessionLocal))
    user = UserPayload(id=user_id, login=login, password=args.password, role=args.role.strip())
    try:
        created = service.insert(CallContext(), user)
    except AlreadyExistsError:
        print(f"User with id '{user_id}' already exists.", file=sys.stderr)
        return 1
    except ServiceError as e:
        print(f"Failed to create user: {e.message}", file=sys.stderr)
        return 1
    print(f"Created user '{created.login}' ({created.id}) with role '{created.role}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
