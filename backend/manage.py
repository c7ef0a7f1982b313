import asyncio
import typer
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

import newshub.db_models # noqa: F401

from newshub.database import async_session_factory
from newshub.exceptions import AppError
from newshub.users.models import Role, User as UserModel
from newshub.users.schema import UserCreate
from newshub.users import service as user_service

cli = typer.Typer()

async def create_admin_runner(username: str, email: str, password: str, db: AsyncSession) -> UserModel:
    try:
        user_data = UserCreate(username=username, email=email, password=password)
    except ValidationError as e:
        for err in e.errors():
            print(f"Invalid {'.'.join(str(p) for p in err['loc'])}: {err['msg']}")
        raise typer.Exit(code=1)

    print(f"Creating admin user '{user_data.username}' <{user_data.email}>...")
    try:
        admin_user: UserModel = await user_service.create_user(user_data=user_data, db=db, role=Role.ADMIN)
    except AppError as e:
        print(f"Error creating admin user: {e.detail}")
        raise typer.Exit(code=1)

    print(f"Admin user created: id={admin_user.id} username={admin_user.username} role={admin_user.role}")
    return admin_user


@cli.command(name="create-admin")
def createadmin(
    username: str = typer.Option(..., "--username", "-u", help="Admin's username."),
    email: str = typer.Option(..., "--email", "-e", help="Admin's email address."),
    password: str = typer.Option(..., "--password", "-p", help="Admin's secure password."),
):
    """
    Creates a new user with 'admin' privileges in the database.
    """
    async def main():
        async with async_session_factory() as session:
            await create_admin_runner(username=username, email=email, password=password, db=session)

    asyncio.run(main())


@cli.command()
def promote(
    username: str = typer.Option(..., "--username", "-u", help="Existing user to make an admin."),
):
    """
    Grants the 'admin' role to an existing user.
    """
    async def runner():
        async with async_session_factory() as session:
            user = await user_service.get_user_by_username(username, session)
            if user is None:
                print(f"User not found: {username}")
                raise typer.Exit(code=1)
            await user_service.set_role(session, user.id, Role.ADMIN)
            print(f"{user.username} is now an admin")

    asyncio.run(runner())


if __name__ == "__main__":
    cli()
