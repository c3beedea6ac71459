import argparse
import asyncio
import json
import logging
from typing import List, Optional

from chat.sechat.directory.app.cli import configure_logging
from chat.sechat.directory.app.config import Settings
from chat.sechat.directory.app.runtime import directory_context
from chat.sechat.directory.directory import IdentityDirectory
from chat.sechat.directory.mkm.identifier import ID
from chat.sechat.directory.register import register_user

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sechat-directory", description="Inspect and manage the identity directory"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    meta = subparsers.add_parser("meta", help="Print the Meta of handles.")
    meta.add_argument("subject", nargs="+", help="The handle(s) to resolve.")

    profile = subparsers.add_parser("profile", help="Print the profile of handles.")
    profile.add_argument("subject", nargs="+", help="The handle(s) to resolve.")

    name = subparsers.add_parser("name", help="Print display names and numbers.")
    name.add_argument("subject", nargs="+", help="The handle(s) to describe.")

    alias = subparsers.add_parser("alias", help="Resolve or bind an alias.")
    alias.add_argument("name", help="The alias to resolve or bind.")
    alias.add_argument("subject", nargs="?", help="Bind the alias to this handle.")

    users = subparsers.add_parser("users", help="List local users.")
    users.add_argument("--current", help="Make this handle the current user.")

    contacts = subparsers.add_parser("contacts", help="List or edit contacts.")
    contacts.add_argument("user", help="The owning handle.")
    contacts.add_argument("--add", action="append", default=[], help="Add a contact.")
    contacts.add_argument(
        "--remove", action="append", default=[], help="Remove a contact."
    )

    register = subparsers.add_parser("register", help="Create a new local user.")
    register.add_argument("seed", help="The handle name of the new user.")
    register.add_argument("--nickname", help="Publish a profile with this name.")
    register.add_argument("--kty", default="RSA", choices=["RSA", "EC"])

    return parser


def parse_subject(value: str) -> ID:
    identifier = ID.parse(value)
    if identifier is None:
        raise SystemExit(f"invalid handle: {value}")
    return identifier


async def run(directory: IdentityDirectory, args: argparse.Namespace) -> None:
    command = args.command

    if command == "meta":
        for subject in args.subject:
            meta = await directory.resolve_meta(parse_subject(subject))
            print(subject, json.dumps(meta.model_dump(mode="json")) if meta else None)

    elif command == "profile":
        for subject in args.subject:
            profile = await directory.resolve_profile(parse_subject(subject))
            print(subject, profile.data if profile else None)

    elif command == "name":
        for subject in args.subject:
            identifier = parse_subject(subject)
            print(
                identifier,
                await directory.display_name(identifier),
                directory.number_string(identifier),
            )

    elif command == "alias":
        if args.subject:
            ok = await directory.bind_alias(args.name, parse_subject(args.subject))
            print(f"bound {args.name}: {ok}")
        else:
            print(args.name, await directory.resolve_alias(args.name))

    elif command == "users":
        if args.current:
            await directory.set_current_user(parse_subject(args.current))
        current = await directory.get_current_user()
        for user in await directory.get_local_users():
            marker = "*" if user.identifier == current else " "
            print(marker, user.identifier)

    elif command == "contacts":
        user = parse_subject(args.user)
        for value in args.add:
            await directory.add_contact(parse_subject(value), user)
        for value in args.remove:
            await directory.remove_contact(parse_subject(value), user)
        for contact in await directory.get_contacts(user):
            print(contact)

    elif command == "register":
        identifier = await register_user(
            directory, args.seed, nickname=args.nickname, kty=args.kty
        )
        print(f"registered {identifier}")


async def realMain(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    settings = Settings()  # type: ignore
    configure_logging(settings.debug)

    async with directory_context(settings) as directory:
        await run(directory, args)


def main() -> None:
    asyncio.run(realMain())


if __name__ == "__main__":
    main()
