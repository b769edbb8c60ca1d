#!/usr/bin/env python3
"""
CommentBoard -- administrative command line.

Works directly against the configured store (DATABASE_URL), without the
HTTP server running.

Usage:
  python main.py create-user alice alice@example.com
  python main.py passwd alice@example.com
  python main.py comments
  python main.py comments --author 1

Passwords are always read with getpass, never from argv, so they do not end
up in shell history or the process list.
"""

import argparse
import getpass
import sys
from typing import Optional

from auth.hashing import BcryptHasher
from auth.users import UserModel
from content.comments import ContentModel
from core.config import get_settings
from core.errors import DuplicateError, ValidationError
from store.sql import SQLDataStore


def _prompt_password() -> Optional[str]:
    """Read a password twice. Returns None if the two entries differ."""
    first = getpass.getpass("  Password: ")
    second = getpass.getpass("  Repeat password: ")
    if first != second:
        print("  [!] Passwords do not match.")
        return None
    return first


def _create_user(users: UserModel, args: argparse.Namespace) -> int:
    password = _prompt_password()
    if password is None:
        return 1
    try:
        user = users.create(args.name, args.email, password)
    except ValidationError as e:
        print(f"  [!] {e}")
        return 1
    except DuplicateError:
        print(f"  [!] An account for {args.email} already exists.")
        return 1
    print(f"  Created user {user.id} ({user.email}).")
    return 0


def _passwd(users: UserModel, args: argparse.Namespace) -> int:
    user = users.get_by_email(args.email)
    if user is None:
        print(f"  [!] No account for {args.email}.")
        return 1
    password = _prompt_password()
    if password is None:
        return 1
    try:
        changed = users.change_password(user.id, password)
    except ValidationError as e:
        print(f"  [!] {e}")
        return 1
    print("  Password updated." if changed else "  [!] Password was not updated.")
    return 0 if changed else 1


def _comments(comments: ContentModel, args: argparse.Namespace) -> int:
    found = comments.all() if args.author is None else comments.all_by_author(args.author)
    if not found:
        print("  No comments.")
        return 0
    for c in found:
        print(f"  #{c.id:<5} author={c.author_ref:<8} {c.created_at}  {c.text}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="commentboard",
        description="CommentBoard administration.",
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    p_create = sub.add_parser("create-user", help="Create a user account (password prompted)")
    p_create.add_argument("name", help="Display name")
    p_create.add_argument("email", help="Login email, must be unique")

    p_passwd = sub.add_parser("passwd", help="Set a new password for an account (prompted)")
    p_passwd.add_argument("email", help="Login email of the account")

    p_comments = sub.add_parser("comments", help="List comments in creation order")
    p_comments.add_argument("--author", metavar="REF", default=None, help="Only comments by this author reference")

    return parser


def main(argv: Optional[list[str]] = None, store: Optional[SQLDataStore] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 0

    settings = get_settings()
    own_store = store is None
    if store is None:
        store = SQLDataStore(settings.database_url)
    try:
        if args.command == "comments":
            return _comments(ContentModel(store, max_length=settings.max_comment_length), args)
        users = UserModel(store, BcryptHasher(rounds=settings.bcrypt_rounds))
        if args.command == "create-user":
            return _create_user(users, args)
        return _passwd(users, args)
    finally:
        if own_store:
            store.close()


if __name__ == "__main__":
    sys.exit(main())
