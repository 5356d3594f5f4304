"""Administrative command line for Bloggy.

Examples:
    bloggy-admin init-db
    bloggy-admin promote someone@example.com
    bloggy-admin reconcile-likes
"""
from __future__ import annotations

import argparse
import sys

from bloggy.core.errors import NotFoundError
from bloggy.db.session import SessionLocal, create_tables
from bloggy.models import UserRole
from bloggy.repositories import PostRepository, UserRepository
from bloggy.services.like_service import reconcile_all_like_counts
from bloggy.services.post_service import reconcile_user_posts
from bloggy.services.user_service import set_role


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bloggy-admin", description="Manage a Bloggy instance")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("init-db", help="Create all database tables")

    promote = commands.add_parser("promote", help="Grant the admin role")
    promote.add_argument("email")

    demote = commands.add_parser("demote", help="Revoke the admin role")
    demote.add_argument("email")

    commands.add_parser(
        "reconcile-likes",
        help="Recompute every post's like count from users' liked sets",
    )

    mirror = commands.add_parser(
        "reconcile-posts",
        help="Rebuild a user's post list from the post store",
    )
    mirror.add_argument("user_id", type=int)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "init-db":
        create_tables()
        print("Database initialized.")
        return 0

    with SessionLocal() as session:
        users = UserRepository(session)
        posts = PostRepository(session)
        try:
            if args.command in {"promote", "demote"}:
                role = UserRole.ADMIN if args.command == "promote" else UserRole.STANDARD
                user = set_role(users, args.email, role)
                print(f"{user.login_email} is now {user.role.value}.")
            elif args.command == "reconcile-likes":
                changed = reconcile_all_like_counts(users, posts)
                for post_id, count in sorted(changed.items()):
                    print(f"post {post_id}: like_count -> {count}")
                print(f"{len(changed)} post(s) corrected.")
            elif args.command == "reconcile-posts":
                snapshots = reconcile_user_posts(users, posts, args.user_id)
                print(f"user {args.user_id}: {len(snapshots)} post(s) mirrored.")
        except NotFoundError as exc:
            print(exc.message, file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
