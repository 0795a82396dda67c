#!/usr/bin/env python3
"""
Seed quizzes from YAML files.

Usage:
    python seed_quizzes.py <directory-or-file>... [--author <uuid>]

Every *.yaml / *.yml file becomes one quiz with its questions.
"""

import asyncio
import os
import sys
import uuid
from pathlib import Path
from typing import List

from quizhub.database import close_database, configure_database, get_session_factory
from quizhub.errors import QuizHubError
from quizhub.quiz_import import import_quiz_file

# Author used when a document has no createdBy
SYSTEM_AUTHOR = uuid.UUID("00000000-0000-0000-0000-000000000001")


def collect_files(targets: List[str]) -> List[Path]:
    files: List[Path] = []
    for target in targets:
        path = Path(target)
        if path.is_dir():
            for pattern in ("*.yaml", "*.yml"):
                files.extend(sorted(path.glob(pattern)))
        elif path.is_file():
            files.append(path)
        else:
            print(f"  ⚠ Skipping {target}: not found")
    return files


async def seed(files: List[Path], author: uuid.UUID) -> int:
    failures = 0
    session_factory = get_session_factory()

    for file_path in files:
        async with session_factory() as session:
            try:
                quiz = await import_quiz_file(session, file_path, author)
                print(f"  ✓ {file_path.name}: '{quiz.title}' ({quiz.total_questions} questions)")
            except QuizHubError as e:
                await session.rollback()
                failures += 1
                print(f"  ✗ {file_path.name}: {e.message}")

    return failures


async def run(database_url: str, files: List[Path], author: uuid.UUID) -> int:
    configure_database(database_url)
    try:
        return await seed(files, author)
    finally:
        await close_database()


def main():
    args = sys.argv[1:]
    author = SYSTEM_AUTHOR
    if "--author" in args:
        position = args.index("--author")
        try:
            author = uuid.UUID(args[position + 1])
        except (IndexError, ValueError):
            print("✗ --author requires a valid UUID")
            sys.exit(1)
        del args[position:position + 2]

    if not args:
        print(__doc__)
        sys.exit(1)

    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        print("✗ Error: DATABASE_URL environment variable is not set")
        sys.exit(1)

    files = collect_files(args)
    if not files:
        print("✗ No quiz files found")
        sys.exit(1)

    print(f"Seeding {len(files)} quiz file(s)...")
    failures = asyncio.run(run(database_url, files, author))

    if failures:
        print(f"\n✗ {failures} file(s) failed")
        sys.exit(1)
    print("\n✓ Seeding completed")


if __name__ == "__main__":
    main()
