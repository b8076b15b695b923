"""
Basic usage example for todoist-query.

Resolves a project by name, lists its tasks a page at a time and prints
each task with its assignee, the way a `task list --project` command does.

Usage:
    python examples/basic_usage.py "Work" [--all]

Reads TODOIST_API_TOKEN from the environment or from a .env file next to
this script.
"""

import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv

from todoist_query import (
    AuthenticationError,
    RefError,
    TaskListOptions,
    TodoistClient,
    TodoistQueryError,
    list_tasks,
    next_cursor_hint,
    resolve_project_id,
)

load_dotenv(Path(__file__).parent / ".env")


async def main(project_ref: str, fetch_all: bool) -> int:
    """List one project's tasks; returns the process exit code."""
    async with TodoistClient() as client:
        try:
            project_id = await resolve_project_id(client, project_ref)
            listing = await list_tasks(client, project_id, TaskListOptions(all_items=fetch_all))
        except RefError as e:
            # Unknown or ambiguous reference: show the code and hints
            print(e, file=sys.stderr)
            return 1
        except AuthenticationError as e:
            print(f"Authentication failed: {e}", file=sys.stderr)
            return 1
        except TodoistQueryError as e:
            print(f"API error: {e}", file=sys.stderr)
            return 1

        project = listing.projects[project_id]
        print(f"{project.name} ({len(listing.tasks)})")
        for task in listing.tasks:
            assignee = listing.assignee_for(task)
            suffix = f"  {assignee}" if assignee else ""
            print(f"  id:{task.id}  {task.content}{suffix}")

        hint = next_cursor_hint(listing.next_cursor)
        if hint:
            print(f"\n... {hint}")
    return 0


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(2)
    sys.exit(asyncio.run(main(sys.argv[1], "--all" in sys.argv[2:])))
