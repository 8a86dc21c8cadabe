"""DevTasks CLI — log in, manage projects and move tasks across the board.

Usage:
    devtasks register "Alice" alice@x.com       # Create an account (prompts for password)
    devtasks login alice@x.com                  # Store a token in ~/.devtasks/credentials.json
    devtasks projects                           # Your projects
    devtasks project-create "Website"           # New project
    devtasks board 1                            # Kanban view of project 1
    devtasks task-add 1 "Design" -d "Mockups"   # New task in project 1
    devtasks task-move 7 Done                   # Move task 7 to Done
    devtasks task-edit 7 --assignee 2           # Sparse edit
    devtasks task-delete 7
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import os
import sys
from pathlib import Path
from typing import Optional

import click
import httpx

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:8000"
STATUSES = ("ToDo", "InProgress", "Done")


def _api_url() -> str:
    return os.environ.get("DEVTASKS_API_URL", DEFAULT_API_URL).rstrip("/")


def _credentials_path() -> Path:
    override = os.environ.get("DEVTASKS_CREDENTIALS")
    if override:
        return Path(override)
    return Path.home() / ".devtasks" / "credentials.json"


def _client(token: Optional[str] = None) -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the DevTasks backend."""
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    return httpx.AsyncClient(base_url=_api_url(), headers=headers, timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from synchronous Click handler.

    Handles nested event loops (e.g. when invoked via Click CliRunner
    inside an existing async context like tests) by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _load_credentials() -> dict:
    path = _credentials_path()
    if not path.exists():
        return {}
    try:
        return json.loads(path.read_text())
    except (OSError, ValueError):
        return {}


def _save_credentials(data: dict) -> None:
    path = _credentials_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2))
    path.chmod(0o600)


def _require_token() -> str:
    token = _load_credentials().get("token")
    if not token:
        click.secho("Not logged in. Run: devtasks login <email>", fg="red", err=True)
        sys.exit(1)
    return token


def _error_message(r: httpx.Response) -> str:
    try:
        body = r.json()
    except ValueError:
        return r.text or r.reason_phrase
    if isinstance(body, dict):
        return str(body.get("message") or body.get("detail") or body)
    return str(body)


def _check(r: httpx.Response) -> None:
    """Exit with the server's message if the call failed."""
    if r.is_success:
        return
    click.secho(f"Error ({r.status_code}): {_error_message(r)}", fg="red", err=True)
    if r.status_code == 401:
        click.echo("Your session may have expired. Run: devtasks login <email>", err=True)
    sys.exit(1)


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(
            str(row.get(k) if row.get(k) is not None else "—")[:w].ljust(w)
            for _, k, w in columns
        )
        click.echo(line)


def _status_color(status: str) -> str:
    """Map board columns to click colors."""
    colors = {
        "ToDo": "white",
        "InProgress": "yellow",
        "Done": "green",
    }
    return colors.get(status, "white")


def _task_line(t: dict) -> str:
    assignee = t.get("assignedToUserId")
    who = f"  @{assignee}" if assignee is not None else ""
    return f"#{t['id']} {t['title']}{who}"


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version="0.1.0", prog_name="devtasks")
def main():
    """DevTasks: projects and tasks from the terminal."""


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


@main.command()
@click.argument("name")
@click.argument("email")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
def register(name: str, email: str, password: str):
    """Create an account."""
    _run(_register_impl(name, email, password))


async def _register_impl(name: str, email: str, password: str):
    async with _client() as c:
        r = await c.post("/api/auth/register", json={
            "name": name, "email": email, "password": password,
        })
        _check(r)
        click.secho(f"Registered user #{r.json()['userId']}. Now run: devtasks login {email}", fg="green")


@main.command()
@click.argument("email")
@click.option("--password", prompt=True, hide_input=True)
def login(email: str, password: str):
    """Log in and store the token locally."""
    _run(_login_impl(email, password))


async def _login_impl(email: str, password: str):
    async with _client() as c:
        r = await c.post("/api/auth/login", json={"email": email, "password": password})
        _check(r)
        data = r.json()

    _save_credentials({
        "token": data["token"],
        "user": {"id": data["userId"], "name": data["name"], "email": data["email"]},
    })
    click.secho(f"Logged in as {data['name']} <{data['email']}>", fg="green")


@main.command()
def logout():
    """Forget the stored token."""
    path = _credentials_path()
    if path.exists():
        path.unlink()
    click.echo("Logged out.")


@main.command()
def whoami():
    """Show the logged-in user."""
    _run(_whoami_impl())


async def _whoami_impl():
    token = _require_token()
    async with _client(token) as c:
        r = await c.get("/api/auth/me")
        _check(r)
        user = r.json()
    click.echo(f"#{user['id']} {user['name']} <{user['email']}>")


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


@main.command()
def projects():
    """List your projects (the dashboard)."""
    _run(_projects_impl())


async def _projects_impl():
    token = _require_token()
    async with _client(token) as c:
        r = await c.get("/api/projects")
        _check(r)
        rows = r.json()

    if not rows:
        click.echo("No projects yet. Create one with: devtasks project-create <name>")
        return
    _print_table(rows, [("ID", "id", 6), ("NAME", "name", 40)])


@main.command("project-create")
@click.argument("name")
def project_create(name: str):
    """Create a project."""
    _run(_project_create_impl(name))


async def _project_create_impl(name: str):
    token = _require_token()
    async with _client(token) as c:
        r = await c.post("/api/projects", json={"name": name})
        _check(r)
        project = r.json()
    click.secho(f"Project #{project['id']} created: {project['name']}", fg="green")


@main.command("project-rename")
@click.argument("project_id", type=int)
@click.argument("name")
def project_rename(project_id: int, name: str):
    """Rename a project."""
    _run(_project_rename_impl(project_id, name))


async def _project_rename_impl(project_id: int, name: str):
    token = _require_token()
    async with _client(token) as c:
        r = await c.put(f"/api/projects/{project_id}", json={"name": name})
        _check(r)
    click.secho(f"Project #{project_id} renamed to {name}", fg="green")


@main.command("project-delete")
@click.argument("project_id", type=int)
@click.confirmation_option(prompt="Delete this project and all of its tasks?")
def project_delete(project_id: int):
    """Delete a project and all of its tasks."""
    _run(_project_delete_impl(project_id))


async def _project_delete_impl(project_id: int):
    token = _require_token()
    async with _client(token) as c:
        r = await c.delete(f"/api/projects/{project_id}")
        _check(r)
    click.secho(f"Project #{project_id} deleted", fg="green")


# ---------------------------------------------------------------------------
# Board
# ---------------------------------------------------------------------------


@main.command()
@click.argument("project_id", type=int)
def board(project_id: int):
    """Kanban view of a project: ToDo / InProgress / Done."""
    _run(_board_impl(project_id))


async def _board_impl(project_id: int):
    token = _require_token()
    async with _client(token) as c:
        r = await c.get(f"/api/projects/{project_id}/tasks")
        _check(r)
        tasks = r.json()

        # The project itself is owner-only; assignees still get the board
        r = await c.get(f"/api/projects/{project_id}")
        title = r.json()["name"] if r.status_code == 200 else f"Project #{project_id}"

    click.secho(title, bold=True)
    for status in STATUSES:
        column = [t for t in tasks if t["status"] == status]
        click.echo()
        click.secho(f"{status} ({len(column)})", fg=_status_color(status), bold=True)
        if not column:
            click.echo("  (empty)")
        for t in column:
            click.echo(f"  {_task_line(t)}")


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------


@main.command("task-add")
@click.argument("project_id", type=int)
@click.argument("title")
@click.option("--description", "-d", help="Longer description")
@click.option("--assignee", "-a", type=int, help="User id to assign")
@click.option("--status", "-s", type=click.Choice(STATUSES), help="Initial column (default ToDo)")
def task_add(project_id: int, title: str, description: Optional[str],
             assignee: Optional[int], status: Optional[str]):
    """Create a task in a project."""
    _run(_task_add_impl(project_id, title, description, assignee, status))


async def _task_add_impl(project_id: int, title: str, description: Optional[str],
                         assignee: Optional[int], status: Optional[str]):
    token = _require_token()
    body: dict = {"title": title, "projectId": project_id}
    if description is not None:
        body["description"] = description
    if assignee is not None:
        body["assignedToUserId"] = assignee
    if status is not None:
        body["status"] = status

    async with _client(token) as c:
        r = await c.post("/api/tasks", json=body)
        _check(r)
        task = r.json()
    status_str = click.style(task["status"], fg=_status_color(task["status"]))
    click.echo(f"Task #{task['id']} created in {status_str}")


@main.command("task-move")
@click.argument("task_id", type=int)
@click.argument("status", type=click.Choice(STATUSES))
def task_move(task_id: int, status: str):
    """Move a task to another column."""
    _run(_task_update_impl(task_id, {"status": status}))


@main.command("task-edit")
@click.argument("task_id", type=int)
@click.option("--title", "-t", help="New title")
@click.option("--description", "-d", help="New description")
@click.option("--assignee", "-a", type=int, help="User id to assign")
@click.option("--unassign", is_flag=True, help="Clear the assignee")
def task_edit(task_id: int, title: Optional[str], description: Optional[str],
              assignee: Optional[int], unassign: bool):
    """Edit a task. Only the options you pass are changed."""
    body: dict = {}
    if title is not None:
        body["title"] = title
    if description is not None:
        body["description"] = description
    if assignee is not None:
        body["assignedToUserId"] = assignee
    if unassign:
        body["assignedToUserId"] = None
    if not body:
        click.secho("Nothing to change.", fg="yellow")
        return
    _run(_task_update_impl(task_id, body))


async def _task_update_impl(task_id: int, body: dict):
    token = _require_token()
    async with _client(token) as c:
        r = await c.put(f"/api/tasks/{task_id}", json=body)
        _check(r)
        task = r.json()
    status_str = click.style(task["status"], fg=_status_color(task["status"]))
    click.echo(f"{_task_line(task)} [{status_str}]")


@main.command("task-delete")
@click.argument("task_id", type=int)
def task_delete(task_id: int):
    """Delete a task."""
    _run(_task_delete_impl(task_id))


async def _task_delete_impl(task_id: int):
    token = _require_token()
    async with _client(token) as c:
        r = await c.delete(f"/api/tasks/{task_id}")
        _check(r)
    click.secho(f"Task #{task_id} deleted", fg="green")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    main()
