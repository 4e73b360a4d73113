from contextlib import contextmanager
from dataclasses import dataclass
import logging
from typing import Iterator, Optional

from typer import Exit, Option, Typer
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

from tasktracker.adapters.memory.task_repo import InMemoryTaskRepository
from tasktracker.adapters.memory.user_directory import InMemoryUserDirectory
from tasktracker.adapters.sql.schema import build_engine
from tasktracker.adapters.sql.task_repo import SqlTaskRepository
from tasktracker.adapters.sql.user_directory import SqlUserDirectory
from tasktracker.adapters.system.clock_system import SystemClock
from tasktracker.adapters.system.id_provider_uuid import UuidIdProvider
from tasktracker.api.colors import TaskColor
from tasktracker.config import Settings, load_settings
from tasktracker.domain.enums import TaskPriority, TaskStatus, UserRole
from tasktracker.domain.errors import (
    DomainError,
    ForbiddenError,
    TaskForbiddenError,
    TaskNotFoundError,
    TaskStorageError,
    UserNotFoundError,
    ValidationError,
)
from tasktracker.domain.patch import TaskPatch
from tasktracker.domain.task import Principal, TaskId, TaskPage, TaskView, UserId, UserRef
from tasktracker.logging_setup import setup_logging
from tasktracker.ports.user_directory import UserDirectory
from tasktracker.seed import seed
from tasktracker.services.task_service import TaskService
from tasktracker.services.user_service import UserService


### COMMENTS
# ==========================================================
# CLI (Typer + Rich): user interface for the task tracker.
# ==========================================================
# Role:
# - Maps commands onto TaskService (list/list-all/show/add/update/rm/board)
#   and UserService (users list/add/rm).
# - Resolves the principal from --as (e-mail or user id) against the user directory.
# - Catches DomainError and prints friendly panels; anything else is logged
#   with a traceback and shown as a generic internal error.
#
# Rules:
# - No business logic here, delegate to the services.
# - Dependencies (repos + service) are built once in the callback.
# - Without --db / TASKTRACKER_DB everything lives in memory for one process.

logger = logging.getLogger(__name__)

app = Typer(help="Collaborative task tracker CLI")
users_app = Typer(help="User management (adding and removing is admin only)")
app.add_typer(users_app, name="users")
console = Console()


@dataclass
class AppContext:
    settings: Settings
    service: TaskService
    user_service: UserService
    users: UserDirectory
    actor: Optional[str] = None


ctx: AppContext | None = None  # set in the callback


def build_context(settings: Settings, actor: Optional[str] = None) -> AppContext:
    """Wires adapters for the configured storage.
    - No database -> InMemory
    - Database URL/path -> SQLAlchemy (persistent)
    """
    target = settings.database_target()
    if target is None:
        repo = InMemoryTaskRepository()
        users = InMemoryUserDirectory()
    else:
        engine = build_engine(target)
        repo = SqlTaskRepository(engine)
        users = SqlUserDirectory(engine)
    ids = UuidIdProvider()
    service = TaskService(repo, users, ids, SystemClock(), default_limit=settings.page_size)
    return AppContext(
        settings=settings,
        service=service,
        user_service=UserService(users, ids),
        users=users,
        actor=actor,
    )


@app.callback()
def main(
    db: Optional[str] = Option(
        None,
        "--db",
        help="SQLAlchemy URL or SQLite file path (enables persistence)",
    ),
    actor: Optional[str] = Option(
        None,
        "--as",
        "-u",
        help="E-mail or id of the user performing the command",
    ),
) -> None:
    """Bootstraps settings, logging and dependencies."""
    global ctx
    settings = load_settings(database=db)
    setup_logging(log_dir=settings.log_dir, console_level=settings.log_level)
    ctx = build_context(settings, actor)


def resolve_user_id(users: UserDirectory, ref: str) -> UserId:
    """E-mail -> user id; anything without '@' is taken as an id already."""
    if "@" not in ref:
        return UserId(ref.strip())
    user = users.find_by_email(ref)
    if user is None:
        raise UserNotFoundError(ref)
    return user.user_id


def lookup_user_id(users: UserDirectory, ref: str) -> UserId:
    """Like `resolve_user_id`, but an unknown e-mail is passed on as is."""
    try:
        return resolve_user_id(users, ref)
    except UserNotFoundError:
        return UserId(ref.strip())


def current_principal() -> Principal:
    if not ctx.actor:
        raise UserNotFoundError("(none) - pass --as <email>")
    user_id = resolve_user_id(ctx.users, ctx.actor)
    found = ctx.users.get_many([user_id])
    if user_id not in found:
        raise UserNotFoundError(ctx.actor)
    return Principal(id=user_id, name=found[user_id].name)


@contextmanager
def handle_errors() -> Iterator[None]:
    """Renders domain errors as panels; every failure exits with code 1."""
    try:
        yield
    except ValidationError as e:
        lines = "\n".join(f"• [bold]{field}[/]: {message}" for field, message in e.errors)
        console.print(Panel.fit(f"❌ {lines}", title="Validation error", border_style="red"))
        raise Exit(1)
    except TaskNotFoundError as e:
        console.print(Panel.fit(
            f"❌ {e}\n[dim]Use 'tasks list-all' to find a valid ID[/]",
            title="Not found",
            border_style="red",
        ))
        raise Exit(1)
    except ForbiddenError as e:
        console.print(Panel.fit(f"⛔ {e}", title="Forbidden", border_style="red"))
        raise Exit(1)
    except UserNotFoundError as e:
        console.print(Panel.fit(f"❌ {e}", title="Unknown user", border_style="red"))
        raise Exit(1)
    except TaskStorageError:
        logger.exception("storage failure")
        console.print(Panel.fit("❌ Internal error", title="Error", border_style="red"))
        raise Exit(1)
    except DomainError as e:
        console.print(Panel.fit(f"❌ {e}", title="Domain error", border_style="red"))
        raise Exit(1)
    except Exit:
        raise
    except Exception:
        logger.exception("unexpected failure")
        console.print(Panel.fit("❌ Internal error", title="Error", border_style="red"))
        raise Exit(1)


def short_id(task_id: str, n: int = 8) -> str:
    """Shortened UUID for tables (first 8 chars)."""
    return task_id[:n]


def color_status(status: TaskStatus) -> str:
    match status:
        case TaskStatus.PENDING:
            return f"{TaskColor.ORANGE}pending{TaskColor.RESET}"
        case TaskStatus.COMPLETED:
            return f"{TaskColor.GREEN}completed{TaskColor.RESET}"
        case _:
            return str(status)


def color_priority(priority: TaskPriority) -> str:
    match priority:
        case TaskPriority.HIGH:
            return f"{TaskColor.RED}high{TaskColor.RESET}"
        case TaskPriority.MEDIUM:
            return f"{TaskColor.ORANGE}medium{TaskColor.RESET}"
        case TaskPriority.LOW:
            return f"{TaskColor.GREEN}low{TaskColor.RESET}"
        case _:
            return str(priority)


def user_label(ref: UserRef) -> str:
    return ref.name or f"{TaskColor.DIM}{short_id(ref.id)}{TaskColor.RESET}"


def render_tasks(tasks: list[TaskView]) -> Table:
    table = Table(show_lines=True, header_style="bold")
    table.add_column("ID", no_wrap=True, style="cyan")
    table.add_column("Title")
    table.add_column("Due", no_wrap=True)
    table.add_column("Priority", no_wrap=True)
    table.add_column("Status", no_wrap=True)
    table.add_column("Assigned To")
    table.add_column("Created By")
    for t in tasks:
        table.add_row(
            short_id(t.task_id),
            t.title,
            t.due_date.isoformat(),
            color_priority(t.priority),
            color_status(t.status),
            user_label(t.assigned_to),
            user_label(t.created_by),
        )
    return table


def render_page(page: TaskPage) -> None:
    console.print(render_tasks(page.tasks))
    pages = max(1, page.total_pages)
    console.print(
        f"[dim]Page {page.current_page}/{pages} • Total: {page.total} • Limit: {page.limit}[/dim]"
    )


def render_task(task: TaskView, title: str = "Task details", border: str = "cyan") -> None:
    lines = [
        f"ID: {task.task_id}",
        f"Title: {task.title}",
        f"Description: {task.description}",
        f"Due: {task.due_date.isoformat()}",
        f"Priority: {color_priority(task.priority)}",
        f"Status: {color_status(task.status)}",
        f"Assigned to: {user_label(task.assigned_to)} {task.assigned_to.email or ''}",
        f"Created by: {user_label(task.created_by)} {task.created_by.email or ''}",
        f"Created: {task.created_at.isoformat()}",
    ]
    console.print(Panel.fit("\n".join(lines), title=title, border_style=border))


@app.command("list")
def list_cmd(
    status: Optional[str] = Option(None, "--status", "-s"),
    priority: Optional[str] = Option(None, "--priority", "-p"),
    page: str = Option("1", "--page"),
    limit: Optional[str] = Option(None, "--limit", "-l"),
) -> None:
    """Tasks assigned to you, newest first."""
    with handle_errors():
        principal = current_principal()
        render_page(ctx.service.list_own(principal, status=status, priority=priority, page=page, limit=limit))


@app.command("list-all")
def list_all_cmd(
    status: Optional[str] = Option(None, "--status", "-s"),
    priority: Optional[str] = Option(None, "--priority", "-p"),
    assigned_to: Optional[str] = Option(None, "--assigned-to", "-a", help="E-mail or user id"),
    from_date: Optional[str] = Option(None, "--from", help="Due on or after (YYYY-MM-DD)"),
    to_date: Optional[str] = Option(None, "--to", help="Due on or before (YYYY-MM-DD)"),
    sort_by: Optional[str] = Option(None, "--sort-by", help="priority | dueDate"),
    page: str = Option("1", "--page"),
    limit: Optional[str] = Option(None, "--limit", "-l"),
) -> None:
    """All tasks with filters, sorting and paging."""
    with handle_errors():
        principal = current_principal()
        assignee = resolve_user_id(ctx.users, assigned_to) if assigned_to else None
        result = ctx.service.list_all(
            principal,
            status=status,
            priority=priority,
            assigned_to=assignee,
            from_date=from_date,
            to_date=to_date,
            sort_by=sort_by,
            page=page,
            limit=limit,
        )
        render_page(result)


@app.command("show")
def show(task_id: str) -> None:
    """Shows a single task."""
    with handle_errors():
        task = ctx.service.get_task(current_principal(), TaskId(task_id))
        render_task(task)


@app.command("add")
def add(
    title: str,
    desc: Optional[str] = Option(None, "--desc", "-d"),
    due: Optional[str] = Option(None, "--due", help="YYYY-MM-DD"),
    priority: Optional[str] = Option(None, "--priority", "-p"),
    assigned_to: Optional[str] = Option(None, "--assigned-to", "-a", help="E-mail or user id"),
) -> None:
    """Creates a task (you become its creator)."""
    with handle_errors():
        principal = current_principal()
        assignee = resolve_user_id(ctx.users, assigned_to) if assigned_to else None
        task = ctx.service.create_task(
            principal,
            title=title,
            description=desc,
            due_date=due,
            priority=priority,
            assigned_to=assignee,
        )
        render_task(task, title="✅ Task created", border="green")


@app.command("update")
def update(
    task_id: str,
    title: Optional[str] = Option(None, "--title", "-t"),
    desc: Optional[str] = Option(None, "--desc", "-d"),
    due: Optional[str] = Option(None, "--due"),
    priority: Optional[str] = Option(None, "--priority", "-p"),
    assigned_to: Optional[str] = Option(None, "--assigned-to", "-a", help="E-mail or user id"),
    status: Optional[str] = Option(None, "--status", "-s"),
) -> None:
    """Changes the given fields only. Status: assignee or creator; the rest: creator."""
    with handle_errors():
        principal = current_principal()
        patch = TaskPatch.from_raw(
            title=title,
            description=desc,
            due_date=due,
            priority=priority,
            assigned_to=lookup_user_id(ctx.users, assigned_to) if assigned_to else None,
            status=status,
        )
        # values are validated by the service, after the ownership check
        task = ctx.service.update_task(principal, TaskId(task_id), patch)
        render_task(task, title="✅ Task updated", border="green")


@app.command("done")
def done(task_id: str) -> None:
    """Shortcut for `update --status completed`."""
    with handle_errors():
        task = ctx.service.update_task(
            current_principal(), TaskId(task_id), TaskPatch(status=TaskStatus.COMPLETED)
        )
        render_task(task, title="✅ Completed", border="green")


@app.command("rm")
def rm(task_id: str) -> None:
    """Deletes a task (creator only)."""
    with handle_errors():
        removed = ctx.service.remove_task(current_principal(), TaskId(task_id))
        console.print(Panel.fit(
            f"🟡 {removed.message}\nID: {short_id(removed.task_id)}",
            title="Removed",
            border_style="yellow",
        ))


@app.command("board")
def board() -> None:
    """All tasks in high / medium / low columns, with status totals."""
    with handle_errors():
        result = ctx.service.board(current_principal())
        console.print(
            f"[bold]Total: {result.total}[/bold] • "
            f"{TaskColor.ORANGE}Pending: {result.pending}{TaskColor.RESET} • "
            f"{TaskColor.GREEN}Completed: {result.completed}{TaskColor.RESET}"
        )
        for priority in TaskPriority:
            column = result.column(priority)
            console.print(f"\n[bold]{color_priority(priority)}[/bold] ({len(column)})")
            console.print(render_tasks(column))


@users_app.command("list")
def users_list() -> None:
    """Lists users (candidates for --assigned-to)."""
    with handle_errors():
        table = Table(header_style="bold")
        table.add_column("ID", no_wrap=True, style="cyan")
        table.add_column("Name")
        table.add_column("E-mail")
        table.add_column("Role", no_wrap=True)
        for u in ctx.user_service.list_users():
            table.add_row(u.user_id, u.name, u.email, str(u.role))
        console.print(table)


@users_app.command("add")
def users_add(
    name: str,
    email: str,
    role: UserRole = Option(UserRole.USER, "--role", "-r", case_sensitive=False),
) -> None:
    """Registers a user (admin only)."""
    with handle_errors():
        user = ctx.user_service.add_user(current_principal(), name=name, email=email, role=role)
        console.print(Panel.fit(
            f"✅ {user.name} <{user.email}> ({user.role})\nID: {user.user_id}",
            title="User added",
            border_style="green",
        ))


@users_app.command("rm")
def users_rm(user: str) -> None:
    """Removes a user by e-mail or id (admin only). Their tasks are kept."""
    with handle_errors():
        principal = current_principal()
        user_id = resolve_user_id(ctx.users, user)
        ctx.user_service.remove_user(principal, user_id)
        console.print(Panel.fit(f"🟡 User {user} removed", title="Removed", border_style="yellow"))


@app.command("seed")
def seed_cmd() -> None:
    """Loads three demo users and five demo tasks."""
    with handle_errors():
        service = ctx.service
        created_users, created_tasks = seed(service.repo, ctx.users, service.id_provider, service.clock)
        console.print(Panel.fit(
            f"🌱 Seeded {len(created_users)} users and {len(created_tasks)} tasks\n"
            + "\n".join(f"[dim]{u.email}[/dim] ({u.role})" for u in created_users),
            title="Seed",
            border_style="green",
        ))


@app.command("demo")
def demo() -> None:
    """
    Walk-through in one process (in-memory):

    - seeds users and tasks,
    - lists as the assignee,
    - shows which changes the assignee may and may not make,
    - deletes as the creator.
    """
    with handle_errors():
        service = ctx.service
        console.print(Panel.fit("🚀 Demo start", border_style="cyan"))
        created_users, _ = seed(service.repo, ctx.users, service.id_provider, service.clock)
        john, jane, bob = (Principal(id=u.user_id, name=u.name) for u in created_users)

        console.print("\n📋 Jane's tasks:")
        own = service.list_own(jane)
        render_page(own)

        target = own.tasks[0]
        done_task = service.update_task(jane, target.task_id, TaskPatch(status=TaskStatus.COMPLETED))
        console.print(Panel.fit(
            f"✔️ Jane completed: {done_task.title} ({color_status(done_task.status)})",
            border_style="green",
        ))

        for who, patch, label in (
            (jane, TaskPatch(title="Renamed by assignee"), "Jane renames a task she did not create"),
            (bob, TaskPatch(status=TaskStatus.PENDING), "Bob reopens a task he is not part of"),
        ):
            try:
                service.update_task(who, target.task_id, patch)
            except TaskForbiddenError as e:
                console.print(Panel.fit(f"⛔ {label}: {e}", border_style="red"))

        removed = service.remove_task(john, target.task_id)
        console.print(Panel.fit(f"🗑️ John: {removed.message}", border_style="yellow"))

        console.print("\n📋 All tasks by priority:")
        render_page(service.list_all(john, sort_by="priority"))
        console.print(Panel.fit("🏁 Demo finished", border_style="cyan"))


if __name__ == "__main__":
    app()
