"""
Task query engine
Turns normalized listing parameters into SQLAlchemy statements
Reference: https://docs.sqlalchemy.org/en/20/tutorial/data_select.html
"""
from sqlalchemy import ColumnElement, Select, and_, func, or_, select, true

from tasktrack.api.v1.schemas.task import TaskListParams, Visibility
from tasktrack.models.task import Task

LIKE_ESCAPE = "\\"


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so the value matches literally."""
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def visibility_clause(visibility: Visibility, column) -> ColumnElement[bool]:
    """Soft-delete predicate for a deleted_at column."""
    if visibility is Visibility.DELETED:
        return column.is_not(None)
    if visibility is Visibility.ALL:
        return true()
    return column.is_(None)


def task_filters(params: TaskListParams) -> list[ColumnElement[bool]]:
    """
    Conjunctive WHERE clauses for a task listing

    Every optional filter is applied only when present.
    """
    clauses = [visibility_clause(params.visibility, Task.deleted_at)]

    if params.user_id is not None:
        clauses.append(Task.user_id == params.user_id)

    if params.status is not None:
        clauses.append(Task.status == params.status)

    if params.keyword:
        pattern = f"%{escape_like(params.keyword)}%"
        clauses.append(
            or_(
                Task.title.ilike(pattern, escape=LIKE_ESCAPE),
                Task.description.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )

    if params.due_date_from is not None:
        clauses.append(Task.due_date >= params.due_date_from)

    if params.due_date_to is not None:
        clauses.append(Task.due_date <= params.due_date_to)

    return clauses


def build_task_statement(params: TaskListParams) -> Select:
    """
    Page of tasks for the given parameters

    Ordered by the whitelisted sort column, then by id in the same direction
    so rows with equal sort keys keep a stable position across pages.
    """
    sort_column = getattr(Task, params.sort_by)
    if params.sort_direction == "asc":
        ordering = (sort_column.asc(), Task.id.asc())
    else:
        ordering = (sort_column.desc(), Task.id.desc())

    return (
        select(Task)
        .where(and_(*task_filters(params)))
        .order_by(*ordering)
        .offset(params.offset)
        .limit(params.per_page)
    )


def build_count_statement(params: TaskListParams) -> Select:
    """Number of tasks matching the filters of `params`, ignoring paging"""
    return select(func.count(Task.id)).where(and_(*task_filters(params)))
