"""
Tags and task-tag links.

Tags belong to exactly one scope (workspace or user). A task may only link
tags from its own list's scope; references that do not resolve in that
scope are skipped rather than rejected.
"""
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple, Union

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from app.db.crud.access import can_access_workspace
from app.db.crud.activity import record_activity
from app.db.crud.undo import capture_undo
from app.db.models import Tag, Task, TaskList, TaskTag, UndoEntityType, UndoLog
from app.exceptions.domain import Forbidden, InvalidOwner, NotFound, ValidationError

TagRef = Union[int, str]


@dataclass(frozen=True)
class TagScope:
    workspace_id: Optional[int] = None
    user_id: Optional[int] = None

    @classmethod
    def of_list(cls, task_list: TaskList) -> "TagScope":
        if task_list.workspace_id is not None:
            return cls(workspace_id=task_list.workspace_id)
        if task_list.user_id is not None:
            return cls(user_id=task_list.user_id)
        raise InvalidOwner()

    @classmethod
    def of_tag(cls, tag: Tag) -> "TagScope":
        if tag.workspace_id is not None:
            return cls(workspace_id=tag.workspace_id)
        return cls(user_id=tag.user_id)

    def matches(self, tag: Tag) -> bool:
        if self.workspace_id is not None:
            return tag.workspace_id == self.workspace_id
        return tag.workspace_id is None and tag.user_id == self.user_id

    def filter(self):
        if self.workspace_id is not None:
            return Tag.workspace_id == self.workspace_id
        return (Tag.user_id == self.user_id) & Tag.workspace_id.is_(None)


def validate_scope(workspace_id: Optional[int], user_id: Optional[int]) -> TagScope:
    """Exactly one of workspace_id / user_id must be given."""
    if workspace_id is not None and user_id is not None:
        raise ValidationError("Only one of workspace_id or user_id should be specified")
    if workspace_id is None and user_id is None:
        raise ValidationError("One of workspace_id or user_id is required")
    return TagScope(workspace_id=workspace_id, user_id=user_id)


async def require_scope_access(db: AsyncSession, requester_id: int, scope: TagScope) -> None:
    if scope.workspace_id is not None:
        if not await can_access_workspace(db, requester_id, scope.workspace_id):
            raise Forbidden("Forbidden: no access to workspace")
    elif scope.user_id != requester_id:
        raise Forbidden("Forbidden: cannot access tags of another user")


async def find_active_tag_by_name(db: AsyncSession, scope: TagScope, name: str) -> Optional[Tag]:
    result = await db.execute(
        select(Tag).where(scope.filter(), Tag.tag_name == name, Tag.is_active.is_(True)).limit(1)
    )
    return result.scalars().first()


async def resolve_tag(db: AsyncSession, scope: TagScope, item: TagRef) -> Optional[int]:
    """
    Resolve one tag reference in scope.

    An integer must name an active tag of the same scope; a string is
    trimmed and reused by (scope, name) or created. Anything else yields None.
    """
    if isinstance(item, bool):
        return None
    if isinstance(item, int):
        tag = await db.get(Tag, item)
        if tag is None or not tag.is_active or not scope.matches(tag):
            logger.debug(f"Skipping tag {item}: missing, inactive or out of scope")
            return None
        return tag.id
    if isinstance(item, str):
        name = item.strip()
        if not name:
            return None
        existing = await find_active_tag_by_name(db, scope, name)
        if existing:
            return existing.id
        tag = Tag(workspace_id=scope.workspace_id, user_id=scope.user_id, tag_name=name)
        db.add(tag)
        await db.flush()
        logger.info(f"Created tag '{name}' in scope {scope}")
        return tag.id
    return None


async def resolve_tags(db: AsyncSession, scope: TagScope, items: Iterable[TagRef]) -> List[int]:
    resolved = []
    for item in items:
        tag_id = await resolve_tag(db, scope, item)
        if tag_id is not None and tag_id not in resolved:
            resolved.append(tag_id)
    return resolved


async def linked_tag_ids(db: AsyncSession, task_id: int) -> List[int]:
    result = await db.execute(select(TaskTag.tag_id).where(TaskTag.task_id == task_id))
    return list(result.scalars().all())


async def link_tags(db: AsyncSession, task_id: int, tag_ids: Iterable[int]) -> None:
    existing = set(await linked_tag_ids(db, task_id))
    for tag_id in tag_ids:
        if tag_id not in existing:
            db.add(TaskTag(task_id=task_id, tag_id=tag_id))
            existing.add(tag_id)
    await db.flush()


async def replace_task_tags(db: AsyncSession, task: Task, items: Iterable[TagRef]) -> List[int]:
    """Full replace: clear every link of the task, then link the resolved set."""
    tag_ids = await resolve_tags(db, TagScope.of_list(task.task_list), items)
    await db.execute(delete(TaskTag).where(TaskTag.task_id == task.id))
    await link_tags(db, task.id, tag_ids)
    return tag_ids


async def attach_tags(db: AsyncSession, task: Task, tag_ids: Iterable[int]) -> List[int]:
    """Link existing tags by id; out-of-scope or inactive ids are skipped."""
    scope = TagScope.of_list(task.task_list)
    valid_ids = await resolve_tags(db, scope, [tag_id for tag_id in tag_ids if isinstance(tag_id, int)])
    await link_tags(db, task.id, valid_ids)
    return valid_ids


async def unlink_tags(db: AsyncSession, task_id: int, tag_ids: Iterable[int]) -> None:
    tag_ids = list(tag_ids)
    if tag_ids:
        await db.execute(delete(TaskTag).where(TaskTag.task_id == task_id, TaskTag.tag_id.in_(tag_ids)))


async def detach_tag(db: AsyncSession, task: Task, tag_id: int) -> None:
    try:
        tag = await db.get(Tag, tag_id)
        if tag is None or not tag.is_active:
            raise NotFound("Tag not found")
        if not TagScope.of_list(task.task_list).matches(tag):
            raise Forbidden("Tag scope does not match task list scope")
        await unlink_tags(db, task.id, [tag_id])
        await db.commit()
        logger.info(f"Detached tag {tag_id} from task {task.id}")
    except Exception as e:
        logger.error(f"Failed to detach tag {tag_id} from task {task.id}: {e}")
        await db.rollback()
        raise


async def active_tags_for_task(db: AsyncSession, task_id: int) -> List[Tag]:
    result = await db.execute(
        select(Tag)
        .join(TaskTag, TaskTag.tag_id == Tag.id)
        .where(TaskTag.task_id == task_id, Tag.is_active.is_(True))
        .order_by(Tag.id)
    )
    return list(result.scalars().all())


# Standalone tag CRUD

async def list_tags(db: AsyncSession, requester_id: int, scope: TagScope, is_active: Optional[bool] = None) -> List[Tag]:
    await require_scope_access(db, requester_id, scope)
    query = select(Tag).where(scope.filter())
    if is_active is not None:
        query = query.where(Tag.is_active.is_(is_active))
    result = await db.execute(query.order_by(Tag.tag_name, Tag.id))
    return list(result.scalars().all())


async def create_tag(db: AsyncSession, requester_id: int, tag_name: str,
                     workspace_id: Optional[int] = None, user_id: Optional[int] = None) -> Tag:
    try:
        scope = validate_scope(workspace_id, user_id)
        await require_scope_access(db, requester_id, scope)

        name = (tag_name or "").strip()
        if not name:
            raise ValidationError("tag_name is required")
        if await find_active_tag_by_name(db, scope, name):
            raise ValidationError("Tag already exists")

        tag = Tag(workspace_id=scope.workspace_id, user_id=scope.user_id, tag_name=name)
        db.add(tag)
        await db.commit()
        await db.refresh(tag)
        logger.info(f"Tag created: {tag.id} '{name}'")
        return tag
    except Exception as e:
        logger.error(f"Failed to create tag: {e}")
        await db.rollback()
        raise


async def _load_tag_for_update(db: AsyncSession, requester_id: int, tag_id: int) -> Tag:
    tag = await db.get(Tag, tag_id)
    if tag is None:
        raise NotFound("Tag not found")
    await require_scope_access(db, requester_id, TagScope.of_tag(tag))
    return tag


async def update_tag(db: AsyncSession, requester_id: int, tag_id: int,
                     tag_name: Optional[str] = None, is_active: Optional[bool] = None) -> Tag:
    try:
        if tag_name is None and is_active is None:
            raise ValidationError("No fields to update")
        tag = await _load_tag_for_update(db, requester_id, tag_id)

        name = tag.tag_name
        if tag_name is not None:
            name = tag_name.strip()
            if not name:
                raise ValidationError("tag_name cannot be empty")

        # Renaming an active tag or reactivating a deleted one must not collide
        if tag_name is not None or (is_active and not tag.is_active):
            duplicate = await find_active_tag_by_name(db, TagScope.of_tag(tag), name)
            if duplicate is not None and duplicate.id != tag.id:
                raise ValidationError("Tag already exists")

        tag.tag_name = name
        if is_active is not None:
            tag.is_active = is_active

        await db.commit()
        await db.refresh(tag)
        logger.info(f"Tag updated: {tag.id}")
        return tag
    except Exception as e:
        logger.error(f"Failed to update tag {tag_id}: {e}")
        await db.rollback()
        raise


async def soft_delete_tag(db: AsyncSession, requester_id: int, tag_id: int) -> Tuple[Tag, UndoLog]:
    try:
        tag = await _load_tag_for_update(db, requester_id, tag_id)
        if not tag.is_active:
            raise NotFound("Tag not found")
        entry = await capture_undo(db, requester_id, UndoEntityType.TAG, tag)
        tag.is_active = False
        record_activity(
            db,
            user_id=requester_id,
            activity_type="tag_deleted",
            workspace_id=tag.workspace_id,
            details={"tag_id": tag.id, "tag_name": tag.tag_name},
        )
        await db.commit()
        logger.info(f"Tag soft-deleted: {tag.id}")
        return tag, entry
    except Exception as e:
        logger.error(f"Failed to delete tag {tag_id}: {e}")
        await db.rollback()
        raise
