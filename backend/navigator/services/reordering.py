"""
Position reordering for articles and forms.
Validates a batch of {id, position} pairs, then writes every position in one transaction.
"""
import logging
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from navigator.errors import InvalidInput

logger = logging.getLogger(__name__)


def _is_int(value: Any) -> bool:
    # JSON true/false arrive as bool, which is an int subclass
    return isinstance(value, int) and not isinstance(value, bool)


def validate_reorder_items(items: Any, noun: str) -> list[tuple[int, int]]:
    """
    Check the raw payload in order: list present, non-empty, ids, positions, duplicate ids.
    Returns [(id, position), ...]. noun is "article" or "form" and shapes error messages.
    """
    plural = noun.capitalize() + "s"
    if items is None or not isinstance(items, list):
        raise InvalidInput(f"{plural} array is required")
    if not items:
        raise InvalidInput(f"{plural} array cannot be empty")
    pairs: list[tuple[int, int]] = []
    for item in items:
        if not isinstance(item, dict):
            raise InvalidInput(f"Invalid {noun} ID")
        item_id = item.get("id")
        if not _is_int(item_id) or item_id <= 0:
            raise InvalidInput(f"Invalid {noun} ID")
        position = item.get("position")
        if not _is_int(position) or position < 1:
            raise InvalidInput(f"Invalid {noun} position")
        pairs.append((item_id, position))
    ids = [p[0] for p in pairs]
    if len(set(ids)) != len(ids):
        raise InvalidInput(f"Duplicate {noun} ID")
    return pairs


def reorder_positions(db: Session, model, items: Any, noun: str) -> list[dict]:
    """
    Validate items and apply all (id -> position) writes atomically.
    Raises InvalidInput (nothing written) if any id is missing; rolls back on any DB error.
    Returns [{"id", "position"}] in request order.
    """
    pairs = validate_reorder_items(items, noun)
    ids = [p[0] for p in pairs]
    module_of = dict(db.execute(select(model.id, model.module_id).where(model.id.in_(ids))).all())
    missing = [i for i in ids if i not in module_of]
    if missing:
        raise InvalidInput(f"{noun.capitalize()}s not found: {', '.join(str(i) for i in missing)}")
    # positions are per module, so one batch may renumber several modules from 1
    seen: set[tuple[int, int]] = set()
    for item_id, position in pairs:
        key = (module_of[item_id], position)
        if key in seen:
            raise InvalidInput(f"Duplicate {noun} position")
        seen.add(key)
    try:
        for item_id, position in pairs:
            db.execute(update(model).where(model.id == item_id).values(position=position))
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Reordered %s %s(s): %s", len(pairs), noun, ids)
    rows = db.execute(select(model.id, model.position).where(model.id.in_(ids))).all()
    by_id = {r.id: r.position for r in rows}
    return [{"id": i, "position": by_id[i]} for i in ids]
