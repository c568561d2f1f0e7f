"""Lookup and formatting helpers shared by the clinic services."""
from __future__ import annotations

import uuid
from typing import Any, Iterable, Optional

import bleach
from django.db import models
from rest_framework.exceptions import NotFound


def get_or_404(model: type[models.Model], pk: Any, label: Optional[str] = None) -> models.Model:
    """Fetch ``model`` by primary key or raise ``NotFound``.

    Malformed identifiers are treated the same as unknown ones.
    """
    label = label or model._meta.verbose_name.capitalize()
    try:
        key = uuid.UUID(str(pk))
    except (TypeError, ValueError):
        raise NotFound(f'{label} not found')
    obj = model.objects.filter(pk=key).first()
    if obj is None:
        raise NotFound(f'{label} not found')
    return obj


def parse_uuid(value: Any) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


def clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return bleach.clean(str(value).strip(), strip=True)


def iso(value) -> Optional[str]:
    return value.isoformat() if value else None


def money(value) -> Optional[float]:
    return float(value) if value is not None else None


def resolve(model: type[models.Model], ids: Iterable[Any], formatter) -> dict:
    """Load the referenced rows once and format them by primary key.

    Ids whose target has been deleted are simply absent from the result,
    so callers see ``None`` for a dangling reference.
    """
    wanted = {i for i in ids if i is not None}
    if not wanted:
        return {}
    return {pk: formatter(obj) for pk, obj in model.objects.in_bulk(list(wanted)).items()}


def pick(fields: Iterable[str], full: dict) -> dict:
    return {'_id': full['_id'], **{f: full.get(f) for f in fields}}
