"""
Async storage access for the catalog.

Workflows never touch the ORM directly: they receive a storage handle and
call the generic find/insert/update/delete operations below. Each operation
is plain synchronous ORM code run through ``sync_to_async`` so that
multi-statement writes can sit inside a single transaction.
"""
import logging
from contextlib import contextmanager

from asgiref.sync import sync_to_async
from django.conf import settings
from django.core.exceptions import ObjectDoesNotExist
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError, IntegrityError, transaction
from django.utils.module_loading import import_string

from .exceptions import ConflictError, NotFoundError, StorageError

logger = logging.getLogger(__name__)

DEFAULT_STORAGE = "catalog.storage.Storage"

# Raised by the ORM when a lookup value can't be coerced to the field type
MALFORMED_LOOKUP = (ValueError, TypeError, DjangoValidationError)


@contextmanager
def translate_errors(model):
    try:
        yield
    except IntegrityError as e:
        # ProtectedError is an IntegrityError too
        logger.info("%s write refused: %s", model.__name__, e)
        raise ConflictError(f"{model._meta.verbose_name.capitalize()} conflicts with existing records.") from e
    except DatabaseError as e:
        logger.error("%s storage failure: %s", model.__name__, e)
        raise StorageError(f"Could not access {model._meta.verbose_name_plural}.") from e


def _queryset(model, filters=None, populate=()):
    queryset = model.objects.all()
    if filters:
        queryset = queryset.filter(**filters)

    joined, prefetched = [], []
    for name in populate:
        if model._meta.get_field(name).many_to_many:
            prefetched.append(name)
        else:
            joined.append(name)
    if joined:
        queryset = queryset.select_related(*joined)
    if prefetched:
        queryset = queryset.prefetch_related(*prefetched)
    return queryset


class Storage:
    """Django ORM implementation of the catalog storage contract."""

    @sync_to_async
    def find_all(self, model, filters=None, order_by=(), populate=()):
        with translate_errors(model):
            try:
                queryset = _queryset(model, filters, populate)
            except MALFORMED_LOOKUP:
                return []
            if order_by:
                queryset = queryset.order_by(*order_by)
            return list(queryset)

    @sync_to_async
    def find_by_id(self, model, pk, populate=()):
        with translate_errors(model):
            try:
                return _queryset(model, populate=populate).get(pk=pk)
            except (ObjectDoesNotExist, *MALFORMED_LOOKUP):
                return None

    @sync_to_async
    def find_one(self, model, filters, populate=()):
        with translate_errors(model):
            try:
                return _queryset(model, filters, populate).first()
            except MALFORMED_LOOKUP:
                return None

    @sync_to_async
    def count(self, model, filters=None):
        with translate_errors(model):
            return _queryset(model, filters).count()

    @sync_to_async
    def insert(self, entity, relations=None):
        """Saves a new record and its many-to-many links; returns its id."""
        model = type(entity)
        with translate_errors(model), transaction.atomic():
            entity.save(force_insert=True)
            for name, ids in (relations or {}).items():
                getattr(entity, name).set(ids)
        return entity.pk

    @sync_to_async
    def update_by_id(self, model, pk, entity, relations=None):
        """Replaces the record stored under ``pk`` with ``entity``."""
        with translate_errors(model), transaction.atomic():
            try:
                exists = model.objects.filter(pk=pk).exists()
            except MALFORMED_LOOKUP:
                exists = False
            if not exists:
                raise NotFoundError(f"{model._meta.verbose_name.capitalize()} not found")

            entity.pk = model._meta.pk.to_python(pk)
            entity.save(force_update=True)
            for name, ids in (relations or {}).items():
                getattr(entity, name).set(ids)
        return entity

    @sync_to_async
    def delete_by_id(self, model, pk):
        with translate_errors(model), transaction.atomic():
            try:
                model.objects.filter(pk=pk).delete()
            except MALFORMED_LOOKUP:
                pass


def get_storage():
    """Builds the storage handle named by the CATALOG_STORAGE setting."""
    return import_string(getattr(settings, 'CATALOG_STORAGE', DEFAULT_STORAGE))()
