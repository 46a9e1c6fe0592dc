import logging

from django.urls import reverse

from catalog import validation
from catalog.exceptions import NotFoundError
from catalog.models import Book, BookInstance

from .common import Redirect, Render, verify_references

logger = logging.getLogger(__name__)

BOOKINSTANCE_RULES = (
    validation.required("book", "Book must not be empty"),
    validation.required(
        "imprint", "Imprint must not be empty",
        max_length=200, length_message="Imprint must be at most 200 characters",
    ),
    validation.choice(
        "status", BookInstance.Status.values, "Invalid status",
        default=BookInstance.Status.MAINTENANCE,
    ),
    validation.optional_date("due_back"),
)

BOOKINSTANCE_REFERENCES = {
    "book": (Book, "Book does not exist"),
}


async def bookinstance_list(storage):
    copies = await storage.find_all(
        BookInstance, order_by=("book__title", "imprint"), populate=("book",)
    )
    return Render("catalog/bookinstance_list.html", {
        "title": "Book Instance List",
        "bookinstance_list": copies,
    })


async def bookinstance_detail(storage, pk):
    copy = await storage.find_by_id(BookInstance, pk, populate=("book",))
    if copy is None:
        raise NotFoundError("Book copy not found")
    return Render("catalog/bookinstance_detail.html", {
        "title": f"Copy: {copy.book.title}",
        "bookinstance": copy,
    })


async def _form(storage, title, copy=None, errors=()):
    books = await storage.find_all(Book, order_by=("title",))
    return Render("catalog/bookinstance_form.html", {
        "title": title,
        "book_list": books,
        "bookinstance": copy,
        "selected_book": str(copy.book_id) if copy is not None and copy.book_id else "",
        "selected_status": copy.status if copy is not None else BookInstance.Status.MAINTENANCE,
        "status_choices": BookInstance.Status.values,
        "errors": list(errors),
    })


async def _validate(storage, data):
    result = validation.validate(data, BOOKINSTANCE_RULES)
    return await verify_references(storage, result, BOOKINSTANCE_REFERENCES)


def _build(cleaned, pk=None):
    return BookInstance(
        pk=pk,
        book_id=cleaned["book"] or None,
        imprint=cleaned["imprint"],
        status=cleaned["status"],
        due_back=cleaned["due_back"],
    )


async def bookinstance_create_form(storage):
    return await _form(storage, "Create BookInstance")


async def bookinstance_create(storage, data):
    result = await _validate(storage, data)
    copy = _build(result.cleaned)

    if not result.is_valid:
        return await _form(storage, "Create BookInstance", copy, result.errors)

    await storage.insert(copy)
    logger.info("Created copy %s of book %s", copy.pk, copy.book_id)
    return Redirect(copy.url)


async def bookinstance_update_form(storage, pk):
    copy = await storage.find_by_id(BookInstance, pk)
    if copy is None:
        raise NotFoundError("Book copy not found")
    return await _form(storage, "Update BookInstance", copy)


async def bookinstance_update(storage, pk, data):
    result = await _validate(storage, data)
    copy = _build(result.cleaned, pk=pk)

    if not result.is_valid:
        if await storage.find_by_id(BookInstance, pk) is None:
            raise NotFoundError("Book copy not found")
        return await _form(storage, "Update BookInstance", copy, result.errors)

    copy = await storage.update_by_id(BookInstance, pk, copy)
    logger.info("Updated copy %s", copy.pk)
    return Redirect(copy.url)


async def bookinstance_delete_form(storage, pk):
    copy = await storage.find_by_id(BookInstance, pk, populate=("book",))
    if copy is None:
        return Redirect(reverse("bookinstances"))
    return Render("catalog/bookinstance_delete.html", {
        "title": "Delete Book Instance",
        "bookinstance": copy,
    })


async def bookinstance_delete(storage, pk):
    await storage.delete_by_id(BookInstance, pk)
    logger.info("Deleted copy %s", pk)
    return Redirect(reverse("bookinstances"))
