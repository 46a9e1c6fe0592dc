import pytest

from catalog.controllers import Redirect, Render, book as book_controller
from catalog.exceptions import NotFoundError, ValidationError
from catalog.models import Book, BookInstance, Genre

pytestmark = pytest.mark.django_db


def book_form(for_author, **overrides):
    data = {
        "title": "Stardust",
        "author": str(for_author.pk),
        "summary": "A young man crosses the wall into Faerie.",
        "isbn": "0061142026",
    }
    data.update(overrides)
    return data


def test_index_counts(run, storage, copy):
    BookInstance.objects.create(book=copy.book, imprint="Gollancz, 2008")

    outcome = run(book_controller.index, storage)

    assert outcome.context["data"] == {
        "book_count": 1,
        "book_instance_count": 2,
        "book_instance_available_count": 1,
        "author_count": 1,
        "genre_count": 1,
    }


def test_create_book_with_single_genre(run, storage, author, genre):
    outcome = run(book_controller.book_create, storage, book_form(author, genre=str(genre.pk)))

    book = Book.objects.get()
    assert outcome == Redirect(book.url)
    assert book.author == author
    assert list(book.genre.all()) == [genre]


def test_create_book_without_genre(run, storage, author):
    run(book_controller.book_create, storage, book_form(author))
    assert not Book.objects.get().genre.exists()


def test_create_book_errors_keep_selected_genres(run, storage, author, genre):
    poetry = Genre.objects.create(name="Poetry")

    outcome = run(book_controller.book_create, storage, book_form(author, title="", genre=[str(poetry.pk)]))

    assert isinstance(outcome, Render)
    assert outcome.template == "catalog/book_form.html"
    assert outcome.context["errors"] == [ValidationError("title", "Title must not be empty")]
    assert outcome.context["authors"] == [author]
    assert outcome.context["selected_author"] == str(author.pk)
    assert outcome.context["genre_choices"] == [
        {"genre": genre, "checked": False},
        {"genre": poetry, "checked": True},
    ]
    assert not Book.objects.exists()


def test_every_invalid_field_is_reported(run, storage):
    outcome = run(book_controller.book_create, storage, {"title": "", "author": "", "summary": " ", "isbn": "123"})

    assert [error.field for error in outcome.context["errors"]] == ["title", "author", "summary", "isbn"]


def test_unknown_references_are_reported(run, storage, author):
    outcome = run(book_controller.book_create, storage, book_form(author, author="9999", genre=["9998", "9997"]))

    assert outcome.context["errors"] == [
        ValidationError("author", "Author does not exist"),
        ValidationError("genre", "Genre does not exist"),
    ]
    assert not Book.objects.exists()


def test_detail_resolves_references(run, storage, book, copy):
    outcome = run(book_controller.book_detail, storage, book.pk)

    assert outcome.context["title"] == book.title
    assert outcome.context["book"].author.name == "Rothfuss, Patrick"
    assert [g.name for g in outcome.context["book"].genre.all()] == ["Fantasy"]
    assert outcome.context["book_instances"] == [copy]


def test_list_resolves_author(run, storage, book):
    outcome = run(book_controller.book_list, storage)
    assert outcome.context["book_list"][0].author.name == "Rothfuss, Patrick"


def test_update_form_marks_current_genres(run, storage, book, genre):
    Genre.objects.create(name="Poetry")

    outcome = run(book_controller.book_update_form, storage, book.pk)

    assert outcome.context["book"] == book
    assert outcome.context["selected_author"] == str(book.author.pk)
    assert [(c["genre"].name, c["checked"]) for c in outcome.context["genre_choices"]] == [
        ("Fantasy", True),
        ("Poetry", False),
    ]


def test_update_form_for_missing_book(run, storage):
    with pytest.raises(NotFoundError):
        run(book_controller.book_update_form, storage, 9999)


def test_update_keeps_identifier_and_replaces_genres(run, storage, book, author):
    poetry = Genre.objects.create(name="Poetry")

    outcome = run(book_controller.book_update, storage, book.pk, book_form(author, genre=str(poetry.pk)))

    assert outcome == Redirect(book.url)
    updated = Book.objects.get()
    assert updated.pk == book.pk
    assert updated.title == "Stardust"
    assert list(updated.genre.all()) == [poetry]


def test_update_enforces_isbn_length(run, storage, book, author):
    outcome = run(book_controller.book_update, storage, book.pk, book_form(author, isbn="12345"))

    assert outcome.context["errors"] == [ValidationError("isbn", "ISBN must be 10-13 characters long")]
    assert Book.objects.get().isbn == "9780756404741"


def test_update_missing_book(run, storage, author):
    with pytest.raises(NotFoundError):
        run(book_controller.book_update, storage, 9999, book_form(author))


def test_delete_book_with_copies_changes_nothing(run, storage, book, copy):
    outcome = run(book_controller.book_delete, storage, book.pk)

    assert outcome.template == "catalog/book_delete.html"
    assert outcome.context["book"] == book
    assert outcome.context["book_instances"] == [copy]
    assert Book.objects.filter(pk=book.pk).exists()
    assert BookInstance.objects.get() == copy


def test_delete_book_without_copies(run, storage, book):
    outcome = run(book_controller.book_delete, storage, book.pk)

    assert outcome == Redirect("/catalog/books/")
    with pytest.raises(NotFoundError):
        run(book_controller.book_detail, storage, book.pk)


def test_delete_form_for_missing_book(run, storage):
    assert run(book_controller.book_delete_form, storage, 9999) == Redirect("/catalog/books/")


def test_invalid_update_of_missing_book(run, storage, author):
    with pytest.raises(NotFoundError):
        run(book_controller.book_update, storage, 9999, book_form(author, title=""))


def test_invalid_update_keeps_submitted_genres(run, storage, book, author, genre):
    outcome = run(book_controller.book_update, storage, book.pk, book_form(author, isbn="1", genre=str(genre.pk)))

    assert outcome.template == "catalog/book_form.html"
    assert outcome.context["genre_choices"] == [{"genre": genre, "checked": True}]
