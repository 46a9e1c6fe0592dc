import pytest

from catalog.controllers import Redirect, Render, genre as genre_controller
from catalog.exceptions import NotFoundError, ValidationError
from catalog.models import Genre
from catalog.storage import Storage

pytestmark = pytest.mark.django_db


class StaleLookupStorage(Storage):
    """Misses the first name lookup, as if a concurrent create had not committed yet."""

    def __init__(self):
        self.missed = False

    async def find_one(self, model, filters, populate=()):
        if not self.missed:
            self.missed = True
            return None
        return await super().find_one(model, filters, populate)


def test_create_genre(run, storage):
    outcome = run(genre_controller.genre_create, storage, {"name": "  Science Fiction "})

    genre = Genre.objects.get()
    assert genre.name == "Science Fiction"
    assert outcome == Redirect(genre.url)


def test_create_blank_genre_rerenders_form(run, storage):
    outcome = run(genre_controller.genre_create, storage, {"name": "   "})

    assert isinstance(outcome, Render)
    assert outcome.template == "catalog/genre_form.html"
    assert outcome.context["errors"] == [ValidationError("name", "Genre name must not be empty")]
    assert not Genre.objects.exists()


def test_create_existing_name_redirects_to_existing(run, storage, genre):
    outcome = run(genre_controller.genre_create, storage, {"name": "Fantasy"})

    assert outcome == Redirect(genre.url)
    assert Genre.objects.count() == 1


def test_create_losing_a_race_redirects_to_winner(run, genre):
    outcome = run(genre_controller.genre_create, StaleLookupStorage(), {"name": "Fantasy"})

    assert outcome == Redirect(genre.url)
    assert Genre.objects.count() == 1


def test_detail_lists_books_in_genre(run, storage, book, genre):
    outcome = run(genre_controller.genre_detail, storage, genre.pk)

    assert outcome.context["genre"] == genre
    assert outcome.context["genre_books"] == [book]


def test_detail_missing_genre(run, storage):
    with pytest.raises(NotFoundError) as excinfo:
        run(genre_controller.genre_detail, storage, 9999)
    assert excinfo.value.status == 404


def test_list_is_sorted_by_name(run, storage):
    Genre.objects.create(name="Poetry")
    Genre.objects.create(name="Horror")

    outcome = run(genre_controller.genre_list, storage)

    assert [genre.name for genre in outcome.context["genre_list"]] == ["Horror", "Poetry"]


def test_update_keeps_identifier(run, storage, genre):
    outcome = run(genre_controller.genre_update, storage, str(genre.pk), {"name": "Epic Fantasy"})

    assert outcome == Redirect(genre.url)
    assert list(Genre.objects.values_list("pk", "name")) == [(genre.pk, "Epic Fantasy")]


def test_update_to_own_name_is_allowed(run, storage, genre):
    outcome = run(genre_controller.genre_update, storage, genre.pk, {"name": "Fantasy"})
    assert outcome == Redirect(genre.url)


def test_update_to_taken_name_rerenders_original(run, storage, genre):
    poetry = Genre.objects.create(name="Poetry")

    outcome = run(genre_controller.genre_update, storage, poetry.pk, {"name": "Fantasy"})

    assert isinstance(outcome, Render)
    assert outcome.context["genre"] == poetry
    assert outcome.context["genre"].name == "Poetry"
    assert outcome.context["errors"] == [ValidationError("name", "A genre with this name already exists")]
    assert Genre.objects.get(pk=poetry.pk).name == "Poetry"


def test_update_form_for_missing_genre(run, storage):
    with pytest.raises(NotFoundError):
        run(genre_controller.genre_update_form, storage, 9999)


def test_update_missing_genre(run, storage):
    with pytest.raises(NotFoundError):
        run(genre_controller.genre_update, storage, 9999, {"name": "Poetry"})


def test_delete_genre_still_on_books_is_refused(run, storage, book, genre):
    outcome = run(genre_controller.genre_delete, storage, genre.pk)

    assert outcome.template == "catalog/genre_delete.html"
    assert outcome.context["genre_books"] == [book]
    assert Genre.objects.filter(pk=genre.pk).exists()


def test_delete_unused_genre(run, storage, genre):
    outcome = run(genre_controller.genre_delete, storage, genre.pk)

    assert outcome == Redirect("/catalog/genres/")
    assert not Genre.objects.exists()


def test_delete_missing_genre_redirects_to_list(run, storage):
    assert run(genre_controller.genre_delete, storage, 9999) == Redirect("/catalog/genres/")
    assert run(genre_controller.genre_delete_form, storage, 9999) == Redirect("/catalog/genres/")


def test_name_that_escapes_past_the_column_limit_is_rejected(run, storage):
    outcome = run(genre_controller.genre_create, storage, {"name": "&" * 100})

    assert outcome.context["errors"] == [ValidationError("name", "Genre name must be at most 100 characters")]
    assert not Genre.objects.exists()


def test_escaped_name_that_fits_is_stored(run, storage):
    run(genre_controller.genre_create, storage, {"name": "&" * 20})
    assert Genre.objects.get().name == "&amp;" * 20


def test_invalid_update_of_missing_genre(run, storage):
    with pytest.raises(NotFoundError):
        run(genre_controller.genre_update, storage, 9999, {"name": ""})
