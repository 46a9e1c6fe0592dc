import pytest
from asgiref.sync import async_to_sync

from catalog.models import Author, Book, BookInstance, Genre
from catalog.storage import Storage


@pytest.fixture
def storage():
    return Storage()


@pytest.fixture
def run():
    """Runs an async workflow from a synchronous test."""
    def _run(workflow, *args):
        return async_to_sync(workflow)(*args)
    return _run


@pytest.fixture
def author(db):
    return Author.objects.create(first_name="Patrick", family_name="Rothfuss")


@pytest.fixture
def genre(db):
    return Genre.objects.create(name="Fantasy")


@pytest.fixture
def book(author, genre):
    book = Book.objects.create(
        title="The Name of the Wind",
        author=author,
        summary="The tale of Kvothe, told by himself.",
        isbn="9780756404741",
    )
    book.genre.add(genre)
    return book


@pytest.fixture
def copy(book):
    return BookInstance.objects.create(
        book=book, imprint="DAW, 2007", status=BookInstance.Status.AVAILABLE
    )
