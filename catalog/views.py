from django.http import Http404
from django.shortcuts import redirect, render
from django.views.decorators.http import require_GET, require_http_methods

from .controllers import Redirect, author, book, bookinstance, genre
from .exceptions import NotFoundError
from .storage import get_storage

# --- Utility Functions ---

def form_data(post):
    """
    Flattens a QueryDict: keys posted once map to a string, keys posted
    several times map to the list of their values.
    """
    return {key: values[0] if len(values) == 1 else values for key, values in post.lists()}


async def respond(request, pending):
    try:
        outcome = await pending
    except NotFoundError as e:
        raise Http404(e.message) from e

    if isinstance(outcome, Redirect):
        return redirect(outcome.url)
    return render(request, outcome.template, outcome.context, status=outcome.status)


async def dispatch_form(request, show, submit, *args):
    """GET renders the form, POST runs the submission workflow."""
    storage = get_storage()
    if request.method == 'POST':
        return await respond(request, submit(storage, *args, form_data(request.POST)))
    return await respond(request, show(storage, *args))


async def dispatch_delete(request, show, submit, pk):
    storage = get_storage()
    if request.method == 'POST':
        return await respond(request, submit(storage, pk))
    return await respond(request, show(storage, pk))


# --- Home ---

@require_GET
async def index(request):
    return await respond(request, book.index(get_storage()))


# --- Books ---

@require_GET
async def book_list(request):
    return await respond(request, book.book_list(get_storage()))


@require_GET
async def book_detail(request, pk):
    return await respond(request, book.book_detail(get_storage(), pk))


@require_http_methods(["GET", "POST"])
async def book_create(request):
    return await dispatch_form(request, book.book_create_form, book.book_create)


@require_http_methods(["GET", "POST"])
async def book_update(request, pk):
    return await dispatch_form(request, book.book_update_form, book.book_update, pk)


@require_http_methods(["GET", "POST"])
async def book_delete(request, pk):
    return await dispatch_delete(request, book.book_delete_form, book.book_delete, pk)


# --- Authors ---

@require_GET
async def author_list(request):
    return await respond(request, author.author_list(get_storage()))


@require_GET
async def author_detail(request, pk):
    return await respond(request, author.author_detail(get_storage(), pk))


@require_http_methods(["GET", "POST"])
async def author_create(request):
    return await dispatch_form(request, author.author_create_form, author.author_create)


@require_http_methods(["GET", "POST"])
async def author_update(request, pk):
    return await dispatch_form(request, author.author_update_form, author.author_update, pk)


@require_http_methods(["GET", "POST"])
async def author_delete(request, pk):
    return await dispatch_delete(request, author.author_delete_form, author.author_delete, pk)


# --- Genres ---

@require_GET
async def genre_list(request):
    return await respond(request, genre.genre_list(get_storage()))


@require_GET
async def genre_detail(request, pk):
    return await respond(request, genre.genre_detail(get_storage(), pk))


@require_http_methods(["GET", "POST"])
async def genre_create(request):
    return await dispatch_form(request, genre.genre_create_form, genre.genre_create)


@require_http_methods(["GET", "POST"])
async def genre_update(request, pk):
    return await dispatch_form(request, genre.genre_update_form, genre.genre_update, pk)


@require_http_methods(["GET", "POST"])
async def genre_delete(request, pk):
    return await dispatch_delete(request, genre.genre_delete_form, genre.genre_delete, pk)


# --- Book copies ---

@require_GET
async def bookinstance_list(request):
    return await respond(request, bookinstance.bookinstance_list(get_storage()))


@require_GET
async def bookinstance_detail(request, pk):
    return await respond(request, bookinstance.bookinstance_detail(get_storage(), pk))


@require_http_methods(["GET", "POST"])
async def bookinstance_create(request):
    return await dispatch_form(
        request, bookinstance.bookinstance_create_form, bookinstance.bookinstance_create
    )


@require_http_methods(["GET", "POST"])
async def bookinstance_update(request, pk):
    return await dispatch_form(
        request, bookinstance.bookinstance_update_form, bookinstance.bookinstance_update, pk
    )


@require_http_methods(["GET", "POST"])
async def bookinstance_delete(request, pk):
    return await dispatch_delete(
        request, bookinstance.bookinstance_delete_form, bookinstance.bookinstance_delete, pk
    )
