from asgiref.sync import async_to_sync
from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
import requests

from catalog import validation
from catalog.controllers import Render, book as book_controller
from catalog.controllers.author import AUTHOR_RULES
from catalog.controllers.genre import GENRE_RULES
from catalog.exceptions import ConflictError
from catalog.models import Author, Genre
from catalog.storage import get_storage

OPENLIBRARY_URL = getattr(settings, 'OPENLIBRARY_URL', "https://openlibrary.org/search.json")
OPENLIBRARY_TIMEOUT = getattr(settings, 'OPENLIBRARY_TIMEOUT', 10)
MAX_GENRES = 3
NO_SUMMARY = "No summary available."


class Command(BaseCommand):
    help = "Fetches a book from OpenLibrary by ISBN and adds it, its author and genres to the catalog."

    def add_arguments(self, parser):
        parser.add_argument(
            'isbn',
            type=str,
            help="The ISBN-10 or ISBN-13 of the book being imported."
        )

    def fetch_book_data(self, isbn):
        """Queries OpenLibrary and returns the catalog fields for the first match."""
        headers = {
            'User-Agent': 'LocalLibrary/1.0 (catalog import)'
        }
        params = {'limit': 1, 'fields': 'title,author_name,subject,first_sentence', 'isbn': isbn}

        try:
            response = requests.get(OPENLIBRARY_URL, params=params, headers=headers, timeout=OPENLIBRARY_TIMEOUT)
            response.raise_for_status()
            documents = response.json().get('docs', [])
        except requests.exceptions.Timeout:
            raise CommandError(f"API Request timed out for: {isbn}")
        except requests.exceptions.RequestException as e:
            raise CommandError(f'Error fetching "{isbn}": {e}')

        if not documents:
            raise CommandError(f"No results found for ISBN: {isbn}")
        result = documents[0]

        # Single-word names fill both name fields
        author_names = result.get('author_name', [])
        author_name = author_names[0] if author_names else 'Unknown Author'
        name_parts = author_name.split(" ")
        first_name = " ".join(name_parts[:-1]) or name_parts[0]
        family_name = name_parts[-1] if len(name_parts) > 1 else name_parts[0]

        summary = result.get('first_sentence') or NO_SUMMARY
        if isinstance(summary, list):
            summary = " ".join(summary)

        # Normalize subjects so "fiction" and "Fiction" land on the same genre
        subjects = []
        for subject in result.get('subject', []):
            clean_name = subject.strip().title()
            if clean_name and clean_name not in subjects:
                subjects.append(clean_name)

        return {
            'title': result.get('title', ''),
            'first_name': first_name,
            'family_name': family_name,
            'summary': summary,
            'isbn': isbn,
            'subjects': subjects[:MAX_GENRES],
        }

    async def get_or_create_author(self, storage, first_name, family_name):
        checked = validation.validate(
            {'first_name': first_name, 'family_name': family_name}, AUTHOR_RULES
        )
        if not checked.is_valid:
            raise CommandError("; ".join(error.message for error in checked.errors))

        lookup = {'first_name': checked.cleaned['first_name'], 'family_name': checked.cleaned['family_name']}
        author = await storage.find_one(Author, lookup)
        if author is None:
            author = Author(**lookup)
            await storage.insert(author)
            self.stdout.write(self.style.SUCCESS(f"  ✓ Created author: {author.name}"))
        return author

    async def get_or_create_genres(self, storage, subjects):
        genre_ids = []
        for subject in subjects:
            checked = validation.validate({'name': subject}, GENRE_RULES)
            if not checked.is_valid:
                self.stdout.write(self.style.WARNING(f"  Skipping genre {subject!r}"))
                continue

            name = checked.cleaned['name']
            genre = await storage.find_one(Genre, {'name': name})
            if genre is None:
                genre = Genre(name=name)
                try:
                    await storage.insert(genre)
                except ConflictError:
                    genre = await storage.find_one(Genre, {'name': name})
            genre_ids.append(str(genre.pk))
        return genre_ids

    async def save_book(self, storage, book_data):
        author = await self.get_or_create_author(storage, book_data['first_name'], book_data['family_name'])
        genre_ids = await self.get_or_create_genres(storage, book_data['subjects'])

        return await book_controller.book_create(storage, {
            'title': book_data['title'],
            'author': str(author.pk),
            'summary': book_data['summary'],
            'isbn': book_data['isbn'],
            'genre': genre_ids,
        })

    def handle(self, *args, **options):
        isbn = options['isbn'].replace("-", "").strip()

        book_data = self.fetch_book_data(isbn)
        self.stdout.write(f"Fetched data for: {book_data['title']}")

        outcome = async_to_sync(self.save_book)(get_storage(), book_data)
        if isinstance(outcome, Render):
            messages = "; ".join(error.message for error in outcome.context['errors'])
            raise CommandError(f'Could not import "{book_data["title"]}": {messages}')

        self.stdout.write(self.style.SUCCESS(f"Imported '{book_data['title']}' at {outcome.url}"))
