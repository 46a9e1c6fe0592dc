from django.core.management.base import BaseCommand
from catalog.models import Book

class Command(BaseCommand):
    help = "Lists all books currently in the catalog with their authors, genres and copies."

    def handle(self, *args, **options):
        self.stdout.write(self.style.NOTICE("--- Current Books in Catalog ---"))

        books = Book.objects.select_related('author').prefetch_related('genre', 'instances').order_by('title')

        if not books:
            self.stdout.write(self.style.WARNING("The catalog contains no books."))
            return

        for book in books:

            # Print details in a clear block format
            self.stdout.write("-" * 50)
            self.stdout.write(self.style.SUCCESS(f"TITLE: {book.title}"))
            self.stdout.write(f"AUTHOR: {book.author.name or 'N/A'}")
            self.stdout.write(f"ISBN: {book.isbn}")
            genres = ", ".join(genre.name for genre in book.genre.all())
            self.stdout.write(f"GENRES: {genres or 'N/A'}")
            self.stdout.write(f"COPIES: {len(book.instances.all())}")

        self.stdout.write("-" * 50)
        self.stdout.write(self.style.SUCCESS(f"Total Books: {books.count()}"))
