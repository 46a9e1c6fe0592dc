from django.db import models
from django.urls import reverse


class Author(models.Model):
    """
    Stores a person credited with one or more books.
    """
    first_name = models.CharField(max_length=100)
    family_name = models.CharField(max_length=100)
    date_of_birth = models.DateField(null=True, blank=True)
    date_of_death = models.DateField('died', null=True, blank=True)

    class Meta:
        ordering = ['family_name', 'first_name']

    @property
    def name(self):
        # Both parts are needed for the "Family, First" form
        if self.first_name and self.family_name:
            return f"{self.family_name}, {self.first_name}"
        return ""

    @property
    def lifespan(self):
        birth = self.date_of_birth.year if self.date_of_birth else ""
        death = self.date_of_death.year if self.date_of_death else ""
        if not birth and not death:
            return ""
        return f"{birth} - {death}"

    @property
    def url(self):
        return reverse('author-detail', args=[str(self.pk)])

    def get_absolute_url(self):
        return self.url

    def __str__(self):
        return self.name


class Genre(models.Model):
    """
    Stores a book category (e.g., 'Fiction', 'Poetry').
    Names are unique at the database level.
    """
    name = models.CharField(max_length=100, unique=True)

    class Meta:
        ordering = ['name']

    @property
    def url(self):
        return reverse('genre-detail', args=[str(self.pk)])

    def get_absolute_url(self):
        return self.url

    def __str__(self):
        return self.name


class Book(models.Model):
    """
    Stores a title in the catalog. Physical copies live in BookInstance.
    """
    title = models.CharField(max_length=200)

    # An author with books cannot be deleted out from under them
    author = models.ForeignKey(Author, on_delete=models.PROTECT, related_name="books")

    summary = models.TextField(max_length=1000)
    isbn = models.CharField('ISBN', max_length=13)
    genre = models.ManyToManyField(Genre, related_name="books", blank=True)

    class Meta:
        ordering = ['title']

    @property
    def url(self):
        return reverse('book-detail', args=[str(self.pk)])

    def get_absolute_url(self):
        return self.url

    def __str__(self):
        return f"{self.title}"


class BookInstance(models.Model):
    """
    Stores one borrowable copy of a Book.
    """

    class Status(models.TextChoices):
        AVAILABLE = 'Available'
        MAINTENANCE = 'Maintenance'
        LOANED = 'Loaned'
        RESERVED = 'Reserved'

    book = models.ForeignKey(Book, on_delete=models.PROTECT, related_name="instances")
    imprint = models.CharField(max_length=200)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.MAINTENANCE)
    due_back = models.DateField(null=True, blank=True)

    class Meta:
        verbose_name = "Book instance"
        ordering = ['due_back']

    @property
    def url(self):
        return reverse('bookinstance-detail', args=[str(self.pk)])

    def get_absolute_url(self):
        return self.url

    def __str__(self):
        return f"{self.pk} ({self.imprint})"
