from django.contrib import admin
from .models import Author, Book, BookInstance, Genre
# Register your models here.

class BooksInline(admin.TabularInline):
    model = Book
    fields = ("title", "isbn")
    extra = 0


class AuthorAdmin(admin.ModelAdmin):
    list_display = ("family_name", "first_name", "date_of_birth", "date_of_death")
    fields = ["first_name", "family_name", ("date_of_birth", "date_of_death")]
    inlines = [BooksInline]


class BooksInstanceInline(admin.TabularInline):
    model = BookInstance
    extra = 0


class BookAdmin(admin.ModelAdmin):
    list_display = ("title", "author", "isbn")
    inlines = [BooksInstanceInline]


class BookInstanceAdmin(admin.ModelAdmin):
    list_display = ("book", "status", "due_back", "id")
    list_filter = ("status", "due_back")


admin.site.register(Author, AuthorAdmin)
admin.site.register(Book, BookAdmin)
admin.site.register(BookInstance, BookInstanceAdmin)
admin.site.register(Genre)
