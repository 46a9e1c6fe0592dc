from django.urls import path
from . import views

urlpatterns = [
    path('', views.index, name='index'),

    path('books/', views.book_list, name='books'),
    path('book/create/', views.book_create, name='book-create'),
    path('book/<int:pk>', views.book_detail, name='book-detail'),
    path('book/<int:pk>/update/', views.book_update, name='book-update'),
    path('book/<int:pk>/delete/', views.book_delete, name='book-delete'),

    path('authors/', views.author_list, name='authors'),
    path('author/create/', views.author_create, name='author-create'),
    path('author/<int:pk>', views.author_detail, name='author-detail'),
    path('author/<int:pk>/update/', views.author_update, name='author-update'),
    path('author/<int:pk>/delete/', views.author_delete, name='author-delete'),

    path('genres/', views.genre_list, name='genres'),
    path('genre/create/', views.genre_create, name='genre-create'),
    path('genre/<int:pk>', views.genre_detail, name='genre-detail'),
    path('genre/<int:pk>/update/', views.genre_update, name='genre-update'),
    path('genre/<int:pk>/delete/', views.genre_delete, name='genre-delete'),

    path('bookinstances/', views.bookinstance_list, name='bookinstances'),
    path('bookinstance/create/', views.bookinstance_create, name='bookinstance-create'),
    path('bookinstance/<int:pk>', views.bookinstance_detail, name='bookinstance-detail'),
    path('bookinstance/<int:pk>/update/', views.bookinstance_update, name='bookinstance-update'),
    path('bookinstance/<int:pk>/delete/', views.bookinstance_delete, name='bookinstance-delete'),
]
