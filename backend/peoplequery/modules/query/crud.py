"""CRUD operations for the query log using FastCRUD."""

from fastcrud import FastCRUD

from .models import QueryHistory

query_history_crud: FastCRUD = FastCRUD(QueryHistory)
