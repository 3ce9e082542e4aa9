"""CRUD operations for discovered schemas using FastCRUD."""

from fastcrud import FastCRUD

from .models import DatabaseSchema

schema_crud: FastCRUD = FastCRUD(DatabaseSchema)
