"""CRUD operations for ingestion jobs using FastCRUD."""

from fastcrud import FastCRUD

from .models import IngestionJob

job_crud: FastCRUD = FastCRUD(IngestionJob)
