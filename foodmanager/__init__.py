"""Food record manager: FastAPI pages and JSON API over SQLite."""
