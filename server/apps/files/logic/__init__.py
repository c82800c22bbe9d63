"""Business logic for the file catalog, uploads and thumbnails."""
