"""SQLAlchemy persistence for fuzzy-searchable entities."""
