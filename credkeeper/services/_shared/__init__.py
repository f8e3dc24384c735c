"""Types, errors and ports shared by the services."""
