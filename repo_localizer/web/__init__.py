"""Web service for translation requests and analysis jobs."""
