"""FastAPI control and inspection API for a running bot session."""
