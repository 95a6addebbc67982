"""Models — enums and pydantic schemas shared by the engine, storage and API."""
