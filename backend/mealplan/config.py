import os

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./mealplan.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
    if origin.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
