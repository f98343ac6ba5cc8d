import os
from dotenv import load_dotenv

load_dotenv()

DEFAULT_COURTS = int(os.getenv("DEFAULT_COURTS", "2"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# comma separated user ids, "*" lets everyone manage tournaments
TOURNAMENT_ADMINS = {
    u.strip() for u in os.getenv("TOURNAMENT_ADMINS", "*").split(",") if u.strip()
}
