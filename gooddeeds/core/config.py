import os
from dotenv import load_dotenv

from gooddeeds.utils.env_helper import env_bool, env_list

load_dotenv()


SUPABASE_URL = os.getenv("PUBLIC_SUPABASE_URL", "")
SUPABASE_KEY = os.getenv("SECRET_API_KEY", "")
JWT_SIGN_KEY = os.getenv("SUPABASE_JWT_SECRET", "")
JWT_ISSUER = f"{SUPABASE_URL}/auth/v1"

CORS_ORIGINS = env_list(
    "CORS_ORIGINS", default=["http://localhost:5173", "http://localhost:8080"]
)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_JSON = env_bool("LOG_JSON", default=False)

# Table names in the hosted project
PROFILES_TABLE = "profiles"
FRIENDS_TABLE = "friends"
ROOMS_TABLE = "chat_rooms"
PARTICIPANTS_TABLE = "chat_participants"
MESSAGES_TABLE = "messages"
