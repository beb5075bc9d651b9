import os
from dotenv import load_dotenv

load_dotenv()

db_backend = os.getenv("DB_BACKEND", "postgres")
user = os.getenv("DB_USER", "postgres")
password = os.getenv("DB_PASSWORD", "postgres")
host = os.getenv("DB_HOST", "localhost")
port = os.getenv("DB_PORT", "5432")
db_name = os.getenv("DB_NAME", "hideseek")
sqlite_path = os.getenv("SQLITE_PATH")

redis_host = os.getenv("REDIS_HOST", "redis")
redis_port = int(os.getenv("REDIS_PORT", "6379"))

log_level = os.getenv("LOG_LEVEL", "INFO")

default_max_hand_size = int(os.getenv("DEFAULT_MAX_HAND_SIZE", "6"))
hand_limit_policy = os.getenv("HAND_LIMIT_POLICY", "warn")
superseded_round_ttl_hours = int(os.getenv("SUPERSEDED_ROUND_TTL_HOURS", "24"))

if __name__ == "__main__":
    print(db_backend, user, host, port, db_name, redis_host, redis_port, hand_limit_policy)
