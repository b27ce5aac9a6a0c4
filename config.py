import os
import sys

# ====================================================================================
# ENVIRONMENT CONFIGURATION: PROD / STAGE / LOCAL isolation through prefixes
# ====================================================================================
# Every variable is read with the environment prefix:
#   - PROD: PROD_MONOBANK_TOKEN, PROD_MONOBANK_API_URL
#   - STAGE: STAGE_MONOBANK_TOKEN (test token from https://api.monobank.ua/)
#   - LOCAL: LOCAL_MONOBANK_TOKEN
#
# The client never reads these values on its own. Callers opt in through
# MonoAcquiring.from_config() or pass the token explicitly.
# ====================================================================================

APP_ENV = os.getenv("APP_ENV", "prod").lower()
if APP_ENV not in ("prod", "stage", "local"):
    print(f"ERROR: Invalid APP_ENV={APP_ENV}. Must be one of: prod, stage, local", file=sys.stderr)
    sys.exit(1)

IS_LOCAL = APP_ENV == "local"
IS_STAGE = APP_ENV == "stage"
IS_PROD = APP_ENV == "prod"


def env(key: str, default: str = "") -> str:
    """
    Read an environment variable with the environment prefix

    Args:
        key: Variable name without prefix (e.g. "MONOBANK_TOKEN")
        default: Value returned when the variable is not set

    Returns:
        Value of the prefixed variable (e.g. "STAGE_MONOBANK_TOKEN")

    Example:
        env("MONOBANK_TOKEN") -> value of STAGE_MONOBANK_TOKEN (APP_ENV=stage)
        env("MONOBANK_API_TIMEOUT", default="5.0") -> "5.0" if not set
    """
    env_key = f"{APP_ENV.upper()}_{key}"
    return os.getenv(env_key, default)


# ====================================================================================
# MONOBANK ACQUIRING
# ====================================================================================
# Token from the merchant cabinet https://fop.monobank.ua/ or a test token.
# Secrets are never logged.
MONOBANK_TOKEN = env("MONOBANK_TOKEN") or None
MONOBANK_API_URL = env("MONOBANK_API_URL") or "https://api.monobank.ua"

try:
    MONOBANK_API_TIMEOUT = float(env("MONOBANK_API_TIMEOUT", default="5.0"))
except ValueError:
    print(
        f"WARNING: {APP_ENV.upper()}_MONOBANK_API_TIMEOUT is not a number, using 5.0",
        file=sys.stderr,
    )
    MONOBANK_API_TIMEOUT = 5.0

MONOBANK_ENABLED = bool(MONOBANK_TOKEN)

# Logging
LOG_LEVEL = env("LOG_LEVEL", default="INFO").upper()
