from collage_api.app.core.config import settings
from collage_api.app.core.security import issue_token
# lifetime comes from ADMIN_TOKEN_TTL_SECONDS (12 hours by default)
print(issue_token(settings.jwt_secret, settings.token_ttl_seconds))
