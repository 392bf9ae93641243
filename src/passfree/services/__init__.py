from passfree.services.identity import EmailIdentityValidator, IdentityValidator
from passfree.services.login_service import PasswordlessLoginService
from passfree.services.passfree_service import DefaultPassFreeService, PassFreeService
from passfree.services.redemption_store import RedemptionStore, RedisRedemptionStore

__all__ = [
    "DefaultPassFreeService",
    "EmailIdentityValidator",
    "IdentityValidator",
    "PassFreeService",
    "PasswordlessLoginService",
    "RedemptionStore",
    "RedisRedemptionStore",
]
