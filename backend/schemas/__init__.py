from schemas.user import UserRecord, USER_FIELDS

__all__ = ["UserRecord", "USER_FIELDS"]
