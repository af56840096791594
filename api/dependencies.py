"""API Dependencies - Authentication"""
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError

from domain.auth import User, UserInDB
from domain.exceptions import AuthenticationRequired
from infrastructure.security import decode_access_token, get_password_hash
from api.schemas import TokenData

# auto_error is off so a missing token reaches the service as "no principal"
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token", auto_error=False)

# Mock database for users
# In production, this would be a database call
_fake_users_db = {
    "admin": {
        "username": "admin",
        "full_name": "Admin User",
        "email": "admin@example.com",
        "plain_password": "admin123",  # Will be hashed on first access
        "role": "admin",
        "disabled": False,
        "user_id": "123e4567-e89b-12d3-a456-426614174000"
    },
    "traveler": {
        "username": "traveler",
        "full_name": "Asha Traveler",
        "email": "asha@example.com",
        "plain_password": "traveler123",
        "role": "user",
        "disabled": False,
        "user_id": "5f0c1e7a-2b7d-4c1e-9a51-0d7a3f6b2c11"
    },
    "traveler2": {
        "username": "traveler2",
        "full_name": "Ravi Explorer",
        "email": "ravi@example.com",
        "plain_password": "traveler456",
        "role": "user",
        "disabled": False,
        "user_id": "9b2d4f60-7c3a-4e8b-b1f2-6a5c8d9e0f22"
    },
    "inactive": {
        "username": "inactive",
        "full_name": "Dormant Account",
        "email": "dormant@example.com",
        "plain_password": "inactive123",
        "role": "user",
        "disabled": True,
        "user_id": "0a1b2c3d-4e5f-4a6b-8c7d-9e0f1a2b3c44"
    }
}

fake_users_db = _fake_users_db

# Cache for hashed passwords
_password_hash_cache = {}


def _get_hashed_password(username: str) -> str:
    """Lazily hash passwords on first access"""
    if username not in _password_hash_cache:
        user = _fake_users_db.get(username)
        if user and "plain_password" in user:
            _password_hash_cache[username] = get_password_hash(user["plain_password"])
    return _password_hash_cache.get(username, "")


def get_user(db, username: str) -> Optional[UserInDB]:
    if username in db:
        user_dict = db[username].copy()
        if "plain_password" in user_dict:
            user_dict["hashed_password"] = _get_hashed_password(username)
            del user_dict["plain_password"]
        return UserInDB(**user_dict)
    return None


async def get_current_principal(token: Optional[str] = Depends(oauth2_scheme)) -> Optional[User]:
    """Resolve the bearer token to a principal; ``None`` when no token is sent"""
    if token is None:
        return None
    try:
        payload = decode_access_token(token)
        username = payload.get("sub")
        if username is None:
            raise AuthenticationRequired("Could not validate credentials")
        token_data = TokenData(username=username)
    except JWTError:
        raise AuthenticationRequired("Could not validate credentials")

    user = get_user(_fake_users_db, username=token_data.username)
    if user is None:
        raise AuthenticationRequired("Could not validate credentials")
    if user.disabled:
        raise HTTPException(status_code=400, detail="Inactive user")
    return User(**user.model_dump(exclude={"hashed_password"}))


async def get_current_active_user(principal: Optional[User] = Depends(get_current_principal)) -> User:
    if principal is None:
        raise AuthenticationRequired()
    return principal
