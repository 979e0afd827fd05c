"""Admin authentication: bcrypt password hashes and JWT bearer tokens."""
import os
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

SECRET_KEY = os.getenv("SECRET_KEY", "supersecretkeychange")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 8))

USER_COLLECTION = "user"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def authenticate(database, email: str, password: str) -> Optional[dict]:
    if database is None:
        return None
    user = database[USER_COLLECTION].find_one({"email": email})
    if not user or not verify_password(password, user["password"]):
        return None
    return user


def token_for(user: dict) -> str:
    return create_access_token({
        "sub": str(user["_id"]),
        "email": user["email"],
        "admin": bool(user.get("admin")),
    })


async def get_current_user(token: str = Depends(oauth2_scheme)):
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise credentials_exception
    if payload.get("sub") is None:
        raise credentials_exception
    return {"id": payload["sub"], "email": payload.get("email", ""), "admin": bool(payload.get("admin"))}


async def require_admin(user=Depends(get_current_user)):
    if not user["admin"]:
        raise HTTPException(status_code=403, detail="Admin access required")
    return user


def upsert_admin(database, email: str, password: Optional[str] = None, admin: bool = True) -> str:
    """Create the user (when a password is given) and set its admin flag."""
    if database is None:
        raise Exception("Database not available. Check DATABASE_URL and DATABASE_NAME environment variables.")
    changes = {"email": email, "admin": admin, "updated_at": datetime.now(timezone.utc)}
    if password:
        changes["password"] = get_password_hash(password)
    existing = database[USER_COLLECTION].find_one({"email": email})
    if existing is None:
        if not password:
            raise ValueError(f"No user {email}; a password is required to create it")
        changes["created_at"] = changes["updated_at"]
        return str(database[USER_COLLECTION].insert_one(changes).inserted_id)
    database[USER_COLLECTION].update_one({"_id": existing["_id"]}, {"$set": changes})
    return str(existing["_id"])
