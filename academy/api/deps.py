import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from academy.core.security import decode_access_token
from academy.db.session import get_db
from academy.models.admin import Admin
from academy.models.student import Student

bearer_scheme = HTTPBearer(auto_error=False)

KNOWN_ROLES = ("admin", "student")


def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> dict:
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing authorization token")

    token = credentials.credentials
    try:
        payload = decode_access_token(token)
    except jwt.InvalidTokenError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc

    if not payload.get("sub") or payload.get("role", "admin") not in KNOWN_ROLES:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload")
    return payload


def get_current_admin(
    principal: dict = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> Admin:
    if principal.get("role", "admin") != "admin":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")

    admin = db.get(Admin, principal["sub"])
    if not admin:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Admin not found")
    return admin


def get_current_student(
    principal: dict = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> Student:
    if principal.get("role") != "student":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Student access required")

    student = db.get(Student, principal["sub"])
    if not student or not student.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Student not found")
    return student
