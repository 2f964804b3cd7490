"""Value objects shared by the repositories, the session layer and the API."""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional


@dataclass
class Account:
    id: str
    username: str
    email: str
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row) -> "Account":
        return cls(
            id=row["id"],
            username=row["username"],
            email=row["email"],
            created_at=row["created_at"],
        )


@dataclass
class Session:
    account: Account
    email: str

    def to_dict(self) -> Dict[str, Any]:
        return {"account": asdict(self.account), "email": self.email}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Session":
        account = data["account"]
        return cls(
            account=Account(
                id=account["id"],
                username=account["username"],
                email=account["email"],
                created_at=account.get("created_at"),
            ),
            email=data["email"],
        )


@dataclass
class LocationSnapshot:
    """Feed data captured when a user bookmarks a location."""

    id: str
    name: str
    image_url: Optional[str] = None
    rating: Optional[float] = None
    description: Optional[str] = None


@dataclass
class SavedLocation:
    id: str
    account_id: str
    location_id: str
    location_name: str
    image_url: Optional[str]
    rating: Optional[float]
    description: Optional[str]
    saved_at: str


@dataclass
class VisitedLocation:
    id: str
    location_id: str
    location_name: str
    image_url: Optional[str]
    rating: int
    review_text: Optional[str]
    visited_at: str


@dataclass
class VisitStats:
    visited: int = 0
    reviews: int = 0


@dataclass
class Result:
    success: bool
    error: Optional[str] = None
    reason: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, **data) -> "Result":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, exc) -> "Result":
        return cls(success=False, error=exc.message, reason=exc.reason)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class AuthResult:
    session: Optional[Session] = None
    error: Optional[Dict[str, str]] = None

    @classmethod
    def fail(cls, exc) -> "AuthResult":
        return cls(session=None, error={"message": exc.message, "reason": exc.reason})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session": self.session.to_dict() if self.session else None,
            "error": self.error,
        }
